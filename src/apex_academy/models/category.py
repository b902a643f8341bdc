from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class Category(str, Enum):
    BASICS = "basics"
    APEX = "apex"
    LWC = "lwc"
    INTEGRATION = "integration"
    TESTING = "testing"
    INTERVIEW = "interview"


class DocumentKind(str, Enum):
    TOPIC = "topic"
    TUTORIAL = "tutorial"


@dataclass(frozen=True, slots=True)
class CategoryInfo:
    id: str
    name: str
    description: str
    icon: str = ""
    document_count: int = 0

    def with_count(self, count: int) -> "CategoryInfo":
        return CategoryInfo(
            id=self.id,
            name=self.name,
            description=self.description,
            icon=self.icon,
            document_count=count,
        )


CATEGORY_INFO: Dict[Category, CategoryInfo] = {
    Category.BASICS: CategoryInfo(
        id="basics",
        name="Salesforce Basics",
        description="Platform fundamentals every developer needs before writing code",
        icon="📘",
    ),
    Category.APEX: CategoryInfo(
        id="apex",
        name="Apex Fundamentals",
        description="Master Salesforce's powerful programming language from variables to advanced patterns",
        icon="⚡",
    ),
    Category.LWC: CategoryInfo(
        id="lwc",
        name="LWC Fundamentals",
        description="Build modern Lightning Web Components with comprehensive component patterns",
        icon="⚛️",
    ),
    Category.INTEGRATION: CategoryInfo(
        id="integration",
        name="Integration Patterns",
        description="Connect Salesforce with external systems using REST, SOAP, and platform events",
        icon="🔗",
    ),
    Category.TESTING: CategoryInfo(
        id="testing",
        name="Testing Strategies",
        description="Write comprehensive tests for bulletproof Salesforce applications",
        icon="🧪",
    ),
    Category.INTERVIEW: CategoryInfo(
        id="interview",
        name="Interview Preparation",
        description="Practice the questions Salesforce developer interviews actually ask",
        icon="🎯",
    ),
}

# Walk order per document kind; also the display order of listings.
KIND_CATEGORIES: Dict[DocumentKind, Tuple[Category, ...]] = {
    DocumentKind.TOPIC: (
        Category.BASICS,
        Category.APEX,
        Category.LWC,
        Category.INTEGRATION,
        Category.TESTING,
        Category.INTERVIEW,
    ),
    DocumentKind.TUTORIAL: (
        Category.APEX,
        Category.LWC,
        Category.INTEGRATION,
        Category.TESTING,
    ),
}


__all__ = ["CATEGORY_INFO", "Category", "CategoryInfo", "DocumentKind", "KIND_CATEGORIES"]
