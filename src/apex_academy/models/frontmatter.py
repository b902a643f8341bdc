"""Closed frontmatter schemas, one per document kind."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from apex_academy.models.category import Category, DocumentKind


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ExamWeight(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BaseFrontmatter(BaseModel):
    """Fields shared by every document kind."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    title: str
    description: str
    difficulty: Difficulty
    read_time: Optional[str] = Field(default=None, alias="readTime")
    prerequisites: List[str] = Field(default_factory=list)
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")

    @field_validator("title", "description")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("difficulty", mode="before")
    @classmethod
    def _lower_difficulty(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("last_updated", mode="before")
    @classmethod
    def _date_to_string(cls, value: object) -> object:
        # YAML turns unquoted 2024-01-31 into a date object.
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return value

    @field_validator("prerequisites", mode="before")
    @classmethod
    def _coerce_list(cls, value: object) -> object:
        return _as_string_list(value)

    @property
    def tag_set(self) -> FrozenSet[str]:
        return frozenset()

    @property
    def related_slugs(self) -> Tuple[str, ...]:
        return ()

    @property
    def sort_order(self) -> int:
        return 0

    @classmethod
    def known_keys(cls) -> FrozenSet[str]:
        keys = set(cls.model_fields)
        keys.update(field.alias for field in cls.model_fields.values() if field.alias)
        return frozenset(keys)


class TopicFrontmatter(BaseFrontmatter):
    """Curriculum topic metadata."""

    section: Optional[Category] = None
    order: int = 0
    overview: str = ""
    concepts: List[str] = Field(default_factory=list)
    related_topics: List[str] = Field(default_factory=list, alias="relatedTopics")
    exam_weight: ExamWeight = Field(default=ExamWeight.MEDIUM, alias="examWeight")

    @field_validator("concepts", "related_topics", mode="before")
    @classmethod
    def _coerce_lists(cls, value: object) -> object:
        return _as_string_list(value)

    @field_validator("exam_weight", mode="before")
    @classmethod
    def _lower_weight(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value

    @property
    def tag_set(self) -> FrozenSet[str]:
        return frozenset(self.concepts)

    @property
    def related_slugs(self) -> Tuple[str, ...]:
        return tuple(self.related_topics)

    @property
    def sort_order(self) -> int:
        return self.order


class TutorialFrontmatter(BaseFrontmatter):
    """Legacy tutorial metadata."""

    category: Optional[Category] = None
    tags: List[str] = Field(default_factory=list)
    related_tutorials: List[str] = Field(default_factory=list, alias="relatedTutorials")
    featured: bool = False

    @field_validator("tags", "related_tutorials", mode="before")
    @classmethod
    def _coerce_lists(cls, value: object) -> object:
        return _as_string_list(value)

    @property
    def tag_set(self) -> FrozenSet[str]:
        return frozenset(self.tags)

    @property
    def related_slugs(self) -> Tuple[str, ...]:
        return tuple(self.related_tutorials)


def _as_string_list(value: object) -> object:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    return value


FRONTMATTER_SCHEMAS: dict[DocumentKind, Type[BaseFrontmatter]] = {
    DocumentKind.TOPIC: TopicFrontmatter,
    DocumentKind.TUTORIAL: TutorialFrontmatter,
}


__all__ = [
    "BaseFrontmatter",
    "Difficulty",
    "ExamWeight",
    "FRONTMATTER_SCHEMAS",
    "TopicFrontmatter",
    "TutorialFrontmatter",
]
