from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from apex_academy.models.category import Category, DocumentKind
from apex_academy.models.frontmatter import BaseFrontmatter


@dataclass(frozen=True, slots=True)
class TocEntry:
    id: str
    title: str
    level: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "level": self.level}


@dataclass(frozen=True, slots=True)
class ReadingTime:
    words: int
    minutes: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"words": self.words, "minutes": self.minutes, "text": self.text}


@dataclass(frozen=True, slots=True)
class Annotation:
    """A note attached to one zero-based line of a code block."""

    line: int
    type: str
    content: str
    icon: str


@dataclass(frozen=True, slots=True)
class Document:
    """A parsed content file. The body is never modified after loading."""

    kind: DocumentKind
    category: Category
    slug: str
    frontmatter: BaseFrontmatter
    body: str
    source_path: Optional[Path] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.category.value, self.slug)

    @property
    def title(self) -> str:
        return self.frontmatter.title


@dataclass(frozen=True, slots=True)
class RenderedDocument:
    document: Document
    html: str
    table_of_contents: List[TocEntry] = field(default_factory=list)
    reading_time: Optional[ReadingTime] = None
    excerpt: str = ""
    error: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Shape consumed by the page layer."""

        return {
            "slug": self.document.slug,
            "category": self.document.category.value,
            "frontmatter": self.document.frontmatter.model_dump(mode="json", by_alias=True),
            "renderedHtml": self.html,
            "tableOfContents": [entry.to_dict() for entry in self.table_of_contents],
            "readingTime": self.reading_time.to_dict() if self.reading_time else None,
            "excerpt": self.excerpt,
        }


__all__ = ["Annotation", "Document", "ReadingTime", "RenderedDocument", "TocEntry"]
