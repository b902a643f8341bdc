from __future__ import annotations

from pathlib import Path


class ContentError(Exception):
    """Base class for content pipeline failures."""


class MalformedDocument(ContentError):
    """A document's frontmatter is missing, unparseable, or fails its schema."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        message = super().__str__()
        if self.path is not None:
            return f"{message} ({self.path})"
        return message


class RenderError(ContentError):
    """Markdown-to-HTML conversion failed for a single document."""

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source

    def __str__(self) -> str:
        message = super().__str__()
        if self.source:
            return f"{message} [{self.source}]"
        return message


class DuplicateSlug(ContentError):
    """Two files in one category resolved to the same slug; the later one is kept."""

    def __init__(self, category: str, slug: str, kept: Path, discarded: Path) -> None:
        super().__init__(f"Duplicate slug '{slug}' in category '{category}'")
        self.category = category
        self.slug = slug
        self.kept = kept
        self.discarded = discarded


__all__ = ["ContentError", "DuplicateSlug", "MalformedDocument", "RenderError"]
