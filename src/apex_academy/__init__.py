"""Apex Academy content pipeline."""

from .errors import ContentError, DuplicateSlug, MalformedDocument, RenderError
from .models.category import Category, DocumentKind
from .models.document import Document, RenderedDocument
from .repository import ContentRepository, LoadReport, RepositoryConfig

__all__ = [
    "Category",
    "ContentError",
    "ContentRepository",
    "Document",
    "DocumentKind",
    "DuplicateSlug",
    "LoadReport",
    "MalformedDocument",
    "RenderError",
    "RenderedDocument",
    "RepositoryConfig",
]
