from .category import CATEGORY_INFO, KIND_CATEGORIES, Category, CategoryInfo, DocumentKind
from .document import Annotation, Document, ReadingTime, RenderedDocument, TocEntry
from .frontmatter import (
    FRONTMATTER_SCHEMAS,
    BaseFrontmatter,
    Difficulty,
    ExamWeight,
    TopicFrontmatter,
    TutorialFrontmatter,
)
from .section import SectionNode

__all__ = [
    "Annotation",
    "BaseFrontmatter",
    "CATEGORY_INFO",
    "Category",
    "CategoryInfo",
    "Difficulty",
    "Document",
    "DocumentKind",
    "ExamWeight",
    "FRONTMATTER_SCHEMAS",
    "KIND_CATEGORIES",
    "ReadingTime",
    "RenderedDocument",
    "SectionNode",
    "TocEntry",
    "TopicFrontmatter",
    "TutorialFrontmatter",
]
