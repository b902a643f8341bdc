"""Reading content files: frontmatter, outlines, and reading time."""

from .frontmatter import parse_document, parse_frontmatter, split_frontmatter
from .reading_time import count_words, estimate_reading_time, extract_excerpt
from .toc_builder import TOCBuilder, TOCBuilderConfig, extract_table_of_contents
from .utils import SlugRegistry, file_slug, slugify

__all__ = [
    "SlugRegistry",
    "TOCBuilder",
    "TOCBuilderConfig",
    "count_words",
    "estimate_reading_time",
    "extract_excerpt",
    "extract_table_of_contents",
    "file_slug",
    "parse_document",
    "parse_frontmatter",
    "slugify",
    "split_frontmatter",
]
