from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml
from pydantic import ValidationError

from apex_academy.errors import MalformedDocument
from apex_academy.ingest.utils import file_slug
from apex_academy.models.category import Category, DocumentKind
from apex_academy.models.document import Document
from apex_academy.models.frontmatter import FRONTMATTER_SCHEMAS, BaseFrontmatter

logger = logging.getLogger(__name__)

DELIMITER = "---"


def split_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """Split raw file text into a metadata mapping and the markdown body."""

    lines = text.lstrip("\ufeff").split("\n")
    if not lines or lines[0].rstrip() != DELIMITER:
        raise MalformedDocument(f"Document must start with a '{DELIMITER}' frontmatter delimiter")

    end_index = None
    for index in range(1, len(lines)):
        if lines[index].rstrip() == DELIMITER:
            end_index = index
            break
    if end_index is None:
        raise MalformedDocument(f"Frontmatter is not closed with '{DELIMITER}'")

    block = "\n".join(lines[1:end_index])
    try:
        metadata = yaml.safe_load(block) if block.strip() else {}
    except yaml.YAMLError as exc:
        raise MalformedDocument(f"Frontmatter is not valid YAML: {exc}") from exc
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise MalformedDocument("Frontmatter must be a mapping of keys to values")

    body = "\n".join(lines[end_index + 1:])
    return {str(key): value for key, value in metadata.items()}, body


def parse_frontmatter(
    metadata: Dict[str, Any],
    kind: DocumentKind,
    *,
    source: Path | str | None = None,
) -> BaseFrontmatter:
    """Validate a metadata mapping against the closed schema for ``kind``."""

    schema = FRONTMATTER_SCHEMAS[kind]
    unknown = sorted(set(metadata) - schema.known_keys())
    if unknown:
        logger.warning("Ignoring unknown frontmatter keys %s in %s", ", ".join(unknown), source or "<string>")
    try:
        return schema.model_validate(metadata)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in exc.errors()
        )
        raise MalformedDocument(f"Invalid {kind.value} frontmatter: {problems}", source) from exc


def parse_document(path: Path, *, kind: DocumentKind, category: Category) -> Document:
    """Read one content file into a Document. The directory decides the category."""

    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedDocument(f"Unable to read document: {exc}", path) from exc

    slug = file_slug(path.stem)
    if not slug:
        raise MalformedDocument(f"Cannot derive a slug from file name '{path.name}'", path)

    try:
        metadata, body = split_frontmatter(text)
    except MalformedDocument as exc:
        exc.path = path
        raise

    frontmatter = parse_frontmatter(metadata, kind, source=path)
    declared = getattr(frontmatter, "section", None) or getattr(frontmatter, "category", None)
    if declared is not None and declared != category:
        logger.warning(
            "%s declares category '%s' but lives under '%s'; using the directory",
            path,
            declared.value,
            category.value,
        )

    logger.debug("Parsed %s document %s/%s", kind.value, category.value, slug)
    return Document(
        kind=kind,
        category=category,
        slug=slug,
        frontmatter=frontmatter,
        body=body,
        source_path=path,
    )


__all__ = ["DELIMITER", "parse_document", "parse_frontmatter", "split_frontmatter"]
