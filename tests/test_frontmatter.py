import logging

import pytest

from apex_academy.errors import MalformedDocument
from apex_academy.ingest.frontmatter import parse_document, parse_frontmatter, split_frontmatter
from apex_academy.models import Category, DocumentKind, TopicFrontmatter, TutorialFrontmatter

TOPIC = """---
title: Apex Variables
description: Primitive and collection types
difficulty: beginner
order: 2
concepts: [variables, casting]
lastUpdated: 2024-03-01
---
# Apex Variables

Body text.
"""


def test_split_frontmatter_returns_metadata_and_body():
    metadata, body = split_frontmatter(TOPIC)

    assert metadata["title"] == "Apex Variables"
    assert metadata["order"] == 2
    assert body == "# Apex Variables\n\nBody text.\n"


def test_split_frontmatter_tolerates_bom_and_empty_block():
    metadata, body = split_frontmatter("\ufeff---\n---\nHello")

    assert metadata == {}
    assert body == "Hello"


@pytest.mark.parametrize(
    "text",
    [
        "# No frontmatter\n",
        "---\ntitle: Unclosed\n",
        "---\ntitle: [broken\n---\nbody",
        "---\n- just\n- a list\n---\nbody",
    ],
)
def test_split_frontmatter_rejects_malformed_input(text):
    with pytest.raises(MalformedDocument):
        split_frontmatter(text)


def test_parse_frontmatter_warns_on_unknown_keys(caplog):
    metadata = {"title": "T", "description": "D", "difficulty": "beginner", "author": "someone"}

    with caplog.at_level(logging.WARNING, logger="apex_academy.ingest.frontmatter"):
        frontmatter = parse_frontmatter(metadata, DocumentKind.TUTORIAL, source="t.md")

    assert isinstance(frontmatter, TutorialFrontmatter)
    assert "author" in caplog.text


def test_parse_frontmatter_reports_missing_fields():
    with pytest.raises(MalformedDocument) as excinfo:
        parse_frontmatter({"title": "Only a title"}, DocumentKind.TOPIC, source="x.md")

    message = str(excinfo.value)
    assert "description" in message
    assert "difficulty" in message
    assert "x.md" in message


def test_parse_document_derives_slug_and_uses_directory_category(tmp_path):
    path = tmp_path / "Apex Variables.md"
    path.write_text(TOPIC.replace("order: 2", "order: 2\nsection: lwc"), encoding="utf-8")

    document = parse_document(path, kind=DocumentKind.TOPIC, category=Category.APEX)

    assert document.slug == "apex-variables"
    assert document.category is Category.APEX
    assert isinstance(document.frontmatter, TopicFrontmatter)
    assert document.frontmatter.last_updated == "2024-03-01"
    assert document.source_path == path
    assert document.body.startswith("# Apex Variables")


def test_parse_document_names_the_file_on_failure(tmp_path):
    path = tmp_path / "broken.md"
    path.write_text("no frontmatter here", encoding="utf-8")

    with pytest.raises(MalformedDocument) as excinfo:
        parse_document(path, kind=DocumentKind.TUTORIAL, category=Category.APEX)

    assert excinfo.value.path == path
    assert "broken.md" in str(excinfo.value)


def test_parse_document_rejects_undecodable_file(tmp_path):
    path = tmp_path / "binary.md"
    path.write_bytes(b"---\ntitle: \xff\xfe\n---\n")

    with pytest.raises(MalformedDocument):
        parse_document(path, kind=DocumentKind.TUTORIAL, category=Category.APEX)
