import re

import pytest

from apex_academy.errors import RenderError
from apex_academy.highlight import Highlighter
from apex_academy.ingest.toc_builder import TOCBuilder, TOCBuilderConfig, extract_table_of_contents
from apex_academy.render.code_blocks import decode_copy_payload
from apex_academy.render.markdown import MarkdownRenderer, markdown_to_html, section_class

_TAG = re.compile(r"<(?P<tag>h[1-6]|div|blockquote|table|a)\b(?P<attrs>[^>]*)>")
_ATTR = re.compile(r'([\w-]+)="([^"]*)"')


def _tags(html, name):
    return [dict(_ATTR.findall(match.group("attrs"))) for match in _TAG.finditer(html) if match.group("tag") == name]


def _heading_ids(html):
    return [dict(_ATTR.findall(match.group(1)))["id"] for match in re.finditer(r"<h[1-6]\b([^>]*)>", html)]


@pytest.fixture()
def renderer():
    return MarkdownRenderer()


def test_duplicate_heading_text_gets_distinct_anchors(renderer):
    result = renderer.render("# Intro\nHello\n## Intro")

    assert [(entry.id, entry.level) for entry in result.table_of_contents] == [("intro", 1), ("intro-2", 2)]
    assert _heading_ids(result.html) == ["intro", "intro-2"]
    assert _tags(result.html, "a")[0] == {"href": "#intro", "class": "anchor-link"}


def test_heading_ids_match_extracted_table_of_contents(renderer):
    body = (
        "# Core Concepts\n\nIntro.\n\n"
        "## Data *Types*\n\n```apex\n// # not a heading\n```\n\n"
        "> ## Quoted Heading\n\n"
        "- ### Listed Heading\n\n"
        "## !!!\n\n"
        "#### Skipped Levels\n"
    )

    result = renderer.render(body)
    extracted = extract_table_of_contents(body)

    assert result.table_of_contents == extracted
    assert _heading_ids(result.html) == [entry.id for entry in extracted]
    assert len(set(_heading_ids(result.html))) == len(extracted)


def test_headings_get_level_and_section_classes(renderer):
    html = renderer.render("# Common Gotchas\n\n## Details\n\n# Something Else\n").html
    headings = _tags(html, "h1") + _tags(html, "h2")

    assert headings[0]["class"] == "heading-1 section-gotchas"
    assert headings[1]["class"] == "heading-1"
    assert headings[2]["class"] == "heading-2"


def test_section_class_lookup():
    assert section_class("Core Concepts") == "section-concepts"
    assert section_class("Exam Tips & Tricks") == "section-exam"
    assert section_class("Practice Exercises") == "section-practice"
    assert section_class("Type Casting") == "section-conversion"
    assert section_class("Introduction") == ""


def test_setext_underlines_do_not_create_headings(renderer):
    result = renderer.render("Title\n=====\n\nBody text.\n")

    assert "<h1" not in result.html
    assert result.table_of_contents == []


def test_headings_unknown_to_the_outline_get_fresh_ids():
    renderer = MarkdownRenderer(toc_builder=TOCBuilder(TOCBuilderConfig(max_depth=1)))

    result = renderer.render("# Intro\n\n## Intro\n\n## Setup\n")

    assert [entry.id for entry in result.table_of_contents] == ["intro", "intro-2", "setup"]
    assert _heading_ids(result.html) == ["intro", "intro-2", "setup"]
    assert [entry.level for entry in result.table_of_contents] == [1, 2, 2]


def test_fenced_code_is_highlighted_and_copyable(renderer):
    code = 'insert accounts;\n// comment with "quotes"'
    html = renderer.render(f"Intro.\n\n```apex\n{code}\n```\n\nAfter.\n").html

    assert '<div class="code-block-wrapper" data-language="apex">' in html
    assert '<span class="token keyword">insert</span>' in html
    payload = re.search(r'data-code="([^"]*)"', html).group(1)
    assert decode_copy_payload(payload) == code
    assert "<p>Intro.</p>" in html
    assert "<p>After.</p>" in html
    assert "<pre><code" not in html


def test_copy_payload_keeps_tabs_and_trailing_spaces(renderer):
    code = "if (x) {\n\treturn y;   \n}"

    html = renderer.render(f"~~~java\n{code}\n~~~\n").html

    payload = re.search(r'data-code="([^"]*)"', html).group(1)
    assert decode_copy_payload(payload) == code


def test_fence_without_language_renders_as_text(renderer):
    html = renderer.render("```\n<div>&</div>\n```\n").html

    assert 'data-language="text"' in html
    assert "&lt;div&gt;&amp;&lt;/div&gt;" in html


def test_code_annotations_render_under_the_block(renderer):
    body = "```apex\nfor (Account a : rows) {\n    insert a; // @exam-trap: DML in a loop\n}\n```\n"

    html = renderer.render(body).html

    assert 'class="code-annotation code-annotation-exam-trap" data-line="1"' in html
    assert "DML in a loop" in html


def test_unterminated_fence_raises_render_error(renderer):
    with pytest.raises(RenderError) as excinfo:
        renderer.render("# Title\n\n```apex\ninsert a;\n", source="apex/dml.md")

    assert "apex/dml.md" in str(excinfo.value)
    assert excinfo.value.source == "apex/dml.md"


def test_callout_blockquote(renderer):
    html = renderer.render("> \U0001f4a1 TIP: Use bind variables\n").html

    callouts = _tags(html, "div")
    callout = next(attrs for attrs in callouts if "callout" in attrs.get("class", "").split())
    assert callout["class"] == "callout callout-tip"
    assert callout["data-callout"] == "tip"
    assert '<span class="callout-icon">\U0001f4a1</span>' in html
    assert '<p class="callout-title">Tip</p>' in html
    assert "Use bind variables" in html
    assert "TIP:" not in html
    assert "<blockquote" not in html


def test_callout_keeps_remaining_quote_content(renderer):
    body = "> \u26a0\ufe0f exam_trap: Watch the limits.\n>\n> Second paragraph.\n"

    html = renderer.render(body).html

    assert 'class="callout callout-exam-trap"' in html
    assert '<p class="callout-title">Exam Trap</p>' in html
    assert "<p>Watch the limits.</p>" in html
    assert "<p>Second paragraph.</p>" in html


def test_plain_blockquote(renderer):
    html = renderer.render("> Just a quote.\n").html

    assert _tags(html, "blockquote") == [{"class": "blockquote"}]
    assert "callout" not in html


def test_tables_get_styling_hooks(renderer):
    html = renderer.render("Before.\n\n| Type | Size |\n|------|------|\n| Integer | 32 bit |\n").html

    assert re.search(r'<div class="table-wrapper">\s*<table class="content-table">', html)
    assert '<tr class="table-row">' in html
    assert '<th class="table-header-cell">Type</th>' in html
    assert '<td class="table-cell">Integer</td>' in html


def test_rendering_is_idempotent(renderer):
    body = "# A\n\n```apex\ninsert a;\n```\n\n> \u2705 BEST-PRACTICE: bulkify\n\n| x |\n|---|\n| 1 |\n"

    first = renderer.render(body)
    second = renderer.render(body)

    assert first.html == second.html
    assert first.table_of_contents == second.table_of_contents
    assert markdown_to_html(body).html == first.html


def test_empty_body(renderer):
    result = renderer.render("   \n")

    assert result.html == ""
    assert result.table_of_contents == []


def test_highlighter_failure_becomes_render_error():
    class BrokenHighlighter(Highlighter):
        def highlight(self, code, language):
            raise RuntimeError("grammar exploded")

    renderer = MarkdownRenderer(BrokenHighlighter({}))

    with pytest.raises(RenderError) as excinfo:
        renderer.render("```apex\ninsert a;\n```\n", source="apex/broken.md")

    assert "grammar exploded" in str(excinfo.value)
    assert "apex/broken.md" in str(excinfo.value)


def test_fence_inside_list_item_is_highlighted_and_copyable(renderer):
    body = "1. Step one:\n\n    ```apex\n    insert a;\n    ```\n\n2. Step two\n"

    html = renderer.render(body).html

    assert "copy-code-btn" in html
    assert '<span class="token keyword">insert</span>' in html
    payload = re.search(r'data-code="([^"]*)"', html).group(1)
    assert decode_copy_payload(payload) == "insert a;"
    item = re.search(r"<li>(.*?)</li>", html, re.DOTALL).group(1)
    assert "code-block-wrapper" in item
    assert "Step two" in html


def test_fence_inside_blockquote_is_rendered_and_kept_out_of_the_outline(renderer):
    body = "> ```python\n> # not a heading\n> x = 1\n> ```\n"

    result = renderer.render(body)

    assert result.table_of_contents == []
    assert "<h1" not in result.html
    payload = re.search(r'data-code="([^"]*)"', result.html).group(1)
    assert decode_copy_payload(payload) == "# not a heading\nx = 1"
    quote = re.search(r"<blockquote[^>]*>(.*?)</blockquote>", result.html, re.DOTALL).group(1)
    assert "code-block-wrapper" in quote


def test_crlf_line_endings_render_like_lf(renderer):
    crlf = "# Title\r\n\r\n```apex\r\ninsert a;\r\n```\r\n\r\nAfter.\r\n"

    result = renderer.render(crlf, source="crlf.md")

    assert result.html == renderer.render(crlf.replace("\r\n", "\n")).html
    assert [entry.id for entry in result.table_of_contents] == ["title"]
    payload = re.search(r'data-code="([^"]*)"', result.html).group(1)
    assert decode_copy_payload(payload) == "insert a;"
