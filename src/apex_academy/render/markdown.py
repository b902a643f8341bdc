"""Markdown to HTML with the site's heading, code, callout and table conventions.

Python-Markdown does the generic conversion. A project extension adds:

* fenced code collection before whitespace normalisation, so tabs and trailing
  spaces reach the copy payload untouched;
* heading ids taken from the table of contents, in document order;
* callout boxes for blockquotes that open with an emoji and a label;
* styling hooks for tables.
"""

from __future__ import annotations

import logging
import re
import uuid
import xml.etree.ElementTree as etree
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Sequence, Tuple

import markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor

from apex_academy.errors import RenderError
from apex_academy.highlight.highlighter import Highlighter
from apex_academy.ingest.toc_builder import TOCBuilder
from apex_academy.ingest.utils import SlugRegistry, scan_fences, slugify
from apex_academy.models.document import TocEntry
from apex_academy.render.code_blocks import normalize_language, render_code_block

logger = logging.getLogger(__name__)

_HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
_ESCAPED_CHAR = re.compile("\x02(\\d+)\x03")
_STASH_PLACEHOLDER = re.compile("\x02[^\x03]*\x03")

_CALLOUT_MARKER = re.compile(
    r"^\s*(?P<icon>\U0001f4a1|\u26a0\ufe0f?|\U0001f480|\u2139\ufe0f?|\u2705|\U0001f3af)\s*"
    r"(?P<label>TIP|WARNING|ERROR|INFO|EXAM[-_]TRAP|BEST[-_]PRACTICE)\s*:\s*",
    re.IGNORECASE,
)

# Level-1 headings whose text mentions one of these get a section class.
_SECTION_CLASSES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("core concepts",), "section-concepts"),
    (("code examples",), "section-code"),
    (("common gotchas", "gotcha"), "section-gotchas"),
    (("exam tips", "exam"), "section-exam"),
    (("practice exercises", "exercise"), "section-practice"),
    (("type conversion", "casting"), "section-conversion"),
    (("constants", "final"), "section-constants"),
    (("related topics",), "section-related"),
)


@dataclass(slots=True)
class MarkdownRendererConfig:
    """Options for the Python-Markdown pipeline."""

    extensions: Sequence[str] = ("tables", "sane_lists")
    tab_length: int = 4
    section_classes: bool = True


@dataclass(slots=True)
class RenderResult:
    html: str
    table_of_contents: List[TocEntry] = field(default_factory=list)


def section_class(title: str) -> str:
    lowered = title.lower()
    for needles, css_class in _SECTION_CLASSES:
        if any(needle in lowered for needle in needles):
            return css_class
    return ""


class _FenceCollector(Preprocessor):
    """Swap fenced blocks for marker lines before whitespace normalisation."""

    def __init__(self, md: markdown.Markdown, extension: "ContentExtension") -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, lines: List[str]) -> List[str]:
        blocks = scan_fences(lines)
        if not blocks:
            return lines

        output: List[str] = []
        cursor = 0
        for block in blocks:
            if not block.closed:
                raise RenderError(
                    f"Unterminated code fence opened on line {block.start + 1}",
                    self.extension.source,
                )
            output.extend(lines[cursor:block.start])
            marker = self.extension.add_code_block(block.code, normalize_language(block.info))
            # Blank lines carry the quote markers so the block stays in its container.
            blank = block.prefix.rstrip()
            output.extend([blank, block.prefix + marker, blank])
            cursor = block.end
        output.extend(lines[cursor:])
        return output


class _FenceStasher(Preprocessor):
    """Replace marker lines with rendered code blocks held in the HTML stash."""

    def __init__(self, md: markdown.Markdown, extension: "ContentExtension") -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, lines: List[str]) -> List[str]:
        if not self.extension.code_blocks:
            return lines
        output: List[str] = []
        for line in lines:
            found = self.extension.marker_pattern.search(line)
            html = self.extension.code_blocks.get(found.group(0)) if found else None
            if html is None:
                output.append(line)
                continue
            output.append(line[:found.start()] + self.md.htmlStash.store(html))
        return output


class _ContentTreeprocessor(Treeprocessor):
    def __init__(self, md: markdown.Markdown, extension: "ContentExtension") -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: etree.Element) -> None:
        self.extension.table_of_contents = self._decorate_headings(root)
        self._convert_callouts(root)
        self._style_tables(root)

    # ------------------------------------------------------------------ headings
    def _decorate_headings(self, root: etree.Element) -> List[TocEntry]:
        expected: Deque[TocEntry] = deque(self.extension.expected_toc)
        registry = SlugRegistry(reserved=[entry.id for entry in expected])
        used: List[TocEntry] = []

        headings = [element for element in root.iter() if element.tag in _HEADING_TAGS]
        for position, element in enumerate(headings, start=1):
            level = int(element.tag[1])
            text = _plain_text(element)
            entry = _take_matching(expected, level, text)
            if entry is None:
                entry = TocEntry(id=registry.claim(text, position), title=text, level=level)
                logger.debug("Heading '%s' was not in the extracted outline; assigned id '%s'", text, entry.id)
            used.append(entry)
            self._decorate_heading(element, entry)

        if expected:
            logger.debug("%d outline entries had no rendered heading", len(expected))
        return used

    def _decorate_heading(self, element: etree.Element, entry: TocEntry) -> None:
        classes = [f"heading-{entry.level}"]
        if entry.level == 1 and self.extension.config.section_classes:
            extra = section_class(entry.title)
            if extra:
                classes.append(extra)
        element.set("id", entry.id)
        element.set("class", " ".join(classes))

        anchor = etree.Element("a", {"href": f"#{entry.id}", "class": "anchor-link"})
        anchor.text = element.text
        element.text = None
        for child in list(element):
            element.remove(child)
            anchor.append(child)
        element.append(anchor)

    # ------------------------------------------------------------------ callouts
    def _convert_callouts(self, root: etree.Element) -> None:
        for quote in list(root.iter("blockquote")):
            first = quote[0] if len(quote) and quote[0].tag == "p" else None
            match = _CALLOUT_MARKER.match(first.text or "") if first is not None else None
            if match is None:
                quote.set("class", "blockquote")
                continue

            callout_type = match.group("label").lower().replace("_", "-")
            first.text = first.text[match.end():]
            if not first.text and not len(first):
                quote.remove(first)

            body = list(quote)
            for child in body:
                quote.remove(child)

            quote.tag = "div"
            quote.attrib.clear()
            quote.set("class", f"callout callout-{callout_type}")
            quote.set("data-callout", callout_type)
            quote.text = None

            icon = etree.SubElement(quote, "span", {"class": "callout-icon"})
            icon.text = match.group("icon")
            container = etree.SubElement(quote, "div", {"class": "callout-body"})
            title = etree.SubElement(container, "p", {"class": "callout-title"})
            title.text = callout_type.replace("-", " ").title()
            content = etree.SubElement(container, "div", {"class": "callout-content"})
            content.extend(body)

    # ------------------------------------------------------------------ tables
    def _style_tables(self, root: etree.Element) -> None:
        tables = list(root.iter("table"))
        if not tables:
            return
        parents: Dict[etree.Element, etree.Element] = {
            child: parent for parent in root.iter() for child in parent
        }
        for table in tables:
            table.set("class", "content-table")
            for row in table.iter("tr"):
                row.set("class", "table-row")
            for cell in table.iter("th"):
                cell.set("class", "table-header-cell")
            for cell in table.iter("td"):
                cell.set("class", "table-cell")

            parent = parents.get(table)
            if parent is None:
                continue
            wrapper = etree.Element("div", {"class": "table-wrapper"})
            index = list(parent).index(table)
            parent.remove(table)
            wrapper.tail = table.tail
            table.tail = None
            wrapper.append(table)
            parent.insert(index, wrapper)


class ContentExtension(Extension):
    """Per-render Python-Markdown extension; create a fresh one for every document."""

    def __init__(
        self,
        highlighter: Highlighter,
        expected_toc: Sequence[TocEntry],
        *,
        config: MarkdownRendererConfig,
        source: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.highlighter = highlighter
        self.expected_toc = list(expected_toc)
        self.config = config
        self.source = source
        self.code_blocks: Dict[str, str] = {}
        self.table_of_contents: List[TocEntry] = []
        self._marker_prefix = f"apexfence{uuid.uuid4().hex}x"
        self.marker_pattern = re.compile(re.escape(self._marker_prefix) + r"\d+$")

    def add_code_block(self, code: str, language: str) -> str:
        marker = f"{self._marker_prefix}{len(self.code_blocks)}"
        self.code_blocks[marker] = render_code_block(code, language, self.highlighter)
        return marker

    def extendMarkdown(self, md: markdown.Markdown) -> None:
        # Raw lines, ahead of normalize_whitespace (30); stash after it.
        md.preprocessors.register(_FenceCollector(md, self), "apex_fence_collector", 35)
        md.preprocessors.register(_FenceStasher(md, self), "apex_fence_stasher", 25)
        # After inline processing (20), before prettify (10).
        md.treeprocessors.register(_ContentTreeprocessor(md, self), "apex_content", 15)
        # Underlined headings are invisible to the outline scan.
        if "setextheader" in md.parser.blockprocessors:
            md.parser.blockprocessors.deregister("setextheader")


class MarkdownRenderer:
    """Convert markdown bodies to site HTML plus the matching table of contents."""

    def __init__(
        self,
        highlighter: Highlighter | None = None,
        config: MarkdownRendererConfig | None = None,
        *,
        toc_builder: TOCBuilder | None = None,
    ) -> None:
        self.highlighter = highlighter or Highlighter.default()
        self.config = config or MarkdownRendererConfig()
        self.toc_builder = toc_builder or TOCBuilder()

    def render(self, body: str, *, source: str | None = None) -> RenderResult:
        body = body.replace("\r\n", "\n").replace("\r", "\n")
        extension = ContentExtension(
            self.highlighter,
            self.toc_builder.build(body),
            config=self.config,
            source=source,
        )
        md = markdown.Markdown(
            extensions=[*self.config.extensions, extension],
            tab_length=self.config.tab_length,
            output_format="html",
        )
        try:
            html = md.convert(body)
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"Markdown conversion failed: {exc}", source) from exc
        return RenderResult(html=html, table_of_contents=extension.table_of_contents)


def _plain_text(element: etree.Element) -> str:
    text = _ESCAPED_CHAR.sub(lambda match: chr(int(match.group(1))), "".join(element.itertext()))
    return " ".join(_STASH_PLACEHOLDER.sub("", text).split())


def _take_matching(expected: Deque[TocEntry], level: int, text: str) -> Optional[TocEntry]:
    """Pop the outline entry for a rendered heading, skipping entries that never rendered."""

    wanted = slugify(text, fallback="")
    for index, entry in enumerate(expected):
        if entry.level == level and slugify(entry.title, fallback="") == wanted:
            for _ in range(index):
                expected.popleft()
            return expected.popleft()
    if expected and expected[0].level == level:
        return expected.popleft()
    return None


def markdown_to_html(body: str, highlighter: Highlighter | None = None) -> RenderResult:
    return MarkdownRenderer(highlighter).render(body)


__all__ = [
    "ContentExtension",
    "MarkdownRenderer",
    "MarkdownRendererConfig",
    "RenderResult",
    "markdown_to_html",
    "section_class",
]
