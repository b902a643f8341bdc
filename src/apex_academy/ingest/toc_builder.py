from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from apex_academy.ingest.utils import SlugRegistry, prose_lines, strip_inline_markdown
from apex_academy.models.document import TocEntry
from apex_academy.models.section import SectionNode


# Optional blockquote and list prefixes, then an ATX heading.
_HEADING_PATTERN = re.compile(
    r"^(?:\s{0,3}>\s?)*(?:\s{0,3}(?:[-*+]|\d+\.)\s+)?(?P<hashes>#{1,6})(?P<title>.*)$"
)
_CLOSING_HASHES = re.compile(r"(?<!\\)#+$")


@dataclass(slots=True)
class TOCBuilderConfig:
    """Configuration for extracting headings from markdown bodies."""

    max_depth: int = 6


class TOCBuilder:
    """Turn markdown headings (#, ##, ###, ...) into table-of-contents entries."""

    def __init__(self, config: TOCBuilderConfig | None = None) -> None:
        self.config = config or TOCBuilderConfig()

    def build(self, body: str) -> List[TocEntry]:
        headings = []
        for _, line in prose_lines(body.splitlines()):
            match = _HEADING_PATTERN.match(line)
            if not match:
                continue
            level = len(match.group("hashes"))
            if level > self.config.max_depth:
                continue
            raw_title = _CLOSING_HASHES.sub("", match.group("title")).strip()
            headings.append((level, strip_inline_markdown(raw_title)))

        registry = SlugRegistry()
        return [
            TocEntry(id=registry.claim(title, position), title=title, level=level)
            for position, (level, title) in enumerate(headings, start=1)
        ]

    def build_outline(self, body: str) -> List[SectionNode]:
        """Nest the flat entries: each heading hangs under the nearest shallower one."""

        root = SectionNode(id="", title="", level=0)
        stack: List[SectionNode] = [root]
        for entry in self.build(body):
            while stack[-1].level >= entry.level:
                stack.pop()
            node = SectionNode(id=entry.id, title=entry.title, level=entry.level)
            stack[-1].add_child(node)
            stack.append(node)

        for node in root.children:
            node.parent_id = None
        return root.children


def extract_table_of_contents(body: str) -> List[TocEntry]:
    return TOCBuilder().build(body)


__all__ = ["TOCBuilder", "TOCBuilderConfig", "extract_table_of_contents"]
