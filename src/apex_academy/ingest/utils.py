from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Set, Tuple


_SLUG_PATTERN = re.compile(r"[^a-z0-9\s-]")
_SEPARATOR_PATTERN = re.compile(r"[\s_-]+")
_FILE_SLUG_PATTERN = re.compile(r"[^a-z0-9-]+")

_FENCE_OPEN = re.compile(r"^(?P<indent> *)(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_FENCE_CLOSE = re.compile(r"^ *(?P<fence>`{3,}|~{3,})[ \t]*$")
# One blockquote level: up to three spaces, ">" and an optional space.
_QUOTE_MARKER = re.compile(r" {0,3}> ?")

_IMAGE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_REF_LINK = re.compile(r"\[([^\]]+)\]\[[^\]]*\]")
_BOLD = re.compile(r"(\*\*|__)(.+?)\1")
_ITALIC = re.compile(r"(?<![\w*])([*_])(?!\s)(.+?)(?<!\s)\1(?![\w*])")
_STRIKE = re.compile(r"~~(.+?)~~")
_INLINE_CODE = re.compile(r"(`+)(.+?)\1")
_HTML_TAG = re.compile(r"</?[A-Za-z][^>]*>")


def slugify(text: str, fallback: str = "section") -> str:
    """Create an anchor-friendly slug from heading text."""

    slug = _SLUG_PATTERN.sub("", text.lower())
    slug = _SEPARATOR_PATTERN.sub("-", slug).strip("-")
    return slug or fallback


def file_slug(stem: str) -> str:
    """Slug for a content file name; empty when the stem has no usable characters."""

    return _FILE_SLUG_PATTERN.sub("-", stem.strip().lower()).strip("-")


class SlugRegistry:
    """Hands out ids that are unique within one document."""

    def __init__(self, reserved: Sequence[str] = ()) -> None:
        self._taken: Set[str] = set(reserved)

    def claim(self, text: str, position: int) -> str:
        base = slugify(text, fallback="")
        if not base:
            base = f"section-{position}"
        candidate = base
        suffix = 2
        while candidate in self._taken:
            candidate = f"{base}-{suffix}"
            suffix += 1
        self._taken.add(candidate)
        return candidate


def strip_inline_markdown(text: str) -> str:
    """Drop emphasis, inline code, link and HTML syntax, keeping the readable text."""

    text = _IMAGE.sub(r"\1", text)
    text = _LINK.sub(r"\1", text)
    text = _REF_LINK.sub(r"\1", text)
    text = _INLINE_CODE.sub(lambda match: match.group(2).strip(), text)
    text = _BOLD.sub(r"\2", text)
    text = _STRIKE.sub(r"\1", text)
    text = _ITALIC.sub(r"\2", text)
    text = _HTML_TAG.sub("", text)
    return text.strip()


@dataclass(frozen=True, slots=True)
class FencedBlock:
    """A fenced code block located by line index. ``end`` is exclusive.

    ``depth`` counts the blockquote markers in front of the fence and ``indent``
    the spaces after them (list item content sits at four or more).
    """

    start: int
    end: int
    info: str
    code: str
    closed: bool
    depth: int = 0
    indent: int = 0

    @property
    def language(self) -> str:
        parts = self.info.split()
        return parts[0] if parts else ""

    @property
    def prefix(self) -> str:
        """Container prefix that keeps a replacement line inside the same list item or quote."""

        return "> " * self.depth + " " * self.indent


def scan_fences(lines: Sequence[str]) -> List[FencedBlock]:
    """Locate ``` and ~~~ fenced blocks, including those nested in list items and blockquotes.

    A top-level fence left open runs to the end of input. A fence inside a
    blockquote also ends where the quote does.
    """

    blocks: List[FencedBlock] = []
    index = 0
    while index < len(lines):
        depth, content = _split_quote(lines[index])
        opening = _FENCE_OPEN.match(content)
        if not opening:
            index += 1
            continue
        fence = opening.group("fence")
        info = opening.group("info").strip()
        if fence[0] == "`" and "`" in info:
            index += 1
            continue

        indent = len(opening.group("indent"))
        body: List[str] = []
        cursor = index + 1
        closed = False
        end: int | None = None
        while cursor < len(lines):
            inner = _strip_quote(lines[cursor], depth)
            if inner is None:
                closed = True
                end = cursor
                break
            closing = _FENCE_CLOSE.match(inner)
            if closing and closing.group("fence")[0] == fence[0] and len(closing.group("fence")) >= len(fence):
                closed = True
                end = cursor + 1
                break
            body.append(_dedent(inner, indent))
            cursor += 1

        if end is None:
            end = cursor
            closed = depth > 0
        blocks.append(
            FencedBlock(
                start=index,
                end=end,
                info=info,
                code="\n".join(body),
                closed=closed,
                depth=depth,
                indent=indent,
            )
        )
        index = end
    return blocks


def prose_lines(lines: Sequence[str]) -> Iterator[Tuple[int, str]]:
    """Yield (index, line) for every line outside fenced code."""

    blocks = scan_fences(lines)
    cursor = 0
    for block in blocks:
        for index in range(cursor, block.start):
            yield index, lines[index]
        cursor = block.end
    for index in range(cursor, len(lines)):
        yield index, lines[index]


def strip_fences(text: str) -> str:
    lines = text.splitlines()
    return "\n".join(line for _, line in prose_lines(lines))


def _dedent(line: str, indent: int) -> str:
    removable = len(line) - len(line.lstrip(" "))
    return line[min(indent, removable):]


def _split_quote(line: str) -> Tuple[int, str]:
    depth = 0
    while True:
        marker = _QUOTE_MARKER.match(line)
        if marker is None:
            return depth, line
        depth += 1
        line = line[marker.end():]


def _strip_quote(line: str, depth: int) -> Optional[str]:
    """Drop ``depth`` quote markers; ``None`` when the line has left the quote."""

    for _ in range(depth):
        marker = _QUOTE_MARKER.match(line)
        if marker is None:
            return None
        line = line[marker.end():]
    return line


__all__ = [
    "FencedBlock",
    "SlugRegistry",
    "file_slug",
    "prose_lines",
    "scan_fences",
    "slugify",
    "strip_fences",
    "strip_inline_markdown",
]
