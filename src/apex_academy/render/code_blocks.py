from __future__ import annotations

import re
from html import escape, unescape
from typing import List

from apex_academy.highlight.highlighter import Highlighter
from apex_academy.models.document import Annotation
from apex_academy.render.annotations import parse_annotations

_VALID_LANGUAGE = re.compile(r"^[A-Za-z0-9_+-]*$")
DEFAULT_LANGUAGE = "text"


def normalize_language(info: str | None) -> str:
    """First word of a fence info string, or ``text`` when it is missing or unsafe."""

    parts = (info or "").split()
    language = parts[0] if parts else ""
    if not language or not _VALID_LANGUAGE.match(language):
        return DEFAULT_LANGUAGE
    return language.lower()


def encode_copy_payload(code: str) -> str:
    """Encode raw code for a ``data-code`` attribute so it decodes back byte for byte."""

    return escape(code, quote=True).replace("\r", "&#13;").replace("\n", "&#10;")


def decode_copy_payload(payload: str) -> str:
    return unescape(payload)


def render_code_block(code: str, language: str, highlighter: Highlighter) -> str:
    highlighted = highlighter.highlight(code, language)
    annotations = parse_annotations(code)
    lang = escape(language, quote=True)
    parts = [
        f'<div class="code-block-wrapper" data-language="{lang}">',
        '<div class="code-block-header">'
        f'<span class="code-language-tag">{lang}</span>'
        f'<button type="button" class="copy-code-btn" data-code="{encode_copy_payload(code)}" aria-label="Copy code">'
        '<span class="copy-text">Copy</span>'
        "</button>"
        "</div>",
        f'<pre class="code-block"><code class="language-{lang}">{highlighted}</code></pre>',
    ]
    if annotations:
        parts.append(_render_annotations(annotations))
    parts.append("</div>")
    return "\n".join(parts)


def _render_annotations(annotations: List[Annotation]) -> str:
    items = [
        f'<li class="code-annotation code-annotation-{item.type}" data-line="{item.line}">'
        f'<span class="code-annotation-icon">{item.icon}</span>'
        f'<span class="code-annotation-line">Line {item.line + 1}</span>'
        f'<span class="code-annotation-content">{escape(item.content)}</span>'
        "</li>"
        for item in annotations
    ]
    return '<ul class="code-annotations">' + "".join(items) + "</ul>"


__all__ = [
    "DEFAULT_LANGUAGE",
    "decode_copy_payload",
    "encode_copy_payload",
    "normalize_language",
    "render_code_block",
]
