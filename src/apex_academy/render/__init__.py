"""Markdown to site HTML."""

from .annotations import ANNOTATION_ICONS, parse_annotations
from .code_blocks import decode_copy_payload, encode_copy_payload, render_code_block
from .markdown import MarkdownRenderer, MarkdownRendererConfig, RenderResult, markdown_to_html

__all__ = [
    "ANNOTATION_ICONS",
    "MarkdownRenderer",
    "MarkdownRendererConfig",
    "RenderResult",
    "decode_copy_payload",
    "encode_copy_payload",
    "markdown_to_html",
    "parse_annotations",
    "render_code_block",
]
