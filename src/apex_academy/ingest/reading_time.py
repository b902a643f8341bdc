from __future__ import annotations

import math
import re

from apex_academy.ingest.utils import strip_fences
from apex_academy.models.document import ReadingTime

DEFAULT_WORDS_PER_MINUTE = 200
DEFAULT_EXCERPT_LENGTH = 160

_HEADING_MARKER = re.compile(r"^\s{0,3}#{1,6}\s*", re.MULTILINE)
_BLOCKQUOTE_MARKER = re.compile(r"^\s*(?:>\s?)+", re.MULTILINE)
_LIST_MARKER = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+", re.MULTILINE)
_TABLE_RULE = re.compile(r"^\s*\|?(?:\s*:?-{3,}:?\s*\|?)+\s*$", re.MULTILINE)
_HORIZONTAL_RULE = re.compile(r"^\s*(?:[-*_]\s*){3,}$", re.MULTILINE)
_IMAGE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_HTML_TAG = re.compile(r"<[^>]+>")
_EMPHASIS = re.compile(r"[*_~`]+")
_WORD_CHAR = re.compile(r"[^\W_]")


def plain_text(body: str) -> str:
    """Markdown body reduced to readable prose, with fenced code removed."""

    text = strip_fences(body)
    text = _TABLE_RULE.sub(" ", text)
    text = _HORIZONTAL_RULE.sub(" ", text)
    text = _HEADING_MARKER.sub("", text)
    text = _BLOCKQUOTE_MARKER.sub("", text)
    text = _LIST_MARKER.sub("", text)
    text = _IMAGE.sub(r"\1", text)
    text = _LINK.sub(r"\1", text)
    text = _HTML_TAG.sub(" ", text)
    text = _EMPHASIS.sub("", text)
    return text.replace("|", " ")


def count_words(body: str) -> int:
    return sum(1 for token in plain_text(body).split() if _WORD_CHAR.search(token))


def estimate_reading_time(body: str, words_per_minute: int = DEFAULT_WORDS_PER_MINUTE) -> ReadingTime:
    """Whole minutes needed to read ``body``, rounded up, never below one."""

    if words_per_minute <= 0:
        raise ValueError("words_per_minute must be positive")
    words = count_words(body)
    minutes = max(1, math.ceil(words / words_per_minute))
    return ReadingTime(words=words, minutes=minutes, text=f"{minutes} min read")


def extract_excerpt(body: str, max_length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    text = " ".join(plain_text(body).split())
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.8:
        return truncated[:last_space] + "..."
    return truncated + "..."


__all__ = [
    "DEFAULT_WORDS_PER_MINUTE",
    "count_words",
    "estimate_reading_time",
    "extract_excerpt",
    "plain_text",
]
