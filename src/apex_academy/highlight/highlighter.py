from __future__ import annotations

import logging
from html import escape
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from pygments import highlight as pygments_highlight
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.token import _TokenType

from apex_academy.highlight.formatter import TokenSpanFormatter
from apex_academy.highlight.lexers import ApexLexer, SoqlLexer

logger = logging.getLogger(__name__)

# Keep the code exactly as written: no stripped or appended newlines.
LEXER_OPTIONS = {"stripnl": False, "ensurenl": False}

# Site language tag -> Pygments lexer name for the stock languages.
PYGMENTS_LANGUAGES: Dict[str, str] = {
    "java": "java",
    "javascript": "javascript",
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "typescript": "typescript",
    "ts": "typescript",
    "tsx": "typescript",
    "sql": "sql",
    "json": "json",
    "jsonc": "json",
    "css": "css",
    "markup": "html",
    "html": "html",
    "xml": "xml",
    "svg": "xml",
}

PLAIN_LANGUAGES = frozenset({"text", "plain", "plaintext", "txt"})


def builtin_lexers() -> Dict[str, Lexer]:
    """The closed set of languages the site highlights, keyed by lower-case tag."""

    table: Dict[str, Lexer] = {}
    for lexer_class in (ApexLexer, SoqlLexer):
        lexer = lexer_class(**LEXER_OPTIONS)
        for alias in lexer_class.aliases:
            table[alias] = lexer
    shared: Dict[str, Lexer] = {}
    for tag, name in PYGMENTS_LANGUAGES.items():
        if name not in shared:
            shared[name] = get_lexer_by_name(name, **LEXER_OPTIONS)
        table[tag] = shared[name]
    return table


def lexer_table(lexers: Iterable[Lexer]) -> Dict[str, Lexer]:
    """Map every alias of each lexer to it."""

    table: Dict[str, Lexer] = {}
    for lexer in lexers:
        for alias in lexer.aliases:
            table[alias.lower()] = lexer
    return table


class Highlighter:
    """Render source code as HTML spans using an explicit language-to-lexer table."""

    def __init__(self, lexers: Mapping[str, Lexer]) -> None:
        self._lexers = {name.lower(): lexer for name, lexer in lexers.items()}
        self._formatter = TokenSpanFormatter()

    @classmethod
    def default(cls) -> "Highlighter":
        return cls(builtin_lexers())

    @classmethod
    def from_lexers(cls, lexers: Iterable[Lexer]) -> "Highlighter":
        return cls(lexer_table(lexers))

    @property
    def languages(self) -> List[str]:
        return sorted(self._lexers)

    def resolve(self, language: str | None) -> Optional[Lexer]:
        if not language:
            return None
        return self._lexers.get(language.strip().lower())

    def supports(self, language: str | None) -> bool:
        return self.resolve(language) is not None

    def tokenize(self, code: str, language: str | None) -> List[Tuple[Optional[_TokenType], str]]:
        lexer = self.resolve(language)
        if lexer is None:
            return [(None, code)] if code else []
        return list(lexer.get_tokens(code))

    def highlight(self, code: str, language: str | None) -> str:
        """Highlighted HTML for ``code``; unknown languages come back escaped only."""

        lexer = self.resolve(language)
        if lexer is None:
            if language and language.lower() not in PLAIN_LANGUAGES:
                logger.debug("No lexer for language '%s'; escaping only", language)
            return escape(code)
        return pygments_highlight(code, lexer, self._formatter)


__all__ = ["Highlighter", "LEXER_OPTIONS", "PYGMENTS_LANGUAGES", "builtin_lexers", "lexer_table"]
