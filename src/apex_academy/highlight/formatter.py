from __future__ import annotations

from html import escape
from typing import Iterable, Optional, TextIO, Tuple

from pygments.formatter import Formatter
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    _TokenType,
)

# Most specific first; a token takes the class of the first entry it falls under.
TOKEN_CLASSES: Tuple[Tuple[_TokenType, str], ...] = (
    (Keyword.Constant, "boolean"),
    (Operator.Word, "keyword"),
    (Keyword, "keyword"),
    (Comment, "comment"),
    (String, "string"),
    (Number, "number"),
    (Operator, "operator"),
    (Punctuation, "punctuation"),
    (Name.Decorator, "annotation"),
    (Name.Class, "class-name"),
    (Name.Function, "function"),
    (Name.Variable, "variable"),
    (Name.Tag, "tag"),
    (Name.Attribute, "attr-name"),
    (Name.Property, "property"),
    (Name.Entity, "entity"),
)


def token_class(token_type: _TokenType) -> Optional[str]:
    for parent, css_class in TOKEN_CLASSES:
        if token_type in parent:
            return css_class
    return None


class TokenSpanFormatter(Formatter):
    """Write each token as ``<span class="token <type>">``; untyped text is escaped only."""

    name = "Token spans"
    aliases = ["token-spans"]

    def format(self, tokensource: Iterable[Tuple[_TokenType, str]], outfile: TextIO) -> None:
        for token_type, value in tokensource:
            css_class = token_class(token_type)
            text = escape(value)
            if css_class is None:
                outfile.write(text)
            else:
                outfile.write(f'<span class="token {css_class}">{text}</span>')


__all__ = ["TOKEN_CLASSES", "TokenSpanFormatter", "token_class"]
