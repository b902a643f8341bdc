"""Syntax highlighting on Pygments, with project lexers for Apex and SOQL."""

from .formatter import TOKEN_CLASSES, TokenSpanFormatter, token_class
from .highlighter import Highlighter, builtin_lexers, lexer_table
from .lexers import ApexLexer, SoqlLexer

__all__ = [
    "ApexLexer",
    "Highlighter",
    "SoqlLexer",
    "TOKEN_CLASSES",
    "TokenSpanFormatter",
    "builtin_lexers",
    "lexer_table",
    "token_class",
]
