"""Pygments lexers for the two Salesforce languages Pygments does not ship.

Each lexer is an ordered ``(pattern, token)`` table tried at every position;
the first match wins. Strings and comments come ahead of keywords so a keyword
inside a literal is consumed as part of it.
"""

from __future__ import annotations

import re

from pygments.lexer import RegexLexer, bygroups, default, using, words
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Whitespace,
)


def phrases(*items: str) -> str:
    """Alternation of whole words or phrases; a space matches any whitespace run."""

    ordered = sorted(items, key=len, reverse=True)
    body = "|".join(re.escape(item).replace(r"\ ", r"\s+") for item in ordered)
    return rf"\b(?:{body})\b"


SOQL_KEYWORDS = (
    "SELECT", "FROM", "WHERE", "ORDER BY", "GROUP BY", "GROUP BY ROLLUP", "GROUP BY CUBE",
    "HAVING", "LIMIT", "OFFSET", "WITH", "SECURITY_ENFORCED", "USER_MODE", "SYSTEM_MODE",
    "FOR VIEW", "FOR REFERENCE", "FOR UPDATE", "UPDATE TRACKING", "UPDATE VIEWSTAT",
    "AND", "OR", "NOT", "IN", "NOT IN", "LIKE", "INCLUDES", "EXCLUDES", "ASC", "DESC",
    "NULLS FIRST", "NULLS LAST", "TYPEOF", "WHEN", "THEN", "ELSE", "END", "USING SCOPE",
    "ALL ROWS", "FIND", "RETURNING", "IN ALL FIELDS", "IN NAME FIELDS",
)

SOQL_DATE_LITERALS = (
    "YESTERDAY", "TODAY", "TOMORROW", "LAST_WEEK", "THIS_WEEK", "NEXT_WEEK",
    "LAST_MONTH", "THIS_MONTH", "NEXT_MONTH", "LAST_90_DAYS", "NEXT_90_DAYS",
    "THIS_QUARTER", "LAST_QUARTER", "NEXT_QUARTER", "THIS_YEAR", "LAST_YEAR", "NEXT_YEAR",
    "THIS_FISCAL_QUARTER", "LAST_FISCAL_QUARTER", "NEXT_FISCAL_QUARTER",
    "THIS_FISCAL_YEAR", "LAST_FISCAL_YEAR", "NEXT_FISCAL_YEAR",
)

SOQL_PARAMETRIC_DATE_LITERALS = (
    "LAST_N_DAYS", "NEXT_N_DAYS", "N_DAYS_AGO", "LAST_N_WEEKS", "NEXT_N_WEEKS", "N_WEEKS_AGO",
    "LAST_N_MONTHS", "NEXT_N_MONTHS", "N_MONTHS_AGO", "LAST_N_QUARTERS", "NEXT_N_QUARTERS",
    "N_QUARTERS_AGO", "LAST_N_YEARS", "NEXT_N_YEARS", "N_YEARS_AGO",
    "LAST_N_FISCAL_QUARTERS", "NEXT_N_FISCAL_QUARTERS", "N_FISCAL_QUARTERS_AGO",
    "LAST_N_FISCAL_YEARS", "NEXT_N_FISCAL_YEARS", "N_FISCAL_YEARS_AGO",
)

SOQL_FUNCTIONS = (
    "AVG", "COUNT", "COUNT_DISTINCT", "MIN", "MAX", "SUM", "CALENDAR_MONTH", "CALENDAR_QUARTER",
    "CALENDAR_YEAR", "DAY_IN_MONTH", "DAY_IN_WEEK", "DAY_IN_YEAR", "DAY_ONLY", "FISCAL_MONTH",
    "FISCAL_QUARTER", "FISCAL_YEAR", "HOUR_IN_DAY", "WEEK_IN_MONTH", "WEEK_IN_YEAR", "FORMAT",
    "CONVERTCURRENCY", "CONVERTTIMEZONE", "TOLABEL", "DISTANCE", "GEOLOCATION", "GROUPING",
)

APEX_KEYWORDS = (
    "abstract", "after", "before", "break", "catch", "class", "continue", "delete", "do", "else",
    "enum", "extends", "final", "finally", "for", "get", "global", "if", "implements", "insert",
    "instanceof", "interface", "merge", "new", "null", "on", "override", "private", "protected",
    "public", "return", "set", "static", "super", "switch", "testmethod", "this", "throw",
    "transient", "trigger", "try", "undelete", "update", "upsert", "virtual", "void",
    "webservice", "when", "while", "with", "without", "sharing", "inherited",
)

# Words after which the next identifier names a type.
TYPE_INTRODUCERS = ("class", "interface", "enum", "new", "implements", "extends", "trigger")

_BLOCK_COMMENT = (r"/\*[\s\S]*?(?:\*/|\Z)", Comment.Multiline)
_LINE_COMMENT = (r"//[^\n]*", Comment.Single)
_SINGLE_QUOTED = (r"'(?:\\[\s\S]|[^\\'\n])*'", String.Single)
_DOUBLE_QUOTED = (r'"(?:\\[\s\S]|[^\\"\n])*"', String.Double)


class SoqlLexer(RegexLexer):
    """Salesforce Object Query Language, case-insensitive."""

    name = "SOQL"
    aliases = ["soql", "sosl"]
    filenames = ["*.soql"]
    flags = re.IGNORECASE | re.MULTILINE

    tokens = {
        "root": [
            (r"\s+", Whitespace),
            _BLOCK_COMMENT,
            _LINE_COMMENT,
            _SINGLE_QUOTED,
            _DOUBLE_QUOTED,
            (phrases(*SOQL_PARAMETRIC_DATE_LITERALS) + r"\s*:\s*\d+", Keyword),
            (r":\s*[A-Za-z_]\w*(?:\.\w+)*", Name.Variable),
            (phrases(*SOQL_FUNCTIONS) + r"(?=\s*\()", Name.Function),
            (phrases(*SOQL_KEYWORDS, *SOQL_DATE_LITERALS), Keyword),
            (words(("true", "false", "null"), prefix=r"\b", suffix=r"\b"), Keyword.Constant),
            (r"\d+(?:\.\d+)?\b", Number),
            (r"[<>]=?|!=|=|[+\-*/%]", Operator),
            (r"[{}\[\]();,.]", Punctuation),
            (r"\w+", Name),
        ],
    }


class ApexLexer(RegexLexer):
    """Apex with inline SOQL handed to :class:`SoqlLexer`."""

    name = "Apex"
    aliases = ["apex"]
    filenames = ["*.cls", "*.trigger", "*.apex"]
    flags = re.IGNORECASE | re.MULTILINE

    tokens = {
        "root": [
            (r"\s+", Whitespace),
            _BLOCK_COMMENT,
            _LINE_COMMENT,
            _SINGLE_QUOTED,
            _DOUBLE_QUOTED,
            (r"(\[)(\s*(?:SELECT|FIND)\b[^\]]*)(\])", bygroups(Punctuation, using(SoqlLexer), Punctuation)),
            (r"@\w+", Name.Decorator),
            (
                words(TYPE_INTRODUCERS, prefix=r"\b", suffix=r"(\s+)"),
                bygroups(Keyword.Declaration, Whitespace),
                "type-name",
            ),
            (words(("true", "false"), prefix=r"\b", suffix=r"\b"), Keyword.Constant),
            (words(APEX_KEYWORDS, prefix=r"\b", suffix=r"\b"), Keyword),
            (r"[A-Za-z_]\w*(?=\s*\()", Name.Function),
            (r"\b0x[\da-f]+\b|(?:\b\d+\.?\d*|\B\.\d+)(?:e[+-]?\d+)?[dfl]?\b", Number),
            (r"[<>]=?|[!=]=?=?|--?|\+\+?|&&?|\|\|?|[?*/~^%]", Operator),
            (r"[{}\[\];(),.:]", Punctuation),
            (r"[A-Za-z_]\w*", Name),
        ],
        "type-name": [
            (r"[A-Za-z_]\w*", Name.Class, "#pop"),
            default("#pop"),
        ],
    }


__all__ = [
    "APEX_KEYWORDS",
    "ApexLexer",
    "SOQL_DATE_LITERALS",
    "SOQL_FUNCTIONS",
    "SOQL_KEYWORDS",
    "SOQL_PARAMETRIC_DATE_LITERALS",
    "SoqlLexer",
    "phrases",
]
