"""Positional parameter markers.

Query text is written with JDBC-style ``?`` markers. Markers are recognised
outside string literals, double-quoted identifiers and comments, counted so
that binding past the last marker can be rejected, and rewritten to the
paramstyle of the DB-API driver in use. Square brackets are array subscripts
and constructors, not identifier quotes, so ``arr[?]`` holds a marker.
"""

import re
from enum import Enum
from functools import lru_cache
from typing import Final

__all__ = ("ParameterStyle", "ParsedQuery", "count_parameter_markers", "parse_query")


class ParameterStyle(str, Enum):
    """DB-API positional paramstyles a query can be rewritten to."""

    QMARK = "qmark"
    NUMERIC = "numeric"
    FORMAT = "format"

    def __str__(self) -> str:
        """String representation for better error messages."""
        return self.value


_TOKEN_PATTERN: Final = re.compile(
    r"""
    (?P<skip>
        --[^\n]*
        | /\*[\s\S]*?\*/
        | '(?:[^']|'')*'
        | "[^"]*"
    )
    | (?P<marker>\?)
    """,
    re.VERBOSE,
)


class ParsedQuery:
    """Query text rewritten for a paramstyle, with its marker count."""

    __slots__ = ("marker_count", "original_sql", "sql", "style")

    def __init__(self, original_sql: str, sql: str, marker_count: int, style: ParameterStyle) -> None:
        self.original_sql = original_sql
        self.sql = sql
        self.marker_count = marker_count
        self.style = style

    def __repr__(self) -> str:
        return f"ParsedQuery(sql={self.sql!r}, marker_count={self.marker_count}, style={self.style!s})"


def _placeholder(style: ParameterStyle, ordinal: int) -> str:
    if style is ParameterStyle.NUMERIC:
        return f":{ordinal}"
    if style is ParameterStyle.FORMAT:
        return "%s"
    return "?"


@lru_cache(maxsize=1024)
def parse_query(sql: str, style: ParameterStyle = ParameterStyle.QMARK) -> ParsedQuery:
    """Count the ``?`` markers of ``sql`` and rewrite them for ``style``.

    With the ``format`` style every literal ``%`` is doubled, as drivers using
    it interpret ``%`` anywhere in the text once parameters are supplied.

    Args:
        sql: Query text with ``?`` markers.
        style: Target paramstyle.

    Returns:
        The rewritten query and its marker count.
    """
    escape_percent = style is ParameterStyle.FORMAT

    def text(piece: str) -> str:
        return piece.replace("%", "%%") if escape_percent else piece

    pieces: list[str] = []
    count = 0
    last = 0
    for match in _TOKEN_PATTERN.finditer(sql):
        start, end = match.span()
        pieces.append(text(sql[last:start]))
        if match.lastgroup == "marker":
            count += 1
            pieces.append(_placeholder(style, count))
        else:
            pieces.append(text(match.group()))
        last = end
    pieces.append(text(sql[last:]))
    return ParsedQuery(sql, "".join(pieces), count, style)


def count_parameter_markers(sql: str) -> int:
    """Number of ``?`` markers in ``sql`` outside literals, quoted identifiers and comments."""
    return parse_query(sql).marker_count
