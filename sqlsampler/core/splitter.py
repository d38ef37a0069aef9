"""Splitting of comma-separated sampler settings.

Argument values follow CSV quoting: a value containing the delimiter is
enclosed in double quotes, and a doubled quote inside a quoted value stands
for one quote character. Type lists and variable name lists are split on
plain commas.
"""

import csv
import io
from typing import Final

__all__ = ("COMMA", "split_delimited", "split_plain")

COMMA: Final = ","


def split_delimited(text: str, delimiter: str = COMMA) -> "list[str]":
    """Split one CSV line, honouring double quotes.

    Args:
        text: The line to split.
        delimiter: Field delimiter.

    Returns:
        The unquoted fields. An empty line gives one empty field.
    """
    if not text:
        return [""]
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, quotechar='"', doublequote=True)
    fields: list[str] = []
    for record in reader:
        fields.extend(record)
    return fields


def split_plain(text: str, delimiter: str = COMMA) -> "list[str]":
    """Split on ``delimiter`` without any quoting rules.

    Trailing empty fields are dropped, so ``"INTEGER,"`` names one type. An
    empty line still gives one empty field.
    """
    if not text:
        return [""]
    fields = text.split(delimiter)
    while fields and not fields[-1]:
        fields.pop()
    return fields
