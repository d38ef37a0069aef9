"""Conversion between sampler text and Python values.

INPUT: argument text is converted to the Python value a DB-API driver expects
for the declared SQL type. OUTPUT: values read from the database are rendered
as report text.
"""

import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Final

from sqlsampler.core.types import SQLType

__all__ = (
    "ENCODING",
    "convert_bool",
    "convert_decimal",
    "convert_iso_date",
    "convert_iso_datetime",
    "convert_iso_time",
    "convert_value",
    "format_value",
)

ENCODING: Final = "utf-8"

_TRUE_VALUES: Final = frozenset({"true", "1"})
_FALSE_VALUES: Final = frozenset({"false", "0"})


def convert_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    msg = f"not a boolean: {value!r}"
    raise ValueError(msg)


def convert_decimal(value: str) -> Decimal:
    try:
        return Decimal(value.strip())
    except InvalidOperation as e:
        msg = f"not a decimal: {value!r}"
        raise ValueError(msg) from e


def convert_iso_date(value: str) -> datetime.date:
    return datetime.date.fromisoformat(value.strip())


def convert_iso_time(value: str) -> datetime.time:
    return datetime.time.fromisoformat(value.strip())


def convert_iso_datetime(value: str) -> datetime.datetime:
    return datetime.datetime.fromisoformat(value.strip())


def _convert_int(value: str) -> int:
    return int(value.strip())


def _convert_float(value: str) -> float:
    return float(value.strip())


def _convert_bytes(value: str) -> bytes:
    return value.encode(ENCODING)


_CONVERTERS: "Final[dict[int, Callable[[str], Any]]]" = {
    SQLType.TINYINT: _convert_int,
    SQLType.SMALLINT: _convert_int,
    SQLType.INTEGER: _convert_int,
    SQLType.BIGINT: _convert_int,
    SQLType.BIT: convert_bool,
    SQLType.BOOLEAN: convert_bool,
    SQLType.DECIMAL: convert_decimal,
    SQLType.NUMERIC: convert_decimal,
    SQLType.FLOAT: _convert_float,
    SQLType.DOUBLE: _convert_float,
    SQLType.REAL: _convert_float,
    SQLType.DATE: convert_iso_date,
    SQLType.TIME: convert_iso_time,
    SQLType.TIME_WITH_TIMEZONE: convert_iso_time,
    SQLType.TIMESTAMP: convert_iso_datetime,
    SQLType.TIMESTAMP_WITH_TIMEZONE: convert_iso_datetime,
    SQLType.BINARY: _convert_bytes,
    SQLType.VARBINARY: _convert_bytes,
    SQLType.LONGVARBINARY: _convert_bytes,
    SQLType.BLOB: _convert_bytes,
}


def convert_value(value: str, type_code: int) -> Any:
    """Convert argument text to the Python value for ``type_code``.

    Character, large-object text and driver-specific types are passed
    through as text.

    Raises:
        ValueError: If the text is not a valid value of the type.
    """
    converter = _CONVERTERS.get(type_code)
    if converter is None:
        return value
    return converter(value)


def format_value(value: Any) -> str:
    """Render a database value as report text.

    ``None`` renders as ``null`` and booleans in lower case, matching reports
    produced by JDBC samplers. Byte values are decoded as UTF-8, malformed
    sequences replaced.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode(ENCODING, errors="replace")
    return str(value)
