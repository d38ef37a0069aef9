"""SQL type vocabulary.

Argument types are written either as a symbolic name (``INTEGER``,
``varchar``) or as a numeric type code (``4``, ``0x0C``). Codes follow the
``java.sql.Types`` numbering, which load-test plans written for JDBC samplers
already use.
"""

import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Final, Optional

from mypy_extensions import mypyc_attr

from sqlsampler.exceptions import InvalidTypeError

__all__ = (
    "SQL_TYPES",
    "SQLType",
    "TypeRegistry",
    "decode_integer",
    "get_type_registry",
)


class SQLType:
    """Numeric codes of the SQL type vocabulary."""

    BIT: Final = -7
    TINYINT: Final = -6
    SMALLINT: Final = 5
    INTEGER: Final = 4
    BIGINT: Final = -5
    FLOAT: Final = 6
    REAL: Final = 7
    DOUBLE: Final = 8
    NUMERIC: Final = 2
    DECIMAL: Final = 3
    CHAR: Final = 1
    VARCHAR: Final = 12
    LONGVARCHAR: Final = -1
    DATE: Final = 91
    TIME: Final = 92
    TIMESTAMP: Final = 93
    BINARY: Final = -2
    VARBINARY: Final = -3
    LONGVARBINARY: Final = -4
    NULL: Final = 0
    OTHER: Final = 1111
    JAVA_OBJECT: Final = 2000
    DISTINCT: Final = 2001
    STRUCT: Final = 2002
    ARRAY: Final = 2003
    BLOB: Final = 2004
    CLOB: Final = 2005
    REF: Final = 2006
    DATALINK: Final = 70
    BOOLEAN: Final = 16
    ROWID: Final = -8
    NCHAR: Final = -15
    NVARCHAR: Final = -9
    LONGNVARCHAR: Final = -16
    NCLOB: Final = 2011
    SQLXML: Final = 2009
    REF_CURSOR: Final = 2012
    TIME_WITH_TIMEZONE: Final = 2013
    TIMESTAMP_WITH_TIMEZONE: Final = 2014


SQL_TYPES: "Final[Mapping[str, int]]" = MappingProxyType({
    name.lower(): value for name, value in vars(SQLType).items() if name.isupper() and isinstance(value, int)
})

_INTEGER_LITERAL: Final = re.compile(
    r"^(?P<sign>[-+]?)(?:(?P<hex>0[xX]|#)(?P<hexdigits>[0-9a-fA-F]+)|(?P<digits>[0-9]+))$"
)

_INT32_MIN: Final = -(2**31)
_INT32_MAX: Final = 2**31 - 1


def decode_integer(token: str) -> Optional[int]:
    """Parse an integer literal with an optional radix prefix.

    Accepts an optional sign followed by ``0x``/``0X``/``#`` and hexadecimal
    digits, a leading ``0`` and octal digits, or decimal digits. The value
    must fit in 32 bits.

    Returns:
        The value, or None if ``token`` is not such a literal.
    """
    match = _INTEGER_LITERAL.match(token)
    if match is None:
        return None
    if match.group("hex"):
        value = int(match.group("hexdigits"), 16)
    else:
        digits = match.group("digits")
        if len(digits) > 1 and digits.startswith("0"):
            try:
                value = int(digits[1:], 8)
            except ValueError:
                return None
        else:
            value = int(digits)
    if match.group("sign") == "-":
        value = -value
    if not _INT32_MIN <= value <= _INT32_MAX:
        return None
    return value


@mypyc_attr(allow_interpreted_subclasses=False)
class TypeRegistry:
    """Case-insensitive lookup of type names to numeric type codes.

    Built once and never mutated, so concurrent readers need no locking.
    """

    __slots__ = ("_codes", "_names")

    def __init__(self, types: "Optional[Mapping[str, int]]" = None) -> None:
        source = SQL_TYPES if types is None else types
        self._codes: Mapping[str, int] = MappingProxyType({name.lower(): code for name, code in source.items()})
        names: dict[int, str] = {}
        for name, code in self._codes.items():
            names.setdefault(code, name.upper())
        self._names: Mapping[int, str] = MappingProxyType(names)

    def resolve(self, token: str) -> int:
        """Resolve a type token to its numeric code.

        Args:
            token: A type name (any case) or an integer literal.

        Raises:
            InvalidTypeError: If the token is neither.

        Returns:
            The numeric type code.
        """
        code = self._codes.get(token.lower())
        if code is not None:
            return code
        code = decode_integer(token)
        if code is None:
            raise InvalidTypeError(token)
        return code

    def name_of(self, code: int) -> str:
        """Symbolic name of a type code, or the code itself when it has none."""
        return self._names.get(code, str(code))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._codes

    def __iter__(self) -> "Iterator[tuple[str, int]]":
        return iter(sorted(((name.upper(), code) for name, code in self._codes.items()), key=lambda item: item[0]))

    def __len__(self) -> int:
        return len(self._codes)


_default_registry: Final = TypeRegistry()


def get_type_registry() -> TypeRegistry:
    """The registry of the full SQL type vocabulary, built at import."""
    return _default_registry
