"""Unit tests for the SQL type vocabulary."""

import pytest

from sqlsampler.core.types import SQL_TYPES, SQLType, TypeRegistry, decode_integer, get_type_registry
from sqlsampler.exceptions import InvalidTypeError


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("INTEGER", SQLType.INTEGER),
        ("integer", SQLType.INTEGER),
        ("VarChar", SQLType.VARCHAR),
        ("TIMESTAMP_WITH_TIMEZONE", SQLType.TIMESTAMP_WITH_TIMEZONE),
        ("NULL", SQLType.NULL),
    ],
)
def test_resolve_names_case_insensitively(token: str, expected: int) -> None:
    assert get_type_registry().resolve(token) == expected


@pytest.mark.parametrize(
    ("token", "expected"),
    [("4", 4), ("-7", -7), ("+12", 12), ("0x0C", 12), ("0X1f", 31), ("#10", 16), ("010", 8), ("0", 0)],
)
def test_resolve_integer_literals(token: str, expected: int) -> None:
    assert get_type_registry().resolve(token) == expected


@pytest.mark.parametrize("token", ["", "INTEGR", "4.0", "09", "0x", "2147483648", "NUMBER(10)"])
def test_resolve_rejects_unknown_tokens(token: str) -> None:
    with pytest.raises(InvalidTypeError) as exc_info:
        get_type_registry().resolve(token)

    assert exc_info.value.token == token
    assert str(exc_info.value) == f"Invalid data type: {token}"


def test_decode_integer_bounds() -> None:
    assert decode_integer("2147483647") == 2**31 - 1
    assert decode_integer("-2147483648") == -(2**31)
    assert decode_integer("-2147483649") is None


def test_vocabulary_matches_jdbc_codes() -> None:
    """Codes are those load-test plans written for JDBC samplers already use."""
    assert SQL_TYPES["bit"] == -7
    assert SQL_TYPES["bigint"] == -5
    assert SQL_TYPES["char"] == 1
    assert SQL_TYPES["numeric"] == 2
    assert SQL_TYPES["decimal"] == 3
    assert SQL_TYPES["varchar"] == 12
    assert SQL_TYPES["date"] == 91
    assert SQL_TYPES["timestamp"] == 93
    assert SQL_TYPES["other"] == 1111
    assert SQL_TYPES["boolean"] == 16


def test_registry_name_of_and_iteration() -> None:
    registry = get_type_registry()

    assert registry.name_of(SQLType.INTEGER) == "INTEGER"
    assert registry.name_of(424242) == "424242"
    assert "varchar" in registry
    assert "VARCHAR" in registry
    assert 12 not in registry

    names = [name for name, _ in registry]
    assert names == sorted(names)
    assert len(names) == len(registry) == len(SQL_TYPES)


def test_custom_registry() -> None:
    registry = TypeRegistry({"Money": 3, "TEXT": 12})

    assert registry.resolve("money") == 3
    assert registry.resolve("text") == 12
    assert len(registry) == 2
    with pytest.raises(InvalidTypeError):
        registry.resolve("integer")


def test_default_registry_is_shared() -> None:
    assert get_type_registry() is get_type_registry()
