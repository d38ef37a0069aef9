"""Unit tests for splitting comma-separated settings."""

import pytest

from sqlsampler.core.splitter import split_delimited, split_plain


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", [""]),
        ("a", ["a"]),
        ("5,]NULL[", ["5", "]NULL["]),
        ("a,,b", ["a", "", "b"]),
        ("a,", ["a", ""]),
        ('"a,b",c', ["a,b", "c"]),
        ('"say ""hi""",x', ['say "hi"', "x"]),
        (" a , b ", [" a ", " b "]),
    ],
)
def test_split_delimited(text: str, expected: "list[str]") -> None:
    assert split_delimited(text) == expected


def test_split_delimited_custom_delimiter() -> None:
    assert split_delimited('1;"2;3"', delimiter=";") == ["1", "2;3"]


def test_split_plain_ignores_quotes() -> None:
    assert split_plain('"a,b",c', ",") == ['"a', 'b"', "c"]
    assert split_plain("INTEGER,OUT VARCHAR", ",") == ["INTEGER", "OUT VARCHAR"]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", [""]),
        ("INTEGER,", ["INTEGER"]),
        ("INTEGER,,", ["INTEGER"]),
        ("a,,b", ["a", "", "b"]),
        (",a", ["", "a"]),
        (",,", []),
    ],
)
def test_split_plain_drops_trailing_empty_fields(text: str, expected: "list[str]") -> None:
    assert split_plain(text) == expected
