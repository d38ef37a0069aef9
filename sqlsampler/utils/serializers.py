"""JSON serialization utilities for SQLSampler."""

from typing import Any, Literal, overload

import msgspec

__all__ = ("from_json", "to_json")

_encoder = msgspec.json.Encoder(enc_hook=str)
_decoder = msgspec.json.Decoder()


@overload
def to_json(data: Any, *, as_bytes: Literal[False] = ...) -> str: ...


@overload
def to_json(data: Any, *, as_bytes: Literal[True]) -> bytes: ...


def to_json(data: Any, *, as_bytes: bool = False) -> "str | bytes":
    """Encode data to JSON string or bytes.

    Values msgspec cannot encode natively are rendered with ``str()``.

    Args:
        data: Data to encode.
        as_bytes: Whether to return bytes instead of string.

    Returns:
        JSON string or bytes representation based on as_bytes parameter.
    """
    encoded = _encoder.encode(data)
    if as_bytes:
        return encoded
    return encoded.decode("utf-8")


def from_json(data: "str | bytes") -> Any:
    """Decode JSON string or bytes to Python object.

    Args:
        data: JSON string or bytes to decode.

    Returns:
        Decoded Python object.
    """
    return _decoder.decode(data)
