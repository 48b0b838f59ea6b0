"""Codecs: parse/format between stored strings and typed values.

Blank raw strings (``None`` or whitespace only) mean "not set" and
parse to the supplied default.
"""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Any, Callable


def is_blank(raw: str | None) -> bool:
    return raw is None or not raw.strip()


@dataclass(frozen=True)
class Codec:
    """A typed value handler with parse and format logic.

    ``decode`` turns a non-blank string into a value and ``encode``
    turns a non-None value into a string. Use ``parse`` and ``format``
    for the blank/None handling.
    """

    name: str
    decode: Callable[[str], Any]
    encode: Callable[[Any], str]

    def parse(self, raw: str | None, default: Any = None) -> Any:
        """Decode ``raw``, returning ``default`` when it is blank."""
        if is_blank(raw):
            return default
        return self.decode(raw)

    def format(self, value: Any) -> str | None:
        """Encode ``value``; None stays None (absent)."""
        if value is None:
            return None
        return self.encode(value)


def _bounded_int(bits: int) -> tuple[Callable[[str], int], Callable[[int], str]]:
    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1

    def check(val: int) -> int:
        if not low <= val <= high:
            raise ValueError(f"{val} out of range for {bits}-bit integer")
        return val

    def decode(raw: str) -> int:
        return check(int(raw.strip(), 10))

    def encode(val: int) -> str:
        if isinstance(val, bool) or not isinstance(val, int):
            raise TypeError(f"Expected int, got {type(val).__name__}")
        return str(check(val))

    return decode, encode


def _single(val: float) -> float:
    return struct.unpack("f", struct.pack("f", val))[0]


def _encode_single(val: float) -> str:
    # shortest text that survives a round trip through single precision
    target = _single(float(val))
    for precision in range(6, 10):
        text = f"{target:.{precision}g}"
        if _single(float(text)) == target:
            break
    return repr(float(text))


def _decode_bool(raw: str) -> bool:
    return raw.strip().lower() == "true"


def _encode_bool(val: bool) -> str:
    return "true" if val else "false"


def _encode_char(val: str) -> str:
    if not isinstance(val, str) or len(val) != 1:
        raise ValueError(f"Expected a single character, got {val!r}")
    return val


def _encode_string(val: str) -> str:
    if not isinstance(val, str):
        raise TypeError(f"Expected str, got {type(val).__name__}")
    return val


BOOL = Codec("bool", _decode_bool, _encode_bool)
BYTE = Codec("byte", *_bounded_int(8))
SHORT = Codec("short", *_bounded_int(16))
INT = Codec("int", *_bounded_int(32))
LONG = Codec("long", *_bounded_int(64))
FLOAT = Codec("float", lambda raw: _single(float(raw)), _encode_single)
DOUBLE = Codec("double", float, lambda val: repr(float(val)))
CHAR = Codec("char", lambda raw: raw[0], _encode_char)
STRING = Codec("string", lambda raw: raw, _encode_string)

CODECS: dict[str, Codec] = {
    codec.name: codec
    for codec in (BOOL, BYTE, SHORT, INT, LONG, FLOAT, DOUBLE, CHAR, STRING)
}


def lookup(codec: Codec | str) -> Codec:
    """Return ``codec`` itself, or the primitive codec registered under that name."""
    if isinstance(codec, Codec):
        return codec
    try:
        return CODECS[codec]
    except KeyError:
        raise ValueError(f"Unknown codec: {codec!r}. Known: {sorted(CODECS)}") from None


def enum_codec(enum_cls: type[enum.Enum]) -> Codec:
    """Codec storing members of ``enum_cls`` by name."""

    def decode(raw: str) -> enum.Enum:
        try:
            return enum_cls[raw.strip()]
        except KeyError:
            raise ValueError(f"{raw!r} is not a member of {enum_cls.__name__}") from None

    def encode(val: enum.Enum) -> str:
        if not isinstance(val, enum_cls):
            raise TypeError(f"Expected {enum_cls.__name__}, got {type(val).__name__}")
        return val.name

    return Codec(f"enum:{enum_cls.__name__}", decode, encode)
