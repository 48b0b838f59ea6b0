"""Props: typed accessors over any string ``get``/``set`` source."""

from __future__ import annotations

import enum
from typing import Any, TypeVar

from . import codec as codecs
from .codec import Codec

E = TypeVar("E", bound=enum.Enum)


class Props:
    """Mixin adding typed ``get_*``/``set_*`` methods.

    The host class provides ``get(key) -> str | None`` and
    ``set(key, value: str | None)``. Every typed call is routed
    through those two methods, so locking and listener registration
    done by the host apply to typed access as well.
    """

    def get_as(self, key: str, codec: Codec | str, default: Any = None) -> Any:
        """Parse ``key`` with ``codec``, given directly or by name (``"int"``)."""
        return codecs.lookup(codec).parse(self.get(key), default)

    def set_as(self, key: str, codec: Codec | str, value: Any) -> None:
        self.set(key, codecs.lookup(codec).format(value))

    # -- Getters --

    def get_string(self, key: str, default: str | None = None) -> str | None:
        return self.get_as(key, codecs.STRING, default)

    def get_bool(self, key: str, default: bool | None = None) -> bool | None:
        return self.get_as(key, codecs.BOOL, default)

    def get_byte(self, key: str, default: int | None = None) -> int | None:
        return self.get_as(key, codecs.BYTE, default)

    def get_short(self, key: str, default: int | None = None) -> int | None:
        return self.get_as(key, codecs.SHORT, default)

    def get_int(self, key: str, default: int | None = None) -> int | None:
        return self.get_as(key, codecs.INT, default)

    def get_long(self, key: str, default: int | None = None) -> int | None:
        return self.get_as(key, codecs.LONG, default)

    def get_float(self, key: str, default: float | None = None) -> float | None:
        return self.get_as(key, codecs.FLOAT, default)

    def get_double(self, key: str, default: float | None = None) -> float | None:
        return self.get_as(key, codecs.DOUBLE, default)

    def get_char(self, key: str, default: str | None = None) -> str | None:
        return self.get_as(key, codecs.CHAR, default)

    def get_enum(self, key: str, enum_cls: type[E], default: E | None = None) -> E | None:
        return self.get_as(key, codecs.enum_codec(enum_cls), default)

    # -- Setters --

    def set_string(self, key: str, value: str | None) -> None:
        self.set_as(key, codecs.STRING, value)

    def set_bool(self, key: str, value: bool | None) -> None:
        self.set_as(key, codecs.BOOL, value)

    def set_byte(self, key: str, value: int | None) -> None:
        self.set_as(key, codecs.BYTE, value)

    def set_short(self, key: str, value: int | None) -> None:
        self.set_as(key, codecs.SHORT, value)

    def set_int(self, key: str, value: int | None) -> None:
        self.set_as(key, codecs.INT, value)

    def set_long(self, key: str, value: int | None) -> None:
        self.set_as(key, codecs.LONG, value)

    def set_float(self, key: str, value: float | None) -> None:
        self.set_as(key, codecs.FLOAT, value)

    def set_double(self, key: str, value: float | None) -> None:
        self.set_as(key, codecs.DOUBLE, value)

    def set_char(self, key: str, value: str | None) -> None:
        self.set_as(key, codecs.CHAR, value)

    def set_enum(self, key: str, value: enum.Enum | None) -> None:
        if value is None:
            self.set(key, None)
        else:
            self.set_as(key, codecs.enum_codec(type(value)), value)
