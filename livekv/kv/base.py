"""Abstract backend interface."""

from abc import ABC, abstractmethod
from typing import Iterable


class Backend(ABC):
    """Key-value source operating on strings only.

    Values are stored and retrieved as strings. ``None`` means the key
    is absent, which is distinct from the empty string. Typed values
    are handled at higher layers (see ``livekv.codec``).
    """

    @abstractmethod
    def description(self) -> str:
        """Human readable name of this source."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Get string value for key, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str | None) -> None:
        """Set string value for key. None removes the key."""

    @abstractmethod
    def keys(self) -> Iterable[str]:
        """Iterate over all present keys."""

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def get_many(self, *keys: str) -> dict[str, str | None]:
        """Get multiple keys, absent ones mapped to None."""
        return {key: self.get(key) for key in keys}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.description()!r}>"


def check_value(key: str, value: object) -> None:
    if value is not None and not isinstance(value, str):
        raise TypeError(f"Expected str for {key}, got {type(value).__name__}")
