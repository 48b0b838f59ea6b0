"""Views over a backend: restricted, overlay, and staged."""

from __future__ import annotations

from typing import Iterable, Mapping

from ..errors import OutOfScopeAccess
from ..props import Props
from .base import Backend, check_value


class Restricted(Props, Backend):
    """A view that only allows access to a declared set of keys.

    Accessing any other key raises ``OutOfScopeAccess``. A read-only
    view also rejects every write.

    Args:
        source: The backend (or view) to delegate to.
        keys: The allowed keys.
        read_only: Reject writes when True.
    """

    def __init__(self, source: Backend, keys: Iterable[str], *, read_only: bool = False) -> None:
        self._source = source
        self._keys = tuple(dict.fromkeys(keys))
        self._allowed = frozenset(self._keys)
        self.read_only = read_only

    def _check(self, key: str) -> None:
        if key not in self._allowed:
            raise OutOfScopeAccess(key, self._keys)

    def description(self) -> str:
        return self._source.description()

    def get(self, key: str) -> str | None:
        self._check(key)
        return self._source.get(key)

    def set(self, key: str, value: str | None) -> None:
        self._check(key)
        if self.read_only:
            raise OutOfScopeAccess(
                key, self._keys, f"Write to {key!r} denied: view is read-only"
            )
        self._source.set(key, value)

    def keys(self) -> Iterable[str]:
        return [key for key in self._keys if self._source.get(key) is not None]

    def __contains__(self, key: object) -> bool:
        return key in self._allowed and self._source.get(key) is not None  # type: ignore[arg-type]

    def as_dict(self) -> dict[str, str | None]:
        """Snapshot of every allowed key, absent ones mapped to None."""
        return {key: self._source.get(key) for key in self._keys}


class Overlay(Backend):
    """Layered view preferring ``snapshot`` entries over ``base``.

    A key present in ``snapshot`` wins even when its value is None,
    so an explicitly absent value does not fall through to ``base``.
    Writes land in the snapshot and never reach ``base``.
    """

    def __init__(self, snapshot: Mapping[str, str | None], base: Backend) -> None:
        self._snapshot = dict(snapshot)
        self._base = base

    def description(self) -> str:
        return f"overlay on {self._base.description()}"

    def get(self, key: str) -> str | None:
        if key in self._snapshot:
            return self._snapshot[key]
        return self._base.get(key)

    def set(self, key: str, value: str | None) -> None:
        check_value(key, value)
        self._snapshot[key] = value

    def keys(self) -> Iterable[str]:
        seen = {key for key, value in self._snapshot.items() if value is not None}
        for key in self._base.keys():
            if key not in self._snapshot:
                seen.add(key)
        return seen


class Staged(Overlay):
    """Buffered writes over a backend.

    ``set()`` calls are staged in memory and visible to later reads
    through this view. ``flush()`` applies them to the base in the
    order they were first staged.
    """

    def __init__(self, base: Backend) -> None:
        super().__init__({}, base)

    @property
    def pending(self) -> dict[str, str | None]:
        return dict(self._snapshot)

    def flush(self) -> None:
        """Apply staged writes to the base and clear the buffer."""
        updates, self._snapshot = self._snapshot, {}
        for key, value in updates.items():
            self._base.set(key, value)

    def reset(self) -> None:
        """Discard staged writes."""
        self._snapshot = {}
