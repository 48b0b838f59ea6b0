"""Key groups: declared sets of keys read or written as a unit."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .kv.base import Backend
from .kv.memory import Memory
from .kv.views import Restricted
from .listeners import ChangeEvent
from .props import Props


class _Skip:
    def __repr__(self) -> str:
        return "SKIP"


# Marker for GroupMap.with_writes: leave this key alone.
SKIP: Any = _Skip()


class KeyGroup:
    """An ordered, de-duplicated set of keys with read/write procedures.

    ``LiveStore.get_group`` and ``LiveStore.set_group`` lock every key
    in the group and hand the procedures a view restricted to these
    keys. Subclasses override ``read`` and ``write``; callers may also
    pass one-off procedures instead.

    Groups compare by identity. Two groups declaring the same keys are
    different groups.

    Args:
        *keys: The keys in lock acquisition order. Duplicates are
            dropped, keeping the first occurrence.
    """

    def __init__(self, *keys: str) -> None:
        if len(keys) == 1 and not isinstance(keys[0], str):
            keys = tuple(keys[0])
        if not keys:
            raise ValueError("KeyGroup requires at least one key")
        for key in keys:
            if not isinstance(key, str):
                raise TypeError(f"Keys must be str, got {type(key).__name__}")
        self.keys: tuple[str, ...] = tuple(dict.fromkeys(keys))

    def read(self, props: Props) -> Any:
        """Read this group's values from ``props``.

        Defaults to a dict of every key's raw value (None if absent).
        """
        return {key: props.get(key) for key in self.keys}

    def write(self, props: Props) -> None:
        """Write this group's values into ``props``."""
        raise NotImplementedError(f"{type(self).__name__} does not define write()")

    def __contains__(self, key: object) -> bool:
        return key in self.keys

    def __iter__(self):
        return iter(self.keys)

    def __len__(self) -> int:
        return len(self.keys)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(map(repr, self.keys))})"


class GroupMap(KeyGroup):
    """Group read into and written from plain strings.

    Reads return ``{key: value}`` with defaults filling blank values.
    Writes are skipped per key until staged with ``with_writes``; a
    staged None clears the key.

    Example::

        group = GroupMap("db.host", "db.port").with_defaults("localhost", "5432")
        values = store.get_group(group)
        store.set_group(group.with_writes("db.internal", SKIP))
    """

    def __init__(self, *keys: str) -> None:
        super().__init__(*keys)
        self.defaults: dict[str, str | None] = dict.fromkeys(self.keys)
        self.writes: dict[str, Any] = dict.fromkeys(self.keys, SKIP)

    @classmethod
    def of(cls, values: Mapping[str, str | None]) -> GroupMap:
        """Group whose keys, defaults and writes all come from ``values``."""
        group = cls(*values)
        group.defaults.update(values)
        group.writes.update(values)
        return group

    def _stage(self, target: dict[str, Any], vals: tuple[Any, ...]) -> None:
        if len(vals) != len(self.keys):
            raise ValueError(f"Expected {len(self.keys)} values, got {len(vals)}")
        target.update(zip(self.keys, vals))

    def with_defaults(self, *vals: str | None) -> GroupMap:
        self._stage(self.defaults, vals)
        return self

    def with_writes(self, *vals: Any) -> GroupMap:
        self._stage(self.writes, vals)
        return self

    def read(self, props: Props) -> dict[str, str | None]:
        return {key: props.get_string(key, self.defaults[key]) for key in self.keys}

    def write(self, props: Props) -> None:
        for key, value in self.writes.items():
            if value is not SKIP:
                props.set(key, value)


class Pair(KeyGroup):
    """Two keys read as a ``(left, right)`` tuple of strings.

    ``write`` stores ``left`` and ``right`` as they are; None clears
    the key.
    """

    def __init__(self, left_key: str, right_key: str) -> None:
        if left_key == right_key:
            raise ValueError(f"Pair keys must differ, got {left_key!r} twice")
        super().__init__(left_key, right_key)
        self.left_key = left_key
        self.right_key = right_key
        self.left: str | None = None
        self.right: str | None = None

    def read(self, props: Props) -> tuple[str | None, str | None]:
        return props.get_string(self.left_key), props.get_string(self.right_key)

    def write(self, props: Props) -> None:
        props.set(self.left_key, self.left)
        props.set(self.right_key, self.right)


class Slice(Restricted):
    """Detached, typed copy of some keys.

    Changes to a slice never reach the source it was copied from.
    Only the declared keys may be read or written.
    """

    def __init__(self, keys: Iterable[str], source: Backend | Props | None = None) -> None:
        keys = tuple(dict.fromkeys(keys))
        memory = Memory(description="slice")
        if source is not None:
            for key in keys:
                memory.set(key, source.get(key))
        super().__init__(memory, keys)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Slice):
            return self.as_dict() == other.as_dict()
        if isinstance(other, Mapping):
            return self.as_dict() == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<Slice {self.as_dict()}>"


class LiveGroup(Props, KeyGroup):
    """A group that stages its own typed values and listens to itself.

    Set values on the group with the typed setters, then pass it to
    ``LiveStore.set_group`` to write them atomically. ``read`` returns
    a detached ``Slice``. Calling the instance forwards to ``reload``
    so it can be registered as its own listener::

        class Pool(LiveGroup):
            def reload(self, change):
                resize(change.new.get_int("pool.size"))

        pool = Pool("pool.size", "pool.timeout")
        store.to(pool).get_group(pool)
    """

    def __init__(self, *keys: str) -> None:
        KeyGroup.__init__(self, *keys)
        self._staged = Slice(self.keys)

    def get(self, key: str) -> str | None:
        return self._staged.get(key)

    def set(self, key: str, value: str | None) -> None:
        self._staged.set(key, value)

    def read(self, props: Props) -> Slice:
        return Slice(self.keys, props)

    def load(self, props: Props) -> LiveGroup:
        """Replace staged values with those read from ``props``."""
        for key in self.keys:
            self._staged.set(key, props.get(key))
        return self

    def write(self, props: Props) -> None:
        for key in self.keys:
            props.set(key, self._staged.get(key))

    def reload(self, change: ChangeEvent) -> None:
        """Override to react to changes on this group."""

    def __call__(self, change: ChangeEvent) -> None:
        self.reload(change)
