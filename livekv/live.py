"""LiveStore: locked, observable access to a backend."""

from __future__ import annotations

import logging
from typing import Any, Callable

from .errors import LockContention
from .group import KeyGroup
from .kv.base import Backend, check_value
from .kv.memory import Memory
from .kv.views import Overlay, Restricted, Staged
from .listeners import ChangeEvent, Listener, ListenerRegistry, Reader, changed
from .locks import GroupLocks, KeyLocks
from .props import Props

log = logging.getLogger(__name__)

Writer = Callable[[Restricted], Any]


class LiveStore(Props):
    """Observable string store with per-key and per-group locking.

    Every access to the backend goes through this object:

    * ``get`` takes the key's read lock; concurrent readers never
      block each other, but wait for an in-progress write.
    * ``set`` tries the key's write lock without waiting and raises
      ``LockContention`` if another writer holds it. Listeners on the
      key are notified on the writer's thread before the lock is
      released. Group listeners are only notified by group writes.
    * ``get_group`` / ``set_group`` do the same over every key of a
      ``KeyGroup`` at once, handing the procedure a view restricted to
      the group's keys.

    Listeners subscribe through ``to()``::

        store.to(on_change).get("feature.enabled")

    Args:
        backend: Where values live. Defaults to a fresh ``Memory``.
            Once wrapped, the backend should not be written directly.
    """

    def __init__(self, backend: Backend | None = None) -> None:
        self.backend = backend if backend is not None else Memory()
        self.key_locks = KeyLocks()
        self.group_locks = GroupLocks(self.key_locks)
        self.listeners = ListenerRegistry()

    def description(self) -> str:
        return self.backend.description()

    def to(self, listener: Listener) -> Binding:
        """Register ``listener`` against the next access on the result."""
        return Binding(self, listener)

    # -- Single keys --

    def get(self, key: str) -> str | None:
        with self.key_locks.lock_for(key).read():
            return self.backend.get(key)

    def set(self, key: str, value: str | None) -> None:
        """Write ``value`` (None clears the key) and notify listeners."""
        check_value(key, value)
        self.update(key, lambda _: value)

    def update(self, key: str, fn: Callable[[str | None], str | None]) -> str | None:
        """Replace the value with ``fn(current)`` under one write lock.

        Fails fast with ``LockContention`` like ``set``. Returns the
        new value.
        """
        lock = self.key_locks.lock_for(key)
        if not lock.try_acquire_write():
            log.debug("Write contention on %r", key)
            raise LockContention([key])
        try:
            old = self.backend.get(key)
            value = fn(old)
            check_value(key, value)
            self.backend.set(key, value)
            new = self.backend.get(key)
            if old != new:
                self.listeners.dispatch_keys({key: ChangeEvent(old, new)})
            return new
        finally:
            lock.release_write()

    # -- Groups --

    def get_group(self, group: KeyGroup, reader: Reader | None = None) -> Any:
        """Run ``reader`` (default ``group.read``) under the group's read locks.

        The reader sees a read-only view of the group's keys.
        """
        reader = reader or group.read
        with self.group_locks.lock_for(group).read():
            return reader(Restricted(self.backend, group.keys, read_only=True))

    def set_group(self, group: KeyGroup, writer: Writer | None = None) -> dict[str, ChangeEvent]:
        """Run ``writer`` (default ``group.write``) under the group's write locks.

        The writer's changes are staged and applied only once it
        returns, so a raising writer leaves the store untouched.
        Listeners interested in any changed key are notified once each.

        Returns:
            The per-key changes that were applied.
        """
        writer = writer or group.write
        lock = self.group_locks.lock_for(group)
        if not lock.try_acquire_write():
            log.debug("Write contention on group %r", group)
            raise LockContention(group.keys)
        try:
            before = self.backend.get_many(*group.keys)
            staged = Staged(self.backend)
            writer(Restricted(staged, group.keys))
            staged.flush()
            changes = changed(before, self.backend.get_many(*group.keys))
            self.listeners.dispatch(changes, Overlay(before, self.backend), self.backend)
            return changes
        finally:
            lock.release_write()

    def __repr__(self) -> str:
        return f"<LiveStore {self.description()!r}>"


class Binding(Props):
    """One-shot gate that registers a listener on its first access.

    The first ``get``/``set``/``update``/``get_group``/``set_group``
    (including typed ``get_*``/``set_*`` calls) registers the listener
    against the accessed key or group, then performs the access on the
    store. The binding is spent after that, whatever the outcome; later
    calls are plain accesses.
    """

    def __init__(self, store: LiveStore, listener: Listener) -> None:
        self._store = store
        self._listener: Listener | None = listener

    @property
    def spent(self) -> bool:
        return self._listener is None

    def _take(self) -> Listener | None:
        listener, self._listener = self._listener, None
        return listener

    def get(self, key: str) -> str | None:
        if (listener := self._take()) is not None:
            self._store.listeners.register_key(key, listener)
        return self._store.get(key)

    def set(self, key: str, value: str | None) -> None:
        if (listener := self._take()) is not None:
            self._store.listeners.register_key(key, listener)
        self._store.set(key, value)

    def update(self, key: str, fn: Callable[[str | None], str | None]) -> str | None:
        if (listener := self._take()) is not None:
            self._store.listeners.register_key(key, listener)
        return self._store.update(key, fn)

    def get_group(self, group: KeyGroup, reader: Reader | None = None) -> Any:
        if (listener := self._take()) is not None:
            self._store.listeners.register_group(group, listener, reader)
        return self._store.get_group(group, reader)

    def set_group(self, group: KeyGroup, writer: Writer | None = None) -> dict[str, ChangeEvent]:
        if (listener := self._take()) is not None:
            self._store.listeners.register_group(group, listener)
        return self._store.set_group(group, writer)
