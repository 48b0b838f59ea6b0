"""Per-key read-write locks and composite locks over key groups.

Reads block only while another thread writes the same key. Writes
never wait: ``try_acquire_write`` either takes the lock immediately or
reports failure, which callers surface as ``LockContention``.

Usage:
    locks = KeyLocks()

    with locks.lock_for("db.url").read():
        ...                       # many readers at once

    with locks.lock_for("db.url").write():
        ...                       # exclusive, or LockContention
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Sequence

from .errors import LockContention

if TYPE_CHECKING:
    from .group import KeyGroup


class ReadWriteLock:
    """Shared readers, one exclusive non-blocking writer.

    The thread holding the write lock may also take read locks on the
    same key, so listeners dispatched during a write can read the
    value being written. A second write attempt fails even from the
    owning thread.
    """

    def __init__(self, key: str = "") -> None:
        self.key = key
        self._readers = 0
        self._writer: int | None = None
        self._cond = threading.Condition(threading.Lock())

    @property
    def write_locked(self) -> bool:
        return self._writer is not None

    def acquire_read(self) -> None:
        """Block until no other thread holds the write lock."""
        me = threading.get_ident()
        with self._cond:
            while self._writer is not None and self._writer != me:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError(f"Read lock on {self.key!r} released more than acquired")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def try_acquire_write(self) -> bool:
        """Take the write lock if it is free right now. Never waits."""
        with self._cond:
            if self._writer is not None or self._readers > 0:
                return False
            self._writer = threading.get_ident()
            return True

    def release_write(self) -> None:
        with self._cond:
            if self._writer != threading.get_ident():
                raise RuntimeError(f"Write lock on {self.key!r} is not held by this thread")
            self._writer = None
            self._cond.notify_all()

    @contextmanager
    def read(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold the write lock, or raise ``LockContention``."""
        if not self.try_acquire_write():
            raise LockContention([self.key])
        try:
            yield
        finally:
            self.release_write()


class CompositeLock:
    """All-or-nothing lock over several per-key locks.

    Read acquisition takes every constituent read lock in order.
    Write acquisition tries every constituent write lock in order and,
    on the first failure, releases the ones already taken in reverse
    order.
    """

    def __init__(self, locks: Sequence[ReadWriteLock]) -> None:
        self.locks = tuple(locks)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(lock.key for lock in self.locks)

    def acquire_read(self) -> None:
        taken: list[ReadWriteLock] = []
        try:
            for lock in self.locks:
                lock.acquire_read()
                taken.append(lock)
        except BaseException:
            for lock in reversed(taken):
                lock.release_read()
            raise

    def release_read(self) -> None:
        for lock in reversed(self.locks):
            lock.release_read()

    def try_acquire_write(self) -> bool:
        taken: list[ReadWriteLock] = []
        for lock in self.locks:
            if not lock.try_acquire_write():
                for held in reversed(taken):
                    held.release_write()
                return False
            taken.append(lock)
        return True

    def release_write(self) -> None:
        for lock in reversed(self.locks):
            lock.release_write()

    @contextmanager
    def read(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold every constituent write lock, or raise ``LockContention``."""
        if not self.try_acquire_write():
            raise LockContention(self.keys)
        try:
            yield
        finally:
            self.release_write()


class KeyLocks:
    """Lazily created, never evicted, one ``ReadWriteLock`` per key."""

    def __init__(self) -> None:
        self._locks: dict[str, ReadWriteLock] = {}
        self._guard = threading.Lock()

    def lock_for(self, key: str) -> ReadWriteLock:
        lock = self._locks.get(key)
        if lock is None:
            with self._guard:
                lock = self._locks.setdefault(key, ReadWriteLock(key))
        return lock

    def __len__(self) -> int:
        return len(self._locks)


class GroupLocks:
    """One ``CompositeLock`` per ``KeyGroup`` instance.

    Groups are cached by identity: two groups declaring the same keys
    get distinct composite locks built from the same per-key locks.
    Acquisition order is the group's declared key order.
    """

    def __init__(self, key_locks: KeyLocks) -> None:
        self._key_locks = key_locks
        self._locks: dict[KeyGroup, CompositeLock] = {}
        self._guard = threading.Lock()

    def lock_for(self, group: KeyGroup) -> CompositeLock:
        lock = self._locks.get(group)
        if lock is None:
            composite = CompositeLock([self._key_locks.lock_for(key) for key in group.keys])
            with self._guard:
                lock = self._locks.setdefault(group, composite)
        return lock

    def __len__(self) -> int:
        return len(self._locks)
