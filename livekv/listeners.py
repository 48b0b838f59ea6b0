"""Change events and the listener registry.

Listeners are plain callables taking one ``ChangeEvent``. They are
registered against a single key, or against a group, in which case the
registration is fanned out to every key of the group so that a group
write touching any one of them finds it. Single-key writes only reach
key listeners.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Generic, Iterable, Mapping, TypeVar

from .kv.base import Backend
from .kv.views import Restricted

if TYPE_CHECKING:
    from .group import KeyGroup

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ChangeEvent(Generic[T]):
    """Before/after values of one change.

    For key listeners these are the raw strings (None when absent).
    For group listeners they are whatever the group's read procedure
    returned against the before and after state.
    """

    old: T
    new: T


Listener = Callable[[ChangeEvent], Any]
Reader = Callable[[Restricted], Any]


@dataclass(frozen=True)
class GroupRegistration:
    group: KeyGroup
    reader: Reader

    def event(self, before: Backend, after: Backend) -> ChangeEvent:
        keys = self.group.keys
        return ChangeEvent(
            self.reader(Restricted(before, keys, read_only=True)),
            self.reader(Restricted(after, keys, read_only=True)),
        )


def changed(before: Mapping[str, str | None], after: Mapping[str, str | None]) -> dict[str, ChangeEvent]:
    """Keys whose values differ between two snapshots, in ``before`` order."""
    return {
        key: ChangeEvent(old, after.get(key))
        for key, old in before.items()
        if old != after.get(key)
    }


class ListenerRegistry:
    """Per-key listener sets for key and group registrations.

    Registrations only accumulate; there is no unsubscription. A
    listener registered twice on the same key is kept once. A listener
    registered on a group again keeps the latest group and reader.
    """

    def __init__(self) -> None:
        self._key_listeners: dict[str, dict[Listener, None]] = {}
        self._group_listeners: dict[str, dict[Listener, GroupRegistration]] = {}
        self._guard = threading.Lock()

    def register_key(self, key: str, listener: Listener) -> None:
        with self._guard:
            self._key_listeners.setdefault(key, {})[listener] = None
        log.debug("Registered %r on key %r", listener, key)

    def register_group(self, group: KeyGroup, listener: Listener, reader: Reader | None = None) -> None:
        registration = GroupRegistration(group, reader or group.read)
        with self._guard:
            for key in group.keys:
                self._group_listeners.setdefault(key, {})[listener] = registration
        log.debug("Registered %r on group %r", listener, group)

    def key_listeners(self, key: str) -> list[Listener]:
        with self._guard:
            return list(self._key_listeners.get(key, ()))

    def group_listeners(self, keys: Iterable[str]) -> dict[Listener, GroupRegistration]:
        """Union of group registrations interested in any of ``keys``."""
        affected: dict[Listener, GroupRegistration] = {}
        with self._guard:
            for key in keys:
                for listener, registration in self._group_listeners.get(key, {}).items():
                    affected.setdefault(listener, registration)
        return affected

    def dispatch(self, changes: Mapping[str, ChangeEvent], before: Backend, after: Backend) -> int:
        """Notify every interested listener of a group write exactly once.

        Group listeners go first, each with its own group read against
        ``before`` and ``after``. Key listeners on changed keys follow,
        skipping any listener already notified for this write. Returns
        the number of listeners notified.
        """
        if not changes:
            return 0
        notified: set[Listener] = set()
        for listener, registration in self.group_listeners(changes).items():
            notified.add(listener)
            self._notify(listener, lambda: registration.event(before, after))
        return self.dispatch_keys(changes, notified)

    def dispatch_keys(self, changes: Mapping[str, ChangeEvent], notified: set[Listener] | None = None) -> int:
        """Notify key listeners on changed keys, once each.

        Group listeners are left alone; single-key writes only reach
        listeners registered on the key itself. Listeners already in
        ``notified`` are skipped.
        """
        notified = set() if notified is None else notified
        for key, change in changes.items():
            for listener in self.key_listeners(key):
                if listener in notified:
                    continue
                notified.add(listener)
                self._notify(listener, lambda: change)
        return len(notified)

    def _notify(self, listener: Listener, make_event: Callable[[], ChangeEvent]) -> None:
        try:
            listener(make_event())
        except Exception:
            log.exception("Listener %r failed", listener)

    def __len__(self) -> int:
        with self._guard:
            listeners = set()
            for registered in (*self._key_listeners.values(), *self._group_listeners.values()):
                listeners.update(registered)
        return len(listeners)
