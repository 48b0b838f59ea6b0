"""livekv: Observable key-value store with per-key and group locking."""

from .codec import Codec, enum_codec
from .errors import LockContention, OutOfScopeAccess
from .group import SKIP, GroupMap, KeyGroup, LiveGroup, Pair, Slice
from .kv.base import Backend
from .kv.environ import Environ
from .kv.memory import Memory
from .listeners import ChangeEvent, ListenerRegistry
from .live import Binding, LiveStore
from .locks import CompositeLock, GroupLocks, KeyLocks, ReadWriteLock
from .props import Props
from .store import store

__all__ = [
    "SKIP",
    "Backend",
    "Binding",
    "ChangeEvent",
    "Codec",
    "CompositeLock",
    "Environ",
    "GroupLocks",
    "GroupMap",
    "KeyGroup",
    "KeyLocks",
    "ListenerRegistry",
    "LiveGroup",
    "LiveStore",
    "LockContention",
    "Memory",
    "OutOfScopeAccess",
    "Pair",
    "Props",
    "ReadWriteLock",
    "Slice",
    "enum_codec",
    "store",
]
