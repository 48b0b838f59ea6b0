"""livekv error types."""

from typing import Iterable


class LockContention(RuntimeError):
    """Raised when a write cannot immediately take its write lock(s).

    Another writer currently holds one of the keys. Concurrent writes
    to overlapping keys are treated as a usage bug, so the write is
    not retried. The caller decides whether to try again.

    Attributes:
        keys: The keys the failed write needed.
    """

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys = tuple(keys)
        super().__init__(
            f"Failed to acquire write lock for {', '.join(self.keys)}: "
            f"already locked by another writer"
        )


class OutOfScopeAccess(LookupError):
    """Raised when a restricted view is used outside its declared keys.

    Also raised for writes attempted through a read-only view.

    Attributes:
        key: The offending key.
        allowed: The keys the view was declared with.
    """

    def __init__(self, key: str, allowed: Iterable[str], reason: str | None = None) -> None:
        self.key = key
        self.allowed = tuple(allowed)
        if reason is None:
            reason = f"Access to {key!r} denied. Allowed keys are {list(self.allowed)}"
        super().__init__(reason)

    def __str__(self) -> str:
        return str(self.args[0])
