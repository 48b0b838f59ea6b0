"""Store factory function."""

from typing import Literal, Mapping, MutableMapping

from .kv.base import Backend
from .kv.environ import Environ
from .kv.memory import Memory
from .live import LiveStore


def store(
    kind: Literal["memory", "environ", "disk"] = "memory",
    *,
    path: str | None = None,
    initial: Mapping[str, str] | None = None,
    environ: MutableMapping[str, str] | None = None,
) -> LiveStore:
    """Create a LiveStore with sensible defaults.

    Args:
        kind: ``"memory"`` (default), ``"environ"`` or ``"disk"``.
        path: Required when ``kind="disk"``. Directory path for
            the disk backend.
        initial: Values to seed the backend with before it is
            wrapped. No listeners fire for these.
        environ: Mapping used by ``kind="environ"`` instead of
            ``os.environ``.

    Returns:
        A ``LiveStore`` instance.
    """
    backend: Backend
    if kind == "memory":
        backend = Memory()
    elif kind == "environ":
        backend = Environ(environ)
    elif kind == "disk":
        if path is None:
            raise ValueError("path is required when kind='disk'")
        from .kv.disk import Disk

        backend = Disk(path)
    else:
        raise ValueError(f"Unknown kind: {kind!r}")

    for key, value in (initial or {}).items():
        backend.set(key, value)

    return LiveStore(backend)
