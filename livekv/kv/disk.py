"""Disk backend using diskcache."""

from typing import Iterable, cast

from .base import Backend, check_value

ONE_GB = 1024 * 1024 * 1024


class Disk(Backend):
    """Backend stored in a diskcache (SQLite + mmap) directory."""

    def __init__(self, directory: str, size_limit: int = ONE_GB) -> None:
        from diskcache import Cache as DiskCache

        self.directory = directory
        self.store = DiskCache(directory, size_limit=size_limit)

    def description(self) -> str:
        return f"diskcache at {self.directory}"

    def get(self, key: str) -> str | None:
        return cast(str | None, self.store.get(key))

    def set(self, key: str, value: str | None) -> None:
        check_value(key, value)
        if value is None:
            self.store.delete(key, retry=True)
        else:
            self.store.set(key, value, retry=True)

    def keys(self) -> Iterable[str]:
        for key in self.store.iterkeys():
            yield str(key)

    def __contains__(self, key: object) -> bool:
        return key in self.store

    def close(self) -> None:
        self.store.close()
