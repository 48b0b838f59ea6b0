"""In-memory backend."""

from typing import Iterable, Mapping

from .base import Backend, check_value


class Memory(Backend):
    """A dict-backed backend."""

    def __init__(
        self,
        initial: Mapping[str, str] | None = None,
        description: str = "memory",
    ) -> None:
        self.memory: dict[str, str] = {}
        self._description = description
        for key, value in (initial or {}).items():
            self.set(key, value)

    def description(self) -> str:
        return self._description

    def get(self, key: str) -> str | None:
        return self.memory.get(key)

    def set(self, key: str, value: str | None) -> None:
        check_value(key, value)
        if value is None:
            self.memory.pop(key, None)
        else:
            self.memory[key] = value

    def keys(self) -> Iterable[str]:
        return list(self.memory)

    def __contains__(self, key: object) -> bool:
        return key in self.memory
