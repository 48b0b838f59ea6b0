"""Process environment backend."""

import os
from typing import Iterable, MutableMapping

from .base import Backend, check_value


class Environ(Backend):
    """Backend over the process environment (``os.environ``).

    Args:
        environ: Mapping to use instead of ``os.environ``. Mostly
            useful in tests.
    """

    def __init__(self, environ: MutableMapping[str, str] | None = None) -> None:
        self.environ = os.environ if environ is None else environ

    def description(self) -> str:
        return "environment variables"

    def get(self, key: str) -> str | None:
        return self.environ.get(key)

    def set(self, key: str, value: str | None) -> None:
        check_value(key, value)
        if value is None:
            self.environ.pop(key, None)
        else:
            self.environ[key] = value

    def keys(self) -> Iterable[str]:
        return list(self.environ.keys())
