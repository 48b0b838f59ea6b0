"""Backends and views."""

from .base import Backend
from .disk import Disk
from .environ import Environ
from .memory import Memory
from .views import Overlay, Restricted, Staged

__all__ = ["Backend", "Disk", "Environ", "Memory", "Overlay", "Restricted", "Staged"]
