"""Adapters: bindings for pacman, user management, git, HTTP and files.

Public re-exports for convenient access.
"""

from ghostarch.adapters.base import Adapter, ExecutionContext
from ghostarch.adapters.mock import MockAdapter
from ghostarch.adapters.registry import AdapterRegistry, build_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "build_registry",
]
