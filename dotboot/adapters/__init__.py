"""Adapters — command execution for bootstrap steps.

Public re-exports for convenient access.
"""

from dotboot.adapters.base import Adapter, ExecutionContext
from dotboot.adapters.mock import MockAdapter
from dotboot.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
]
