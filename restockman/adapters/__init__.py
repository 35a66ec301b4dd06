"""
Restockman Adapters.

Implementations of protocols for external systems.
"""

from restockman.adapters.registry import (
    get_notifier,
    get_snapshot_provider,
    reset_adapters,
)

__all__ = [
    "get_notifier",
    "get_snapshot_provider",
    "reset_adapters",
]
