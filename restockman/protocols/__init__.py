"""
Restockman Protocols.

Defines interfaces for external system integration.
"""

from restockman.protocols.inventory import (
    InventorySnapshotProvider,
    MovementRecord,
    ProductSnapshot,
)
from restockman.protocols.notification import (
    Notification,
    NotificationSink,
)

__all__ = [
    "InventorySnapshotProvider",
    "MovementRecord",
    "ProductSnapshot",
    "Notification",
    "NotificationSink",
]
