"""
Restockman Models.

Core models for stock alerting and replenishment:
- Supplier / Product: catalog records (read-mostly for the engine)
- StockMovement: Immutable ledger of inbound/outbound quantities
- Alert: Deduplicated, prioritized shortfall alerts with a lifecycle
- AlertEvent: Audit trail of alert transitions
- PurchaseOrder: Reorders issued from alerts or by hand
"""

from restockman.models.alert import Alert, AlertEvent
from restockman.models.enums import (
    AlertAction,
    AlertPriority,
    AlertStatus,
    AlertType,
    MovementDirection,
    OrderStatus,
    SendMethod,
    Urgency,
)
from restockman.models.movement import StockMovement
from restockman.models.order import PurchaseOrder
from restockman.models.product import Product, Supplier

__all__ = [
    'AlertType',
    'AlertPriority',
    'AlertStatus',
    'AlertAction',
    'MovementDirection',
    'OrderStatus',
    'SendMethod',
    'Urgency',
    'Supplier',
    'Product',
    'StockMovement',
    'Alert',
    'AlertEvent',
    'PurchaseOrder',
]
