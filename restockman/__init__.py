"""
Django Restockman — Stock alerts and replenishment engine.

Watches stock levels, raises deduplicated alerts, suggests reorder
quantities and turns alerts into purchase orders.

Usage:
    from restockman import restock, RestockError

    restock.generate_alerts()
    restock.recommend(product_id)
    restock.issue_order(product_id, 40, alert_id=alert_id)
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'restock':
        from restockman.service import Restock
        return Restock
    elif name == 'RestockError':
        from restockman.exceptions import RestockError
        return RestockError
    elif name == 'Alert':
        from restockman.models.alert import Alert
        return Alert
    elif name == 'AlertEvent':
        from restockman.models.alert import AlertEvent
        return AlertEvent
    elif name == 'PurchaseOrder':
        from restockman.models.order import PurchaseOrder
        return PurchaseOrder
    elif name == 'StockMovement':
        from restockman.models.movement import StockMovement
        return StockMovement
    elif name == 'Product':
        from restockman.models.product import Product
        return Product
    elif name == 'Supplier':
        from restockman.models.product import Supplier
        return Supplier
    elif name == 'AlertStatus':
        from restockman.models.enums import AlertStatus
        return AlertStatus
    elif name == 'AlertPriority':
        from restockman.models.enums import AlertPriority
        return AlertPriority
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'restock',
    'RestockError',
    'Alert',
    'AlertEvent',
    'PurchaseOrder',
    'StockMovement',
    'Product',
    'Supplier',
    'AlertStatus',
    'AlertPriority',
]

__version__ = '0.1.0'
