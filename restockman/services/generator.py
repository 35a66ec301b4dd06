"""
Alert generation — scan inventory and overdue orders, insert new alerts.

Usage:
    from restockman.services.generator import AlertGenerator

    # Run periodically (celery beat, cron) or on demand
    created = AlertGenerator().generate()
    # Returns only the alerts created by this run

Each product (or order) is evaluated and inserted on its own: one bad
record is logged and skipped, and stopping halfway leaves every alert
already inserted in place.
"""

import logging
from datetime import date
from typing import Callable

from django.db import DEFAULT_DB_ALIAS
from django.utils import timezone

from restockman.conf import restockman_settings
from restockman.models.alert import Alert
from restockman.models.enums import AlertType
from restockman.models.order import PurchaseOrder
from restockman.priority import alert_type_for, is_short, overdue_priority, priority_for
from restockman.protocols.inventory import InventorySnapshotProvider, ProductSnapshot
from restockman.services.alerts import AlertStore

logger = logging.getLogger('restockman')


def stock_alert_text(product: ProductSnapshot) -> tuple[str, str]:
    """Title and message for a low/out of stock alert."""
    out = product.current_stock <= 0
    title = f"Out of Stock: {product.name}" if out else f"Low Stock: {product.name}"
    label = f"{product.name} ({product.sku})" if product.sku else product.name
    message = (
        f"{label} is {'out of stock' if out else 'running low'}. "
        f"Current stock: {product.current_stock} {product.unit}, "
        f"Threshold: {product.low_stock_threshold} {product.unit}"
    )
    return title, message


def overdue_alert_text(order: PurchaseOrder, days_overdue: int) -> tuple[str, str]:
    """Title and message for an overdue purchase order alert."""
    title = f"Overdue Purchase Order: {order.po_number}"
    message = (
        f"Purchase order {order.po_number} is {days_overdue} days overdue. "
        f"Expected delivery was {order.expected_delivery_date.isoformat()}."
    )
    return title, message


class AlertGenerator:
    """Detects shortfall conditions and records one open alert per condition."""

    def __init__(self, provider: InventorySnapshotProvider | None = None,
                 store: AlertStore | None = None, using: str = DEFAULT_DB_ALIAS):
        if provider is None:
            from restockman.adapters import get_snapshot_provider
            provider = get_snapshot_provider()
        self.provider = provider
        self.using = using
        self.store = store or AlertStore(using=using)

    # ══════════════════════════════════════════════════════════════
    # STOCK ALERTS
    # ══════════════════════════════════════════════════════════════

    def pending_stock_conditions(self) -> list[tuple[ProductSnapshot, str, str]]:
        """
        Shortfalls that would produce a new alert, without writing anything.

        Returns:
            List of (product, alert_type, priority)
        """
        pending = []
        for product in self.provider.list_products():
            if not is_short(product.current_stock, product.low_stock_threshold):
                continue
            alert_type = alert_type_for(product.current_stock)
            if self.store.has_open(product.id, alert_type):
                continue
            pending.append((
                product,
                alert_type,
                priority_for(product.current_stock, product.low_stock_threshold),
            ))
        return pending

    def evaluate_product(self, product: ProductSnapshot) -> Alert | None:
        """
        Create the alert for one product if it is short and not yet alerted.

        Returns:
            The new alert, or None (not short, or an open alert exists)
        """
        if not is_short(product.current_stock, product.low_stock_threshold):
            return None

        title, message = stock_alert_text(product)
        return self.store.create_if_absent(
            alert_type=alert_type_for(product.current_stock),
            priority=priority_for(product.current_stock, product.low_stock_threshold),
            related_id=product.id,
            product_id=product.id,
            title=title,
            message=message,
            current_stock=product.current_stock,
            low_stock_threshold=product.low_stock_threshold,
            notes='Alert automatically created',
        )

    def scan_stock(self, should_stop: Callable[[], bool] | None = None) -> list[Alert]:
        """
        Evaluate every product of the snapshot.

        Args:
            should_stop: Checked between products; return True to stop early.

        Returns:
            Alerts created by this scan
        """
        created = []
        for product in self.provider.list_products():
            if should_stop is not None and should_stop():
                logger.info("alert.generate.cancelled", extra={"created": len(created)})
                break
            try:
                alert = self.evaluate_product(product)
            except Exception:
                logger.exception(
                    "alert.generate.failed",
                    extra={"product_id": getattr(product, 'id', None)},
                )
                continue
            if alert is not None:
                created.append(alert)
        return created

    # ══════════════════════════════════════════════════════════════
    # OVERDUE REPLENISHMENT ALERTS
    # ══════════════════════════════════════════════════════════════

    def evaluate_order(self, order: PurchaseOrder, today: date) -> Alert | None:
        """Create the overdue alert for one purchase order if needed."""
        days = order.days_overdue(today)
        if days <= 0:
            return None

        title, message = overdue_alert_text(order, days)
        return self.store.create_if_absent(
            alert_type=AlertType.OVERDUE_REPLENISHMENT,
            priority=overdue_priority(
                days,
                high_after=restockman_settings.OVERDUE_HIGH_DAYS,
                medium_after=restockman_settings.OVERDUE_MEDIUM_DAYS,
            ),
            related_id=order.pk,
            product_id=order.product_id,
            title=title,
            message=message,
            notes='Alert automatically created',
        )

    def overdue_orders(self, today: date):
        """
        Orders past expected delivery that still warrant an alert.

        Received orders are excluded, and so is any order whose overdue
        alert was already ignored or resolved.
        """
        closed = (
            Alert.objects.using(self.using)
            .closed()
            .filter(alert_type=AlertType.OVERDUE_REPLENISHMENT)
            .values('related_id')
        )
        return (
            PurchaseOrder.objects.using(self.using)
            .overdue(today)
            .exclude(pk__in=closed)
            .order_by('pk')
        )

    def scan_overdue(self, today: date | None = None,
                     should_stop: Callable[[], bool] | None = None) -> list[Alert]:
        """Evaluate every purchase order past its expected delivery date."""
        today = today or timezone.localdate()
        created = []
        orders = self.overdue_orders(today)
        for order in orders.iterator():
            if should_stop is not None and should_stop():
                logger.info("alert.generate.cancelled", extra={"created": len(created)})
                break
            try:
                alert = self.evaluate_order(order, today)
            except Exception:
                logger.exception("alert.generate.failed", extra={"purchase_order_id": order.pk})
                continue
            if alert is not None:
                created.append(alert)
        return created

    # ══════════════════════════════════════════════════════════════
    # ENTRY POINT
    # ══════════════════════════════════════════════════════════════

    def generate(self, include_overdue: bool = True, today: date | None = None,
                 should_stop: Callable[[], bool] | None = None) -> list[Alert]:
        """
        Run the stock scan and, optionally, the overdue scan.

        Returns:
            Only the alerts created by this run
        """
        created = self.scan_stock(should_stop=should_stop)
        if include_overdue and not (should_stop is not None and should_stop()):
            created += self.scan_overdue(today=today, should_stop=should_stop)

        logger.info(
            "alert.generate.completed",
            extra={"created": len(created), "include_overdue": include_overdue},
        )
        return created
