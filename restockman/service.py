"""
Restock Service — The single public interface for alerting and replenishment.

Usage:
    from restockman import restock, RestockError

    created = restock.generate_alerts()
    page = restock.list_alerts(status='active')
    advice = restock.recommend(product_id)
    issued = restock.issue_order(product_id, advice.suggested_quantity, alert_id=alert_id)
    restock.send_order(issued.po_id, 'email', 'orders@supplier.test')
    restock.receive_order(issued.po_id)

Collaborators (snapshot provider, notifier) come from the RESTOCKMAN
setting; see restockman.conf.
"""

from datetime import date
from typing import Any, Callable

from restockman.models.alert import Alert, AlertEvent
from restockman.services.alerts import AlertStore, Page
from restockman.services.forecast import Forecast, ForecastReporter
from restockman.services.generator import AlertGenerator
from restockman.services.orders import IssuedOrder, PurchaseOrderIssuer, ReceivedOrder, SendReceipt
from restockman.services.planning import Recommendation, ReplenishmentPlanner


class Restock:
    """
    Single interface for all restockman operations.

    State-changing methods run under transaction.atomic() with row
    locks; see the service each one delegates to.
    """

    # ══════════════════════════════════════════════════════════════
    # ALERTS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def generate_alerts(cls, include_overdue: bool = True,
                        should_stop: Callable[[], bool] | None = None) -> list[Alert]:
        """Scan inventory (and overdue orders). Returns only new alerts."""
        return AlertGenerator().generate(include_overdue=include_overdue, should_stop=should_stop)

    @classmethod
    def list_alerts(cls, status=None, alert_type=None, priority=None,
                    page=1, limit=None) -> Page:
        return AlertStore().list(
            status=status, alert_type=alert_type, priority=priority,
            page=page, limit=limit,
        )

    @classmethod
    def get_alert(cls, alert_id) -> Alert:
        return AlertStore().get(alert_id)

    @classmethod
    def alert_history(cls, alert_id) -> list[AlertEvent]:
        return AlertStore().history(alert_id)

    @classmethod
    def create_alert(cls, **fields) -> Alert:
        """Manual alert. Raises ConflictError on a duplicate open alert."""
        return AlertStore().create(**fields)

    @classmethod
    def acknowledge(cls, alert_id, notes: str = '') -> Alert:
        return AlertStore().acknowledge(alert_id, notes=notes)

    @classmethod
    def ignore(cls, alert_id, reason: str | None = None) -> Alert:
        return AlertStore().ignore(alert_id, reason=reason)

    @classmethod
    def delete_alert(cls, alert_id) -> None:
        AlertStore().delete(alert_id)

    @classmethod
    def alert_stats(cls, days: int = 30) -> dict[str, Any]:
        return AlertStore().stats(days=days)

    # ══════════════════════════════════════════════════════════════
    # REPLENISHMENT
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def recommend(cls, product_id, window_days: int | None = None,
                  coverage_days: int | None = None) -> Recommendation:
        return ReplenishmentPlanner().recommend(
            product_id, window_days=window_days, coverage_days=coverage_days,
        )

    @classmethod
    def reorder_suggestions(cls, limit: int = 50) -> dict[str, Any]:
        return ReplenishmentPlanner().reorder_suggestions(limit=limit)

    @classmethod
    def forecast(cls, limit: int | None = None, window_days: int | None = None) -> Forecast:
        return ForecastReporter().report(limit=limit, window_days=window_days)

    # ══════════════════════════════════════════════════════════════
    # PURCHASE ORDERS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def issue_order(cls, product_id, quantity, notes: str | None = None,
                    alert_id=None, expected_delivery_date: date | None = None) -> IssuedOrder:
        return PurchaseOrderIssuer().issue(
            product_id, quantity, notes=notes, alert_id=alert_id,
            expected_delivery_date=expected_delivery_date,
        )

    @classmethod
    def send_order(cls, po_id, method: str, recipient: str) -> SendReceipt:
        return PurchaseOrderIssuer().send(po_id, method, recipient)

    @classmethod
    def receive_order(cls, po_id) -> ReceivedOrder:
        return PurchaseOrderIssuer().receive(po_id)
