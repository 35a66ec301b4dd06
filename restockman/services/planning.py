"""
Replenishment planning — consumption rate, stockout forecast, reorder size.

Advisory only: nothing here writes to the database. A caller may ignore
or override every number it returns.

The math is kept in small pure functions so the dashboard forecast
reuses exactly the same rules. All ratios are computed from integer
totals (outbound quantity over the window) instead of a rounded daily
rate, so floors and ceilings never drift on fractional rates.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.utils import timezone

from restockman.conf import restockman_settings
from restockman.exceptions import NotFoundError, ValidationError
from restockman.models.enums import AlertPriority, MovementDirection, Urgency
from restockman.priority import is_short, priority_for
from restockman.protocols.inventory import InventorySnapshotProvider, ProductSnapshot

HIGH_URGENCY_DAYS = 7
MEDIUM_URGENCY_DAYS = 14


# ══════════════════════════════════════════════════════════════
# PURE MATH
# ══════════════════════════════════════════════════════════════


def average_daily_consumption(outbound_total: int, window_days: int) -> Decimal:
    """Outbound quantity per day over the window (0 without history)."""
    if outbound_total <= 0 or window_days <= 0:
        return Decimal('0')
    return (Decimal(outbound_total) / Decimal(window_days)).quantize(
        Decimal('0.001'), rounding=ROUND_HALF_UP,
    )


def days_until_stockout(current_stock: int, outbound_total: int,
                        window_days: int) -> int | None:
    """
    floor(current_stock / avg_per_day), or None when nothing goes out.

    None means "no forecast", never infinity.
    """
    if outbound_total <= 0 or window_days <= 0:
        return None
    return max(current_stock, 0) * window_days // outbound_total


def urgency_for(days: int | None) -> Urgency:
    """Urgency tier of a stockout forecast."""
    if days is None:
        return Urgency.NORMAL
    if days <= HIGH_URGENCY_DAYS:
        return Urgency.HIGH
    if days <= MEDIUM_URGENCY_DAYS:
        return Urgency.MEDIUM
    return Urgency.NORMAL


def suggested_quantity(low_stock_threshold: int, reorder_point: int,
                       outbound_total: int, window_days: int,
                       coverage_days: int) -> int:
    """
    How much to reorder.

    Without history: twice the low stock threshold (safety margin).
    With history: enough to cover ``coverage_days`` of consumption, never
    below the reorder point.
    """
    if outbound_total <= 0 or window_days <= 0:
        return 2 * low_stock_threshold
    # ceil(avg * coverage) in integers
    coverage_need = -(-outbound_total * coverage_days // window_days)
    return max(reorder_point, coverage_need)


# ══════════════════════════════════════════════════════════════
# PLANNER
# ══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Recommendation:
    """Replenishment advice for one product."""

    product_id: int
    product_name: str
    current_stock: int
    low_stock_threshold: int
    reorder_point: int
    window_days: int
    coverage_days: int
    outbound_quantity: int
    avg_consumption_per_day: Decimal
    days_until_stockout: int | None
    urgency: str
    suggested_quantity: int
    unit_price: Decimal
    supplier_id: int | None
    priority: str | None

    @property
    def has_forecast(self) -> bool:
        return self.days_until_stockout is not None

    @property
    def estimated_cost(self) -> Decimal:
        return Decimal(self.suggested_quantity) * self.unit_price

    def as_dict(self) -> dict:
        return {
            'productId': self.product_id,
            'productName': self.product_name,
            'currentStock': self.current_stock,
            'lowStockThreshold': self.low_stock_threshold,
            'reorderPoint': self.reorder_point,
            'windowDays': self.window_days,
            'coverageDays': self.coverage_days,
            'outboundQuantity': self.outbound_quantity,
            'avgConsumptionPerDay': float(self.avg_consumption_per_day),
            'daysUntilStockout': self.days_until_stockout,
            'urgency': str(self.urgency),
            'suggestedQuantity': self.suggested_quantity,
            'unitPrice': str(self.unit_price),
            'estimatedCost': str(self.estimated_cost),
            'supplierId': self.supplier_id,
            'priority': str(self.priority) if self.priority else None,
        }


def plan_for(product: ProductSnapshot, outbound_total: int,
             window_days: int, coverage_days: int) -> Recommendation:
    """Build a Recommendation from a snapshot and its outbound total."""
    days = days_until_stockout(product.current_stock, outbound_total, window_days)
    return Recommendation(
        product_id=product.id,
        product_name=product.name,
        current_stock=product.current_stock,
        low_stock_threshold=product.low_stock_threshold,
        reorder_point=product.reorder_point,
        window_days=window_days,
        coverage_days=coverage_days,
        outbound_quantity=outbound_total,
        avg_consumption_per_day=average_daily_consumption(outbound_total, window_days),
        days_until_stockout=days,
        urgency=urgency_for(days),
        suggested_quantity=suggested_quantity(
            product.low_stock_threshold,
            product.reorder_point,
            outbound_total,
            window_days,
            coverage_days,
        ),
        unit_price=product.unit_price,
        supplier_id=product.supplier_id,
        priority=priority_for(product.current_stock, product.low_stock_threshold),
    )


def _positive_days(value, name) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ValidationError('INVALID_PAYLOAD', message=f'{name} must be a positive integer', **{name: value})
    return value


class ReplenishmentPlanner:
    """
    Suggests reorder quantities from the trailing consumption rate.

    Usage:
        planner = ReplenishmentPlanner()
        advice = planner.recommend(product_id)
        advice.suggested_quantity, advice.days_until_stockout, advice.urgency
    """

    def __init__(self, provider: InventorySnapshotProvider | None = None,
                 window_days: int | None = None, coverage_days: int | None = None):
        if provider is None:
            from restockman.adapters import get_snapshot_provider
            provider = get_snapshot_provider()
        self.provider = provider
        self.window_days = window_days
        self.coverage_days = coverage_days

    def _window(self, window_days):
        if window_days is None:
            window_days = self.window_days
        if window_days is None:
            window_days = restockman_settings.CONSUMPTION_WINDOW_DAYS
        return _positive_days(window_days, 'window_days')

    def _coverage(self, coverage_days):
        if coverage_days is None:
            coverage_days = self.coverage_days
        if coverage_days is None:
            coverage_days = restockman_settings.COVERAGE_DAYS
        return _positive_days(coverage_days, 'coverage_days')

    @staticmethod
    def window_start(window_days: int, now: datetime | None = None) -> datetime:
        return (now or timezone.now()) - timedelta(days=window_days)

    def recommend(self, product, window_days: int | None = None,
                  coverage_days: int | None = None,
                  now: datetime | None = None) -> Recommendation:
        """
        Replenishment advice for one product.

        Args:
            product: Product id or ProductSnapshot
            window_days: Trailing window for the consumption rate
            coverage_days: Days of demand the suggestion should cover
            now: Reference time (None = timezone.now())

        Raises:
            NotFoundError('PRODUCT_NOT_FOUND'): Unknown product id
        """
        window = self._window(window_days)
        coverage = self._coverage(coverage_days)

        if not isinstance(product, ProductSnapshot):
            product_id = product
            product = self.provider.get_product(product_id)
            if product is None:
                raise NotFoundError('PRODUCT_NOT_FOUND', product_id=product_id)

        since = self.window_start(window, now)
        movements = self.provider.list_movements(product.id, since, direction=MovementDirection.OUT)
        outbound_total = sum(m.quantity for m in movements)
        return plan_for(product, outbound_total, window, coverage)

    def reorder_suggestions(self, limit: int = 50, window_days: int | None = None,
                            coverage_days: int | None = None,
                            now: datetime | None = None) -> dict:
        """
        Advice for every product at or below its threshold.

        Out-of-stock products first, then the most expensive reorders.

        Returns:
            {'items': [Recommendation, ...], 'total_items': n,
             'total_estimated_cost': Decimal}
        """
        window = self._window(window_days)
        coverage = self._coverage(coverage_days)
        totals = self.provider.outbound_totals(self.window_start(window, now))

        items = [
            plan_for(p, totals.get(p.id, 0), window, coverage)
            for p in self.provider.list_products()
            if is_short(p.current_stock, p.low_stock_threshold)
        ]
        items.sort(key=lambda r: (
            0 if r.priority == AlertPriority.CRITICAL else 1,
            -r.estimated_cost,
            r.product_id,
        ))
        items = items[:limit]
        return {
            'items': items,
            'total_items': len(items),
            'total_estimated_cost': sum((r.estimated_cost for r in items), Decimal('0')),
        }
