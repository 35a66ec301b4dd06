"""
Dashboard forecast — which products run out first.

Read-only. Uses the same consumption math as the replenishment planner.
"""

from dataclasses import dataclass, field
from datetime import datetime

from restockman.conf import restockman_settings
from restockman.models.enums import Urgency
from restockman.protocols.inventory import InventorySnapshotProvider
from restockman.services.planning import Recommendation, ReplenishmentPlanner, plan_for


@dataclass(frozen=True)
class ForecastItem:
    recommendation: Recommendation
    reorder_recommended: bool

    def as_dict(self) -> dict:
        data = self.recommendation.as_dict()
        data['reorderRecommended'] = self.reorder_recommended
        return data


@dataclass(frozen=True)
class Forecast:
    items: list[ForecastItem] = field(default_factory=list)
    window_days: int = 30
    summary: dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {
            'windowDays': self.window_days,
            'items': [item.as_dict() for item in self.items],
            'summary': self.summary,
        }


class ForecastReporter:
    """
    Products with stock and recent outbound movement, fastest movers first.

    Usage:
        forecast = ForecastReporter().report()
        forecast.summary  # {'total': 12, 'high': 2, 'medium': 3, 'normal': 7}
    """

    def __init__(self, provider: InventorySnapshotProvider | None = None):
        self.planner = ReplenishmentPlanner(provider=provider)

    @property
    def provider(self) -> InventorySnapshotProvider:
        return self.planner.provider

    def report(self, limit: int | None = None, window_days: int | None = None,
               now: datetime | None = None) -> Forecast:
        window = self.planner._window(window_days)
        coverage = self.planner._coverage(None)
        if limit is None:
            limit = restockman_settings.FORECAST_LIMIT
        horizon = restockman_settings.REORDER_HORIZON_DAYS

        totals = self.provider.outbound_totals(self.planner.window_start(window, now))
        recommendations = [
            plan_for(product, totals[product.id], window, coverage)
            for product in self.provider.list_products()
            if product.current_stock > 0 and totals.get(product.id, 0) > 0
        ]
        # Same window for every product, so the outbound total orders by rate exactly
        recommendations.sort(key=lambda r: (-r.outbound_quantity, r.product_id))

        items = [
            ForecastItem(
                recommendation=r,
                reorder_recommended=(
                    r.days_until_stockout is not None and r.days_until_stockout <= horizon
                ),
            )
            for r in recommendations[:max(limit, 0)]
        ]

        summary = {'total': len(items)}
        summary.update({value: 0 for value in Urgency.values})
        for item in items:
            summary[str(item.recommendation.urgency)] += 1
        summary['reorderRecommended'] = sum(1 for item in items if item.reorder_recommended)

        return Forecast(items=items, window_days=window, summary=summary)
