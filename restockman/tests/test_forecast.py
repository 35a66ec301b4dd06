"""
Tests for the dashboard forecast.
"""

import pytest

from restockman import restock
from restockman.models import Urgency
from restockman.services.forecast import ForecastReporter


pytestmark = pytest.mark.django_db


@pytest.fixture
def movers(make_product, outbound):
    """Fast mover, slow mover, one sold out and one never moving."""
    fast = make_product(name='Fast', current_stock=100, low_stock_threshold=10)
    outbound(fast, 300, days_ago=3)
    slow = make_product(name='Slow', current_stock=100, low_stock_threshold=10)
    outbound(slow, 30, days_ago=3)
    sold_out = make_product(name='Sold out', current_stock=0)
    outbound(sold_out, 500, days_ago=3)
    make_product(name='Idle', current_stock=50)
    return fast, slow


class TestForecast:

    def test_only_stocked_moving_products(self, movers):
        fast, slow = movers

        forecast = restock.forecast()

        assert [i.recommendation.product_id for i in forecast.items] == [fast.pk, slow.pk]

    def test_reorder_recommended_within_horizon(self, movers):
        forecast = ForecastReporter().report()
        fast, slow = forecast.items

        # 100 units at 10/day
        assert fast.recommendation.days_until_stockout == 10
        assert fast.recommendation.urgency == Urgency.MEDIUM
        assert fast.reorder_recommended
        # 100 units at 1/day
        assert slow.recommendation.days_until_stockout == 100
        assert not slow.reorder_recommended

    def test_summary(self, movers):
        forecast = ForecastReporter().report()

        assert forecast.summary == {
            'total': 2,
            'high': 0,
            'medium': 1,
            'normal': 1,
            'reorderRecommended': 1,
        }

    def test_limit(self, movers):
        fast, _ = movers

        forecast = ForecastReporter().report(limit=1)

        assert [i.recommendation.product_id for i in forecast.items] == [fast.pk]

    def test_ties_break_by_product_id(self, make_product, outbound):
        first = make_product(current_stock=10)
        second = make_product(current_stock=10)
        outbound(second, 15)
        outbound(first, 15)

        forecast = ForecastReporter().report()

        assert [i.recommendation.product_id for i in forecast.items] == [first.pk, second.pk]

    def test_as_dict(self, movers):
        data = ForecastReporter().report().as_dict()

        assert data['windowDays'] == 30
        assert data['items'][0]['reorderRecommended'] is True
        assert data['items'][0]['avgConsumptionPerDay'] == 10.0
