"""
Tests for replenishment planning.
"""

from decimal import Decimal

import pytest

from restockman import restock
from restockman.exceptions import NotFoundError, ValidationError
from restockman.models import MovementDirection, StockMovement, Urgency
from restockman.services.planning import (
    ReplenishmentPlanner,
    average_daily_consumption,
    days_until_stockout,
    suggested_quantity,
    urgency_for,
)


class TestMath:
    """Pure functions, no database."""

    def test_average(self):
        assert average_daily_consumption(90, 30) == Decimal('3.000')
        assert average_daily_consumption(10, 30) == Decimal('0.333')
        assert average_daily_consumption(0, 30) == Decimal('0')

    def test_days_until_stockout_floors(self):
        assert days_until_stockout(20, 90, 30) == 6   # 20 / 3.0 = 6.67
        assert days_until_stockout(5, 10, 30) == 15   # 5 / 0.333.. = 15

    def test_no_consumption_means_no_forecast(self):
        assert days_until_stockout(20, 0, 30) is None

    def test_negative_stock_is_already_out(self):
        assert days_until_stockout(-4, 30, 30) == 0

    @pytest.mark.parametrize('days,expected', [
        (0, Urgency.HIGH),
        (7, Urgency.HIGH),
        (8, Urgency.MEDIUM),
        (14, Urgency.MEDIUM),
        (15, Urgency.NORMAL),
        (None, Urgency.NORMAL),
    ])
    def test_urgency(self, days, expected):
        assert urgency_for(days) == expected

    def test_suggestion_without_history(self):
        """Twice the threshold when nothing went out."""
        assert suggested_quantity(10, 50, 0, 30, 30) == 20

    def test_suggestion_covers_demand(self):
        assert suggested_quantity(10, 5, 90, 30, 30) == 90

    def test_suggestion_rounds_up(self):
        # 10 units / 30 days over 7 days = 2.33 -> 3
        assert suggested_quantity(10, 0, 10, 30, 7) == 3

    def test_suggestion_never_below_reorder_point(self):
        assert suggested_quantity(10, 40, 30, 30, 7) == 40


@pytest.mark.django_db
class TestRecommend:
    """Tests for ReplenishmentPlanner.recommend()."""

    def test_recommend_with_history(self, make_product, outbound):
        widget = make_product(current_stock=20, low_stock_threshold=10, reorder_point=5)
        outbound(widget, 60, days_ago=2)
        outbound(widget, 30, days_ago=20)

        advice = restock.recommend(widget.pk)

        assert advice.outbound_quantity == 90
        assert advice.avg_consumption_per_day == Decimal('3.000')
        assert advice.days_until_stockout == 6
        assert advice.urgency == Urgency.HIGH
        assert advice.suggested_quantity == 90
        assert advice.has_forecast

    def test_recommend_without_history(self, make_product):
        widget = make_product(current_stock=20, low_stock_threshold=10)

        advice = restock.recommend(widget.pk)

        assert advice.avg_consumption_per_day == Decimal('0')
        assert advice.days_until_stockout is None
        assert advice.urgency == Urgency.NORMAL
        assert advice.suggested_quantity == 20
        assert not advice.has_forecast

    def test_only_outbound_inside_window_counts(self, make_product, outbound):
        widget = make_product(current_stock=20)
        outbound(widget, 30, days_ago=5)
        outbound(widget, 500, days_ago=40)
        StockMovement.objects.create(product=widget, direction=MovementDirection.IN, quantity=300)

        advice = restock.recommend(widget.pk)

        assert advice.outbound_quantity == 30

    def test_window_and_coverage_override(self, make_product, outbound):
        widget = make_product(current_stock=20, reorder_point=0)
        outbound(widget, 70, days_ago=3)

        advice = restock.recommend(widget.pk, window_days=7, coverage_days=14)

        assert advice.avg_consumption_per_day == Decimal('10.000')
        assert advice.days_until_stockout == 2
        assert advice.suggested_quantity == 140

    def test_window_from_settings(self, settings, make_product, outbound):
        settings.RESTOCKMAN = {'CONSUMPTION_WINDOW_DAYS': 7, 'COVERAGE_DAYS': 7}
        widget = make_product(current_stock=20)
        outbound(widget, 14, days_ago=3)
        outbound(widget, 100, days_ago=10)

        advice = ReplenishmentPlanner().recommend(widget.pk)

        assert advice.window_days == 7
        assert advice.outbound_quantity == 14

    def test_unknown_product(self, db):
        with pytest.raises(NotFoundError) as exc:
            restock.recommend(987654)

        assert exc.value.code == 'PRODUCT_NOT_FOUND'

    def test_invalid_window(self, product):
        with pytest.raises(ValidationError):
            restock.recommend(product.pk, window_days=-3)

    @pytest.mark.parametrize('kwargs', [{'window_days': 0}, {'coverage_days': 0}])
    def test_zero_days_are_rejected(self, product, kwargs):
        with pytest.raises(ValidationError) as exc:
            restock.recommend(product.pk, **kwargs)

        assert exc.value.code == 'INVALID_PAYLOAD'

    def test_planner_never_writes(self, make_product, outbound, django_assert_num_queries):
        widget = make_product(current_stock=20)
        outbound(widget, 10)

        with django_assert_num_queries(2):
            ReplenishmentPlanner().recommend(widget.pk)


@pytest.mark.django_db
class TestReorderSuggestions:

    def test_out_of_stock_first_then_cost(self, make_product):
        cheap_out = make_product(name='Bolt', current_stock=0, low_stock_threshold=5,
                                 unit_price=Decimal('1.00'))
        pricey = make_product(name='Motor', current_stock=3, low_stock_threshold=10,
                              unit_price=Decimal('10.00'))
        cheap = make_product(name='Nut', current_stock=3, low_stock_threshold=10,
                             unit_price=Decimal('0.50'))
        make_product(name='Gear', current_stock=50, low_stock_threshold=10)

        result = restock.reorder_suggestions()

        assert [r.product_id for r in result['items']] == [cheap_out.pk, pricey.pk, cheap.pk]
        # 10 x 1.00 + 20 x 10.00 + 20 x 0.50
        assert result['total_estimated_cost'] == Decimal('220.00')
        assert result['total_items'] == 3

    def test_limit(self, make_product):
        for _ in range(4):
            make_product(current_stock=1)

        assert restock.reorder_suggestions(limit=2)['total_items'] == 2
