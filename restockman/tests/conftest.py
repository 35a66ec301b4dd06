"""
Pytest fixtures for Restockman tests.
"""

import itertools
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from restockman.adapters import reset_adapters
from restockman.models import MovementDirection, Product, PurchaseOrder, StockMovement, Supplier
from restockman.services.alerts import AlertStore


_sku_counter = itertools.count(1)


class RecordingNotifier:
    """Notification sink that keeps what it was given."""

    def __init__(self):
        self.sent = []

    def send(self, notification):
        self.sent.append(notification)


class FailingNotifier:
    """Notification sink whose channel is always down."""

    def send(self, notification):
        raise ConnectionError("gateway unreachable")


@pytest.fixture(autouse=True)
def _fresh_adapters():
    """Adapters are cached per process; start every test clean."""
    reset_adapters()
    yield
    reset_adapters()


@pytest.fixture
def supplier(db):
    """Create a test supplier."""
    return Supplier.objects.create(
        name='Acme Supplies',
        email='orders@acme.test',
        phone='+1 555 0100',
    )


@pytest.fixture
def make_product(db, supplier):
    """Factory for products; short of stock unless told otherwise."""

    def _make(name='Widget', current_stock=3, low_stock_threshold=10, **kwargs):
        kwargs.setdefault('sku', f'SKU-{next(_sku_counter):05d}')
        kwargs.setdefault('unit_price', Decimal('2.50'))
        kwargs.setdefault('supplier', supplier)
        return Product.objects.create(
            name=name,
            current_stock=current_stock,
            low_stock_threshold=low_stock_threshold,
            **kwargs
        )

    return _make


@pytest.fixture
def product(make_product):
    """Low stock product: 3 left, threshold 10."""
    return make_product(name='Widget', sku='WID-001')


@pytest.fixture
def outbound(db):
    """Record an outbound movement some days ago."""

    def _outbound(product, quantity, days_ago=1):
        return StockMovement.objects.create(
            product=product,
            direction=MovementDirection.OUT,
            quantity=quantity,
            timestamp=timezone.now() - timedelta(days=days_ago),
        )

    return _outbound


@pytest.fixture
def make_order(db):
    """Create a purchase order directly (bypassing the issuer)."""
    numbers = itertools.count(1)

    def _make(product, quantity=10, expected_delivery_date=None, **kwargs):
        kwargs.setdefault('po_number', f'PO-TEST-{next(numbers):06d}')
        return PurchaseOrder.objects.create(
            product=product,
            supplier=product.supplier,
            quantity_ordered=quantity,
            unit_price_at_issuance=product.unit_price,
            total_amount=quantity * product.unit_price,
            expected_delivery_date=expected_delivery_date,
            **kwargs
        )

    return _make


@pytest.fixture
def store(db):
    return AlertStore()


@pytest.fixture
def recording_notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return FailingNotifier()


@pytest.fixture
def today():
    """Return today's date."""
    return timezone.localdate()
