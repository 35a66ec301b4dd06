"""
Model Snapshot Provider — InventorySnapshotProvider over restockman's own tables.

Usage in settings.py (this is the default):
    RESTOCKMAN = {
        "SNAPSHOT_PROVIDER": "restockman.adapters.catalog.ModelSnapshotProvider",
    }
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterator

from django.db import DEFAULT_DB_ALIAS
from django.db.models import Sum

from restockman.models.movement import StockMovement
from restockman.models.product import Product
from restockman.protocols.inventory import MovementRecord, ProductSnapshot


def to_snapshot(product: Product) -> ProductSnapshot:
    """Freeze a Product row into a ProductSnapshot."""
    return ProductSnapshot(
        id=product.pk,
        name=product.name,
        sku=product.sku,
        category=product.category,
        current_stock=product.current_stock,
        low_stock_threshold=product.low_stock_threshold,
        max_stock_level=product.max_stock_level,
        reorder_point=product.reorder_point,
        unit=product.unit,
        unit_price=product.unit_price,
        supplier_id=product.supplier_id,
    )


class ModelSnapshotProvider:
    """Reads Product and StockMovement through the Django ORM."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def _products(self):
        return Product.objects.using(self.using)

    def _movements(self):
        return StockMovement.objects.using(self.using)

    def list_products(self) -> Iterator[ProductSnapshot]:
        qs = self._products().filter(is_active=True).order_by('pk')
        for product in qs.iterator():
            yield to_snapshot(product)

    def get_product(self, product_id: int) -> ProductSnapshot | None:
        product = self._products().filter(pk=product_id).first()
        if product is None:
            return None
        return to_snapshot(product)

    def list_movements(self, product_id: int, since: datetime,
                       direction: str | None = None) -> list[MovementRecord]:
        qs = self._movements().filter(product_id=product_id).since(since)
        if direction is not None:
            qs = qs.filter(direction=direction)
        return [
            MovementRecord(
                product_id=m.product_id,
                direction=m.direction,
                quantity=m.quantity,
                timestamp=m.timestamp,
            )
            for m in qs.order_by('timestamp', 'pk')
        ]

    def outbound_totals(self, since: datetime) -> dict[int, int]:
        rows = (
            self._movements()
            .outbound()
            .since(since)
            .values('product_id')
            .annotate(total=Sum('quantity'))
        )
        return {row['product_id']: row['total'] for row in rows if row['total']}
