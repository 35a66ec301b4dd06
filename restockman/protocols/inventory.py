"""
Inventory Snapshot Protocol — read-only view of the catalog and its ledger.

Restockman defines this protocol; the catalog subsystem implements it.
The bundled ModelSnapshotProvider reads restockman's own Product and
StockMovement tables.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Protocol, runtime_checkable


@dataclass(frozen=True)
class ProductSnapshot:
    """Stock levels of one product at read time."""

    id: int
    name: str
    current_stock: int
    low_stock_threshold: int
    reorder_point: int = 0
    unit_price: Decimal = Decimal('0')
    supplier_id: int | None = None
    sku: str = ''
    category: str = ''
    unit: str = 'pcs'
    max_stock_level: int = 0


@dataclass(frozen=True)
class MovementRecord:
    """One ledger entry."""

    product_id: int
    direction: str  # "in" | "out"
    quantity: int
    timestamp: datetime


@runtime_checkable
class InventorySnapshotProvider(Protocol):
    """
    Protocol for reading inventory state.

    Implementations should provide methods to:
    - List every active product with its stock levels
    - Fetch one product
    - Read movements of a product inside a time window
    - Sum outbound quantities per product inside a time window
    """

    def list_products(self) -> Iterable[ProductSnapshot]:
        """
        All active products.

        Returns:
            Iterable of ProductSnapshot (may be lazy)
        """
        ...

    def get_product(self, product_id: int) -> ProductSnapshot | None:
        """
        One product.

        Args:
            product_id: Product primary key

        Returns:
            ProductSnapshot or None if not found
        """
        ...

    def list_movements(
        self,
        product_id: int,
        since: datetime,
        direction: str | None = None,
    ) -> list[MovementRecord]:
        """
        Movements of a product with timestamp >= since, oldest first.

        Args:
            product_id: Product primary key
            since: Window start (inclusive)
            direction: "in", "out" or None for both

        Returns:
            List of MovementRecord
        """
        ...

    def outbound_totals(self, since: datetime) -> dict[int, int]:
        """
        Sum of outbound quantities per product with timestamp >= since.

        Products without outbound movements in the window are absent.

        Returns:
            Dict[product_id, total_out]
        """
        ...
