"""
StockMovement model — Immutable ledger of inbound/outbound quantities.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from restockman.models.enums import MovementDirection


class StockMovementQuerySet(models.QuerySet):
    """Helpers for time-window reads."""

    def outbound(self):
        return self.filter(direction=MovementDirection.OUT)

    def since(self, start):
        return self.filter(timestamp__gte=start)


class StockMovement(models.Model):
    """
    Immutable record of a quantity entering or leaving stock.

    Rules:
    - NEVER update() or delete()
    - Corrections are new movements in the opposite direction
    - quantity is always positive; direction carries the sign
    """

    product = models.ForeignKey(
        'restockman.Product',
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name=_('Product'),
    )
    direction = models.CharField(
        max_length=3,
        choices=MovementDirection.choices,
        verbose_name=_('Direction'),
    )
    quantity = models.PositiveIntegerField(verbose_name=_('Quantity'))

    # External reference (sale, bill, purchase order, adjustment...)
    reference_type = models.CharField(max_length=50, blank=True, default='', verbose_name=_('Reference type'))
    reference_id = models.CharField(max_length=64, blank=True, default='', verbose_name=_('Reference id'))
    notes = models.CharField(max_length=255, blank=True, default='', verbose_name=_('Notes'))

    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Date/Time'))

    objects = StockMovementQuerySet.as_manager()

    class Meta:
        verbose_name = _('Stock movement')
        verbose_name_plural = _('Stock movements')
        ordering = ['timestamp']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name='stock_movement_quantity_positive',
            ),
        ]
        indexes = [
            models.Index(fields=['product', 'direction', 'timestamp'], name='restockman_movement_window_idx'),
        ]

    def save(self, *args, **kwargs):
        """Save movement once; the ledger is append-only."""
        if self.pk:
            raise ValueError(
                "Stock movements are immutable. "
                "To correct, record a new movement in the opposite direction."
            )
        if not self.quantity or self.quantity <= 0:
            raise ValueError("Movement quantity must be positive")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion — movements are immutable."""
        raise ValueError(
            "Stock movements are immutable. "
            "To reverse, record a new movement in the opposite direction."
        )

    def __str__(self) -> str:
        sign = '+' if self.direction == MovementDirection.IN else '-'
        return f"{sign}{self.quantity} {self.product_id} @ {self.timestamp:%Y-%m-%d}"
