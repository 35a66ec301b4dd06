"""
PurchaseOrder model — commitment to reorder a product from its supplier.
"""

from datetime import date
from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from restockman.models.enums import OrderStatus, SendMethod


class PurchaseOrderQuerySet(models.QuerySet):

    def awaiting_delivery(self):
        return self.exclude(status=OrderStatus.RECEIVED)

    def overdue(self, today: date | None = None):
        """Orders still awaiting delivery past their expected date."""
        today = today or timezone.localdate()
        return self.awaiting_delivery().filter(
            expected_delivery_date__isnull=False,
            expected_delivery_date__lt=today,
        )


class PurchaseOrder(models.Model):
    """
    Purchase order for a single product.

    Rules:
    - Created only by PurchaseOrderIssuer, never deleted
    - unit_price_at_issuance is a snapshot; later catalog price changes
      never alter total_amount
    - sent_method/sent_to/sent_at are an audit annotation written by send()
    - received_at is set once by receive(); a received order is never overdue
    """

    po_number = models.CharField(
        max_length=40,
        unique=True,
        verbose_name=_('PO number'),
    )
    product = models.ForeignKey(
        'restockman.Product',
        on_delete=models.PROTECT,
        related_name='purchase_orders',
        verbose_name=_('Product'),
    )
    supplier = models.ForeignKey(
        'restockman.Supplier',
        on_delete=models.PROTECT,
        related_name='purchase_orders',
        verbose_name=_('Supplier'),
    )
    quantity_ordered = models.PositiveIntegerField(verbose_name=_('Quantity ordered'))
    unit_price_at_issuance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        verbose_name=_('Unit price at issuance'),
    )
    total_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        verbose_name=_('Total amount'),
    )
    status = models.CharField(
        max_length=10,
        choices=OrderStatus.choices,
        default=OrderStatus.CREATED,
        db_index=True,
        verbose_name=_('Status'),
    )
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))
    expected_delivery_date = models.DateField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Expected delivery'),
    )

    sent_method = models.CharField(
        max_length=20,
        choices=SendMethod.choices,
        null=True,
        blank=True,
        verbose_name=_('Sent via'),
    )
    sent_to = models.CharField(max_length=255, null=True, blank=True, verbose_name=_('Sent to'))
    sent_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Sent at'))
    received_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Received at'))

    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Created at'))

    objects = PurchaseOrderQuerySet.as_manager()

    class Meta:
        verbose_name = _('Purchase order')
        verbose_name_plural = _('Purchase orders')
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_ordered__gt=0),
                name='purchase_order_quantity_positive',
            ),
        ]

    def days_overdue(self, today: date | None = None) -> int:
        """Days past expected delivery (0 when received, or without a date)."""
        if self.expected_delivery_date is None or self.status == OrderStatus.RECEIVED:
            return 0
        today = today or timezone.localdate()
        return max((today - self.expected_delivery_date).days, 0)

    @property
    def computed_total(self) -> Decimal:
        return Decimal(self.quantity_ordered) * self.unit_price_at_issuance

    def __str__(self) -> str:
        return f"{self.po_number} — {self.quantity_ordered}x {self.product_id}"
