"""
Catalog records — Supplier and Product.

The catalog is owned by the back office; the engine only reads it.
These models give the default snapshot provider something concrete to
read, and give purchase orders something to point at.
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class Supplier(models.Model):
    """Who a product is reordered from."""

    name = models.CharField(max_length=200, verbose_name=_('Name'))
    email = models.EmailField(blank=True, default='', verbose_name=_('E-mail'))
    phone = models.CharField(max_length=40, blank=True, default='', verbose_name=_('Phone'))
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Supplier')
        verbose_name_plural = _('Suppliers')
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class Product(models.Model):
    """
    Catalog product with its stock levels.

    current_stock is kept consistent with the StockMovement ledger by the
    catalog subsystem; the engine never writes it.
    """

    name = models.CharField(max_length=200, verbose_name=_('Name'))
    sku = models.CharField(max_length=64, unique=True, verbose_name=_('SKU'))
    category = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Category'))

    current_stock = models.IntegerField(default=0, verbose_name=_('Current stock'))
    low_stock_threshold = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Low stock threshold'),
        help_text=_('Alert fires when current stock <= this value'),
    )
    max_stock_level = models.PositiveIntegerField(default=0, verbose_name=_('Max stock level'))
    reorder_point = models.PositiveIntegerField(default=0, verbose_name=_('Reorder point'))

    unit = models.CharField(max_length=20, default='pcs', verbose_name=_('Unit'))
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Unit price'),
    )
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
        verbose_name=_('Supplier'),
    )
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Product')
        verbose_name_plural = _('Products')
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active', 'current_stock'], name='restockman_product_stock_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.sku})"
