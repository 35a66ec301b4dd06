"""
Restockman Admin.

Provides back-office views:
- Supplier / Product: editable catalog
- StockMovement: read-only ledger
- Alert: read-only with "acknowledge" and "ignore" actions, audit trail inline
- PurchaseOrder: read-only (orders are only created by the issuer)
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from restockman.exceptions import RestockError
from restockman.models import (
    Alert,
    AlertEvent,
    AlertStatus,
    Product,
    PurchaseOrder,
    StockMovement,
    Supplier,
)

logger = logging.getLogger(__name__)


class ReadOnlyAdminMixin:
    """Rows only change through the restockman services."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# CATALOG
# =========================================================================

@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'email']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Product admin — editable, with a shortfall flag."""

    list_display = ['name', 'sku', 'category', 'current_stock', 'low_stock_threshold',
                    'reorder_point', 'unit_price', 'supplier', 'is_short_display']
    list_filter = ['is_active', 'category', 'supplier']
    search_fields = ['name', 'sku']
    readonly_fields = ['created_at', 'updated_at']

    @admin.display(description=_('Short?'), boolean=True)
    def is_short_display(self, obj):
        return obj.current_stock <= obj.low_stock_threshold


# =========================================================================
# STOCK MOVEMENT ADMIN (read-only ledger)
# =========================================================================

@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ['timestamp', 'product', 'direction', 'quantity', 'reference_type', 'reference_id']
    list_filter = ['direction', 'timestamp']
    search_fields = ['product__name', 'product__sku', 'reference_id']
    date_hierarchy = 'timestamp'


# =========================================================================
# ALERT ADMIN (read-only with lifecycle actions)
# =========================================================================

class AlertEventInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = AlertEvent
    extra = 0
    fields = ['created_at', 'action', 'from_status', 'to_status', 'notes']
    readonly_fields = fields


@admin.register(Alert)
class AlertAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Alert admin — transitions go through AlertStore."""

    list_display = ['id', 'title', 'alert_type', 'priority', 'status', 'created_at']
    list_filter = ['status', 'priority', 'alert_type']
    search_fields = ['title', 'message']
    date_hierarchy = 'created_at'
    inlines = [AlertEventInline]
    actions = ['acknowledge_alerts', 'ignore_alerts']

    def _transition(self, request, queryset, method, **kwargs):
        from restockman.services.alerts import AlertStore

        store = AlertStore()
        count = 0
        for alert in queryset.filter(status__in=[AlertStatus.ACTIVE, AlertStatus.ACKNOWLEDGED]):
            try:
                getattr(store, method)(alert.pk, **kwargs)
                count += 1
            except RestockError as exc:
                logger.warning("%s: failed for alert %s: %s", method, alert.pk, exc)
        return count

    @admin.action(description=_('Acknowledge selected alerts'))
    def acknowledge_alerts(self, request, queryset):
        count = self._transition(request, queryset, 'acknowledge', notes='Acknowledged via admin')
        self.message_user(request, _('{count} alert(s) acknowledged.').format(count=count))

    @admin.action(description=_('Ignore selected alerts'))
    def ignore_alerts(self, request, queryset):
        count = self._transition(request, queryset, 'ignore', reason='Ignored via admin')
        self.message_user(request, _('{count} alert(s) ignored.').format(count=count))


# =========================================================================
# PURCHASE ORDER ADMIN (read-only)
# =========================================================================

@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ['po_number', 'product', 'supplier', 'quantity_ordered',
                    'total_amount', 'status', 'expected_delivery_date', 'sent_at', 'received_at']
    list_filter = ['status', 'sent_method', 'expected_delivery_date']
    search_fields = ['po_number', 'product__name', 'supplier__name']
    date_hierarchy = 'created_at'
