"""
Initial migration for Restockman models.
"""

from decimal import Decimal
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Restockman models: Supplier, Product, StockMovement, PurchaseOrder, Alert, AlertEvent."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('email', models.EmailField(blank=True, default='', max_length=254, verbose_name='E-mail')),
                ('phone', models.CharField(blank=True, default='', max_length=40, verbose_name='Phone')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Supplier',
                'verbose_name_plural': 'Suppliers',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('sku', models.CharField(max_length=64, unique=True, verbose_name='SKU')),
                ('category', models.CharField(blank=True, default='', max_length=100, verbose_name='Category')),
                ('current_stock', models.IntegerField(default=0, verbose_name='Current stock')),
                ('low_stock_threshold', models.PositiveIntegerField(default=0, help_text='Alert fires when current stock <= this value', verbose_name='Low stock threshold')),
                ('max_stock_level', models.PositiveIntegerField(default=0, verbose_name='Max stock level')),
                ('reorder_point', models.PositiveIntegerField(default=0, verbose_name='Reorder point')),
                ('unit', models.CharField(default='pcs', max_length=20, verbose_name='Unit')),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Unit price')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='products', to='restockman.supplier', verbose_name='Supplier')),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['is_active', 'current_stock'], name='restockman_product_stock_idx')],
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('direction', models.CharField(choices=[('in', 'Inbound'), ('out', 'Outbound')], max_length=3, verbose_name='Direction')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantity')),
                ('reference_type', models.CharField(blank=True, default='', max_length=50, verbose_name='Reference type')),
                ('reference_id', models.CharField(blank=True, default='', max_length=64, verbose_name='Reference id')),
                ('notes', models.CharField(blank=True, default='', max_length=255, verbose_name='Notes')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Date/Time')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='restockman.product', verbose_name='Product')),
            ],
            options={
                'verbose_name': 'Stock movement',
                'verbose_name_plural': 'Stock movements',
                'ordering': ['timestamp'],
                'indexes': [models.Index(fields=['product', 'direction', 'timestamp'], name='restockman_movement_window_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(('quantity__gt', 0)), name='stock_movement_quantity_positive')],
            },
        ),
        migrations.CreateModel(
            name='PurchaseOrder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('po_number', models.CharField(max_length=40, unique=True, verbose_name='PO number')),
                ('quantity_ordered', models.PositiveIntegerField(verbose_name='Quantity ordered')),
                ('unit_price_at_issuance', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Unit price at issuance')),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=14, verbose_name='Total amount')),
                ('status', models.CharField(choices=[('created', 'Created'), ('sent', 'Sent')], db_index=True, default='created', max_length=10, verbose_name='Status')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('expected_delivery_date', models.DateField(blank=True, db_index=True, null=True, verbose_name='Expected delivery')),
                ('sent_method', models.CharField(blank=True, choices=[('email', 'E-mail'), ('sms', 'SMS'), ('whatsapp', 'WhatsApp'), ('print', 'Print')], max_length=20, null=True, verbose_name='Sent via')),
                ('sent_to', models.CharField(blank=True, max_length=255, null=True, verbose_name='Sent to')),
                ('sent_at', models.DateTimeField(blank=True, null=True, verbose_name='Sent at')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Created at')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchase_orders', to='restockman.product', verbose_name='Product')),
                ('supplier', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchase_orders', to='restockman.supplier', verbose_name='Supplier')),
            ],
            options={
                'verbose_name': 'Purchase order',
                'verbose_name_plural': 'Purchase orders',
                'ordering': ['-created_at', '-id'],
                'constraints': [models.CheckConstraint(condition=models.Q(('quantity_ordered__gt', 0)), name='purchase_order_quantity_positive')],
            },
        ),
        migrations.CreateModel(
            name='Alert',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('alert_type', models.CharField(choices=[('low_stock', 'Low stock'), ('out_of_stock', 'Out of stock'), ('overdue_replenishment', 'Overdue replenishment')], max_length=30, verbose_name='Type')),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('critical', 'Critical')], max_length=10, verbose_name='Priority')),
                ('related_id', models.PositiveBigIntegerField(help_text='Product id for stock alerts, purchase order id for overdue alerts', verbose_name='Subject id')),
                ('title', models.CharField(max_length=255, verbose_name='Title')),
                ('message', models.TextField(blank=True, default='', verbose_name='Message')),
                ('status', models.CharField(choices=[('active', 'Active'), ('acknowledged', 'Acknowledged'), ('ignored', 'Ignored'), ('resolved', 'Resolved')], db_index=True, default='active', max_length=20, verbose_name='Status')),
                ('ignore_reason', models.TextField(blank=True, null=True, verbose_name='Ignore reason')),
                ('current_stock', models.IntegerField(blank=True, null=True, verbose_name='Stock at creation')),
                ('low_stock_threshold', models.IntegerField(blank=True, null=True, verbose_name='Threshold at creation')),
                ('acknowledged_at', models.DateTimeField(blank=True, null=True, verbose_name='Acknowledged at')),
                ('ignored_at', models.DateTimeField(blank=True, null=True, verbose_name='Ignored at')),
                ('resolved_at', models.DateTimeField(blank=True, null=True, verbose_name='Resolved at')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('product', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='alerts', to='restockman.product', verbose_name='Product')),
                ('resolving_purchase_order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='resolved_alerts', to='restockman.purchaseorder', verbose_name='Resolving purchase order')),
            ],
            options={
                'verbose_name': 'Stock alert',
                'verbose_name_plural': 'Stock alerts',
                'indexes': [
                    models.Index(fields=['status', 'priority', 'created_at'], name='restockman_alert_queue_idx'),
                    models.Index(fields=['alert_type', 'related_id'], name='restockman_alert_subject_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status__in', ['active', 'acknowledged'])), fields=('related_id', 'alert_type'), name='unique_open_alert_per_subject'),
                    models.CheckConstraint(condition=models.Q(models.Q(('status', 'resolved'), _negated=True), ('resolving_purchase_order__isnull', False), _connector='OR'), name='resolved_alert_has_purchase_order'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AlertEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('created', 'Created'), ('acknowledged', 'Acknowledged'), ('ignored', 'Ignored'), ('resolved', 'Resolved')], max_length=20, verbose_name='Action')),
                ('from_status', models.CharField(blank=True, default='', max_length=20, verbose_name='From')),
                ('to_status', models.CharField(max_length=20, verbose_name='To')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Created at')),
                ('alert', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='events', to='restockman.alert', verbose_name='Alert')),
            ],
            options={
                'verbose_name': 'Alert event',
                'verbose_name_plural': 'Alert events',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
