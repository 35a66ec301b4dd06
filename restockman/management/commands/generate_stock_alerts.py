"""
Management command to scan inventory and raise stock alerts.

Usage:
    python manage.py generate_stock_alerts
    python manage.py generate_stock_alerts --dry-run
    python manage.py generate_stock_alerts --no-overdue
"""

from django.core.management.base import BaseCommand
from django.utils import timezone

from restockman import restock
from restockman.services.generator import AlertGenerator


class Command(BaseCommand):
    """Generate stock alerts command."""

    help = 'Raise low stock, out of stock and overdue replenishment alerts'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be alerted without writing anything'
        )
        parser.add_argument(
            '--no-overdue',
            action='store_true',
            help='Skip the overdue purchase order scan'
        )

    def handle(self, *args, **options):
        include_overdue = not options['no_overdue']

        if options['dry_run']:
            generator = AlertGenerator()
            pending = generator.pending_stock_conditions()
            for product, alert_type, priority in pending:
                self.stdout.write(f'  [{priority}] {alert_type}: {product.name} (stock {product.current_stock})')
            self.stdout.write(f'{len(pending)} stock alert(s) would be created')

            if include_overdue:
                overdue = generator.overdue_orders(timezone.localdate()).count()
                self.stdout.write(f'{overdue} overdue purchase order(s) found')
            return

        created = restock.generate_alerts(include_overdue=include_overdue)
        self.stdout.write(
            self.style.SUCCESS(f'{len(created)} alert(s) created')
        )
