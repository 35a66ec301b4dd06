"""
Alert model — detected shortfall or overdue replenishment needing attention.

Usage:
    # Run the generator (periodic task, cron or on demand)
    from restockman import restock
    created = restock.generate_alerts()

    # Work the queue
    Alert.objects.open().ordered()
"""

from django.db import models
from django.db.models import Case, IntegerField, Q, Value, When
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from restockman.models.enums import (
    OPEN_ALERT_STATUSES,
    TERMINAL_ALERT_STATUSES,
    AlertAction,
    AlertPriority,
    AlertStatus,
    AlertType,
)
from restockman.priority import PRIORITY_RANK


class AlertQuerySet(models.QuerySet):
    """QuerySet with lifecycle filters and the canonical listing order."""

    def open(self):
        """Active or acknowledged: the condition is still being tracked."""
        return self.filter(status__in=OPEN_ALERT_STATUSES)

    def closed(self):
        """Ignored or resolved: the alert will not change again."""
        return self.filter(status__in=TERMINAL_ALERT_STATUSES)

    def for_subject(self, related_id, alert_type):
        return self.filter(related_id=related_id, alert_type=alert_type)

    def with_priority_rank(self):
        return self.annotate(
            priority_rank=Case(
                *[When(priority=value, then=Value(rank)) for value, rank in PRIORITY_RANK.items()],
                default=Value(0),
                output_field=IntegerField(),
            )
        )

    def ordered(self):
        """
        Priority rank desc, then newest first.

        id breaks ties between alerts created in the same instant so
        pages never reshuffle between calls on unchanged data.
        """
        return self.with_priority_rank().order_by('-priority_rank', '-created_at', '-id')


class Alert(models.Model):
    """
    Alert with a small state machine.

    LIFECYCLE:

        ┌────────┐  acknowledge()  ┌──────────────┐
        │ ACTIVE │ ──────────────► │ ACKNOWLEDGED │
        └────────┘                 └──────────────┘
             │                            │
             │ ignore()                   │ ignore()
             ├────────────────────────────┼──────────► IGNORED  (terminal)
             │ resolve(purchase_order)    │ resolve(purchase_order)
             └────────────────────────────┴──────────► RESOLVED (terminal)

    SUBJECT:
        related_id is the product id for low_stock/out_of_stock alerts and
        the purchase order id for overdue_replenishment alerts. At most one
        open alert exists per (related_id, alert_type); the database
        enforces it with a partial unique constraint.

    Priority is decided once, at creation, and never recomputed.
    """

    alert_type = models.CharField(
        max_length=30,
        choices=AlertType.choices,
        verbose_name=_('Type'),
    )
    priority = models.CharField(
        max_length=10,
        choices=AlertPriority.choices,
        verbose_name=_('Priority'),
    )
    related_id = models.PositiveBigIntegerField(
        verbose_name=_('Subject id'),
        help_text=_('Product id for stock alerts, purchase order id for overdue alerts'),
    )
    product = models.ForeignKey(
        'restockman.Product',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='alerts',
        verbose_name=_('Product'),
    )

    title = models.CharField(max_length=255, verbose_name=_('Title'))
    message = models.TextField(blank=True, default='', verbose_name=_('Message'))

    status = models.CharField(
        max_length=20,
        choices=AlertStatus.choices,
        default=AlertStatus.ACTIVE,
        db_index=True,
        verbose_name=_('Status'),
    )
    ignore_reason = models.TextField(null=True, blank=True, verbose_name=_('Ignore reason'))
    resolving_purchase_order = models.ForeignKey(
        'restockman.PurchaseOrder',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='resolved_alerts',
        verbose_name=_('Resolving purchase order'),
    )

    # Stock levels seen when the alert was raised
    current_stock = models.IntegerField(null=True, blank=True, verbose_name=_('Stock at creation'))
    low_stock_threshold = models.IntegerField(null=True, blank=True, verbose_name=_('Threshold at creation'))

    acknowledged_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Acknowledged at'))
    ignored_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Ignored at'))
    resolved_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Resolved at'))
    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Created at'))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_('Updated at'))

    objects = AlertQuerySet.as_manager()

    class Meta:
        verbose_name = _('Stock alert')
        verbose_name_plural = _('Stock alerts')
        constraints = [
            models.UniqueConstraint(
                fields=['related_id', 'alert_type'],
                condition=Q(status__in=['active', 'acknowledged']),
                name='unique_open_alert_per_subject',
            ),
            models.CheckConstraint(
                condition=~Q(status='resolved') | Q(resolving_purchase_order__isnull=False),
                name='resolved_alert_has_purchase_order',
            ),
        ]
        indexes = [
            models.Index(fields=['status', 'priority', 'created_at'], name='restockman_alert_queue_idx'),
            models.Index(fields=['alert_type', 'related_id'], name='restockman_alert_subject_idx'),
        ]

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_ALERT_STATUSES

    def __str__(self) -> str:
        return f"[{self.priority}] {self.title} ({self.status})"


class AlertEvent(models.Model):
    """Append-only audit trail of alert transitions."""

    alert = models.ForeignKey(
        Alert,
        on_delete=models.CASCADE,
        related_name='events',
        verbose_name=_('Alert'),
    )
    action = models.CharField(max_length=20, choices=AlertAction.choices, verbose_name=_('Action'))
    from_status = models.CharField(max_length=20, blank=True, default='', verbose_name=_('From'))
    to_status = models.CharField(max_length=20, verbose_name=_('To'))
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))
    created_at = models.DateTimeField(default=timezone.now, verbose_name=_('Created at'))

    class Meta:
        verbose_name = _('Alert event')
        verbose_name_plural = _('Alert events')
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f"{self.action}: {self.from_status or '-'} → {self.to_status}"
