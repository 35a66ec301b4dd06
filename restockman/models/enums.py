"""
Enums for Restockman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class AlertType(models.TextChoices):
    """Condition an alert reports."""
    LOW_STOCK = 'low_stock', _('Low stock')
    OUT_OF_STOCK = 'out_of_stock', _('Out of stock')
    OVERDUE_REPLENISHMENT = 'overdue_replenishment', _('Overdue replenishment')


class AlertPriority(models.TextChoices):
    """How urgent the condition is. Fixed at creation."""
    LOW = 'low', _('Low')
    MEDIUM = 'medium', _('Medium')
    HIGH = 'high', _('High')
    CRITICAL = 'critical', _('Critical')


class AlertStatus(models.TextChoices):
    """
    Alert lifecycle status.

        active ──► acknowledged
          │             │
          ├─────────────┼──► ignored   (terminal)
          │             │
          └─────────────┴──► resolved  (terminal, needs a purchase order)
    """
    ACTIVE = 'active', _('Active')
    ACKNOWLEDGED = 'acknowledged', _('Acknowledged')
    IGNORED = 'ignored', _('Ignored')
    RESOLVED = 'resolved', _('Resolved')


# Statuses that still count as "the condition is being tracked"
OPEN_ALERT_STATUSES = (AlertStatus.ACTIVE, AlertStatus.ACKNOWLEDGED)
TERMINAL_ALERT_STATUSES = (AlertStatus.IGNORED, AlertStatus.RESOLVED)


class AlertAction(models.TextChoices):
    """Entry kinds in the alert audit trail."""
    CREATED = 'created', _('Created')
    ACKNOWLEDGED = 'acknowledged', _('Acknowledged')
    IGNORED = 'ignored', _('Ignored')
    RESOLVED = 'resolved', _('Resolved')


class Urgency(models.TextChoices):
    """Forecasted time-to-stockout tier."""
    HIGH = 'high', _('High')        # <= 7 days
    MEDIUM = 'medium', _('Medium')  # <= 14 days
    NORMAL = 'normal', _('Normal')  # later, or no forecast


class MovementDirection(models.TextChoices):
    """Direction of a stock movement."""
    IN = 'in', _('Inbound')
    OUT = 'out', _('Outbound')


class OrderStatus(models.TextChoices):
    """Purchase order status."""
    CREATED = 'created', _('Created')
    SENT = 'sent', _('Sent')
    RECEIVED = 'received', _('Received')


class SendMethod(models.TextChoices):
    """Channel a purchase order was sent through."""
    EMAIL = 'email', _('E-mail')
    SMS = 'sms', _('SMS')
    WHATSAPP = 'whatsapp', _('WhatsApp')
    PRINT = 'print', _('Print')
