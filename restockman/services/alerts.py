"""
Alert store — persisted alerts and their lifecycle transitions.

Usage:
    from restockman.services.alerts import AlertStore

    store = AlertStore()
    page = store.list(status='active', page=1, limit=20)
    store.acknowledge(alert_id)
    store.ignore(alert_id, reason='seasonal')

resolve() is not part of the caller-facing surface: PurchaseOrderIssuer
calls it inside the transaction that inserts the purchase order.

All transitions run under transaction.atomic() with the alert row locked.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from django.db import DEFAULT_DB_ALIAS, IntegrityError, transaction
from django.db.models import Count
from django.utils import timezone

from restockman.conf import restockman_settings
from restockman.exceptions import ConflictError, NotFoundError, ValidationError
from restockman.models.alert import Alert, AlertEvent
from restockman.models.enums import (
    AlertAction,
    AlertPriority,
    AlertStatus,
    AlertType,
)
from restockman.models.product import Product
from restockman.services.retry import storage_retry

logger = logging.getLogger('restockman')


@dataclass(frozen=True)
class Page:
    """One page of a listing."""

    items: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)

    def pagination(self) -> dict[str, int]:
        return {
            'total': self.total,
            'page': self.page,
            'limit': self.limit,
            'pages': self.pages,
        }


def _check_choice(value, choices, code):
    if value is not None and value not in choices.values:
        raise ValidationError(code, value=value, allowed=list(choices.values))


def _positive_int(value, name) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError('INVALID_PAGE', **{name: value}) from None
    if number < 1:
        raise ValidationError('INVALID_PAGE', **{name: value})
    return number


class AlertStore:
    """Alert persistence and the active/acknowledged/ignored/resolved machine."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def _alerts(self):
        return Alert.objects.using(self.using)

    def _record(self, alert, action, from_status, notes=''):
        AlertEvent.objects.using(self.using).create(
            alert=alert,
            action=action,
            from_status=from_status,
            to_status=alert.status,
            notes=notes or '',
        )

    # ══════════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════════

    def get(self, alert_id) -> Alert:
        """
        Fetch one alert.

        Raises:
            NotFoundError('ALERT_NOT_FOUND'): Unknown id
        """
        alert = self._alerts().select_related('product', 'resolving_purchase_order').filter(pk=alert_id).first()
        if alert is None:
            raise NotFoundError('ALERT_NOT_FOUND', alert_id=alert_id)
        return alert

    def history(self, alert_id) -> list[AlertEvent]:
        """Audit trail of an alert, newest first."""
        alert = self.get(alert_id)
        return list(alert.events.all())

    def list(self, status=None, alert_type=None, priority=None,
             page=1, limit=None) -> Page:
        """
        Filtered, paginated listing.

        Order is priority rank desc, created_at desc, id desc. Pages are
        not snapshot-consistent with each other, but for unchanged data
        the same call always returns the same items.

        Raises:
            ValidationError('INVALID_STATUS' | 'INVALID_TYPE' |
                            'INVALID_PRIORITY' | 'INVALID_PAGE')
        """
        _check_choice(status, AlertStatus, 'INVALID_STATUS')
        _check_choice(alert_type, AlertType, 'INVALID_TYPE')
        _check_choice(priority, AlertPriority, 'INVALID_PRIORITY')

        page = _positive_int(page, 'page')
        if limit is None:
            limit = restockman_settings.DEFAULT_PAGE_SIZE
        limit = min(_positive_int(limit, 'limit'), restockman_settings.MAX_PAGE_SIZE)

        qs = self._alerts().select_related('product')
        if status:
            qs = qs.filter(status=status)
        if alert_type:
            qs = qs.filter(alert_type=alert_type)
        if priority:
            qs = qs.filter(priority=priority)

        total = qs.count()
        offset = (page - 1) * limit
        # past the last row: skip the query
        items = list(qs.ordered()[offset:offset + limit]) if offset < total else []
        return Page(items=items, total=total, page=page, limit=limit)

    def stats(self, days: int = 30) -> dict[str, Any]:
        """
        Counts of alerts created in the trailing window.

        Returns:
            {'total': n, 'by_status': {...}, 'by_priority': {...},
             'by_type': {...}, 'window_days': days}
        """
        since = timezone.now() - timedelta(days=days)
        qs = self._alerts().filter(created_at__gte=since)

        def grouped(field_name, choices):
            counts = {value: 0 for value in choices.values}
            for row in qs.values(field_name).annotate(n=Count('id')).order_by():
                counts[row[field_name]] = row['n']
            return counts

        return {
            'window_days': days,
            'total': qs.count(),
            'by_status': grouped('status', AlertStatus),
            'by_priority': grouped('priority', AlertPriority),
            'by_type': grouped('alert_type', AlertType),
        }

    # ══════════════════════════════════════════════════════════════
    # CREATION
    # ══════════════════════════════════════════════════════════════

    def has_open(self, related_id, alert_type) -> bool:
        return self._alerts().open().for_subject(related_id, alert_type).exists()

    def create(self, *, alert_type, priority, related_id, title,
               message='', product_id=None, current_stock=None,
               low_stock_threshold=None, notes='Alert created') -> Alert:
        """
        Insert a new active alert.

        The open-alert uniqueness is decided by the database: the insert
        runs in its own savepoint and the partial unique constraint rejects
        a second open alert for the same (related_id, alert_type), even
        when two callers race.

        Raises:
            ValidationError('INVALID_TYPE' | 'INVALID_PRIORITY' | 'INVALID_PAYLOAD')
            NotFoundError('PRODUCT_NOT_FOUND'): product_id given but unknown
            ConflictError('DUPLICATE_ACTIVE_ALERT'): An open alert already exists
        """
        _check_choice(alert_type, AlertType, 'INVALID_TYPE')
        _check_choice(priority, AlertPriority, 'INVALID_PRIORITY')
        if alert_type is None:
            raise ValidationError('INVALID_TYPE', alert_type=alert_type)
        if priority is None:
            raise ValidationError('INVALID_PRIORITY', priority=priority)
        if not title:
            raise ValidationError('INVALID_PAYLOAD', message='title is required')
        if product_id is not None and not Product.objects.using(self.using).filter(pk=product_id).exists():
            raise NotFoundError('PRODUCT_NOT_FOUND', product_id=product_id)

        try:
            with transaction.atomic(using=self.using):
                alert = self._alerts().create(
                    alert_type=alert_type,
                    priority=priority,
                    related_id=related_id,
                    product_id=product_id,
                    title=title,
                    message=message,
                    current_stock=current_stock,
                    low_stock_threshold=low_stock_threshold,
                )
                self._record(alert, AlertAction.CREATED, '', notes)
        except IntegrityError as exc:
            if self.has_open(related_id, alert_type):
                raise ConflictError(
                    'DUPLICATE_ACTIVE_ALERT',
                    related_id=related_id,
                    alert_type=alert_type,
                ) from exc
            raise

        logger.info(
            "alert.created",
            extra={
                "alert_id": alert.pk,
                "alert_type": alert_type,
                "priority": priority,
                "related_id": related_id,
            },
        )
        return alert

    def create_if_absent(self, **fields) -> Alert | None:
        """
        create(), but a duplicate is not an error.

        Returns:
            The new alert, or None when an open one already exists
        """
        if self.has_open(fields['related_id'], fields['alert_type']):
            return None
        try:
            return self.create(**fields)
        except ConflictError:
            logger.info(
                "alert.duplicate_skipped",
                extra={"related_id": fields['related_id'], "alert_type": fields['alert_type']},
            )
            return None

    # ══════════════════════════════════════════════════════════════
    # TRANSITIONS
    # ══════════════════════════════════════════════════════════════

    def _lock(self, alert_id) -> Alert:
        alert = self._alerts().select_for_update().filter(pk=alert_id).first()
        if alert is None:
            raise NotFoundError('ALERT_NOT_FOUND', alert_id=alert_id)
        return alert

    def _ensure_open(self, alert, target):
        if not alert.is_open:
            raise ConflictError(
                'ALERT_TERMINAL',
                alert_id=alert.pk,
                status=alert.status,
                target=target,
            )

    @storage_retry
    def acknowledge(self, alert_id, notes='') -> Alert:
        """
        active → acknowledged. No-op when already acknowledged.

        Raises:
            NotFoundError('ALERT_NOT_FOUND')
            ConflictError('ALERT_TERMINAL'): Alert is ignored or resolved
        """
        with transaction.atomic(using=self.using):
            alert = self._lock(alert_id)
            if alert.status == AlertStatus.ACKNOWLEDGED:
                return alert
            self._ensure_open(alert, AlertStatus.ACKNOWLEDGED)

            from_status = alert.status
            alert.status = AlertStatus.ACKNOWLEDGED
            alert.acknowledged_at = timezone.now()
            alert.save(update_fields=['status', 'acknowledged_at', 'updated_at'])
            self._record(alert, AlertAction.ACKNOWLEDGED, from_status, notes)

        logger.info("alert.acknowledged", extra={"alert_id": alert.pk})
        return alert

    @storage_retry
    def ignore(self, alert_id, reason: str | None = None) -> Alert:
        """
        active|acknowledged → ignored, recording the reason.

        Raises:
            NotFoundError('ALERT_NOT_FOUND')
            ConflictError('ALERT_TERMINAL'): Alert is already ignored or resolved
        """
        with transaction.atomic(using=self.using):
            alert = self._lock(alert_id)
            self._ensure_open(alert, AlertStatus.IGNORED)

            from_status = alert.status
            alert.status = AlertStatus.IGNORED
            alert.ignore_reason = reason or None
            alert.ignored_at = timezone.now()
            alert.save(update_fields=['status', 'ignore_reason', 'ignored_at', 'updated_at'])
            self._record(alert, AlertAction.IGNORED, from_status, reason or '')

        logger.info("alert.ignored", extra={"alert_id": alert.pk, "reason": reason})
        return alert

    def resolve(self, alert_id, purchase_order) -> Alert:
        """
        active|acknowledged → resolved, pointing at the purchase order.

        Meant to run inside the caller's transaction (the one that inserted
        the order), so both writes commit or neither does.

        Raises:
            ValidationError('ORDER_REQUIRED'): No saved purchase order given
            ValidationError('ORDER_MISMATCH'): Order is for another product
            NotFoundError('ALERT_NOT_FOUND')
            ConflictError('ALERT_TERMINAL'): Alert is already ignored or resolved
        """
        if purchase_order is None or purchase_order.pk is None:
            raise ValidationError('ORDER_REQUIRED', alert_id=alert_id)

        with transaction.atomic(using=self.using):
            alert = self._lock(alert_id)
            self._ensure_open(alert, AlertStatus.RESOLVED)
            if alert.product_id is None or alert.product_id != purchase_order.product_id:
                raise ValidationError(
                    'ORDER_MISMATCH',
                    alert_id=alert.pk,
                    alert_product_id=alert.product_id,
                    order_product_id=purchase_order.product_id,
                )

            from_status = alert.status
            alert.status = AlertStatus.RESOLVED
            alert.resolving_purchase_order = purchase_order
            alert.resolved_at = timezone.now()
            alert.save(update_fields=[
                'status', 'resolving_purchase_order', 'resolved_at', 'updated_at',
            ])
            self._record(
                alert, AlertAction.RESOLVED, from_status,
                f"Resolved by purchase order {purchase_order.po_number}",
            )

        logger.info(
            "alert.resolved",
            extra={"alert_id": alert.pk, "purchase_order_id": purchase_order.pk},
        )
        return alert

    @storage_retry
    def delete(self, alert_id) -> None:
        """
        Administrative hard delete (audit trail goes with it).

        Raises:
            NotFoundError('ALERT_NOT_FOUND')
        """
        with transaction.atomic(using=self.using):
            alert = self._lock(alert_id)
            alert.delete()
        logger.warning("alert.deleted", extra={"alert_id": alert_id})
