"""
Purchase order issuance and sending.

Usage:
    from restockman.services.orders import PurchaseOrderIssuer

    issuer = PurchaseOrderIssuer()
    issued = issuer.issue(product_id, quantity=40, alert_id=alert.pk)
    issuer.send(issued.po_id, method='email', recipient='orders@supplier.test')
    issuer.receive(issued.po_id)

issue() inserts the order and resolves the alert in one transaction:
either both are written or neither is. send() records the send on the
order and hands the message to the notification sink only after commit;
a sink failure is logged and never undoes the send. receive() marks
delivery, which ends the overdue condition and resolves its open alerts.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from functools import partial

from django.db import DEFAULT_DB_ALIAS, IntegrityError, transaction
from django.utils import timezone

from restockman.conf import restockman_settings
from restockman.exceptions import ConflictError, NotFoundError, ValidationError
from restockman.models.alert import Alert
from restockman.models.enums import AlertType, OrderStatus, SendMethod
from restockman.models.order import PurchaseOrder
from restockman.models.product import Product
from restockman.protocols.notification import Notification, NotificationSink
from restockman.services.alerts import AlertStore
from restockman.services.retry import storage_retry

logger = logging.getLogger('restockman')


@dataclass(frozen=True)
class IssuedOrder:
    """Result of PurchaseOrderIssuer.issue()."""

    po_id: int
    po_number: str
    total_amount: Decimal
    alert_id: int | None = None

    def as_dict(self) -> dict:
        return {
            'poId': self.po_id,
            'poNumber': self.po_number,
            'totalAmount': str(self.total_amount),
            'alertId': self.alert_id,
        }


@dataclass(frozen=True)
class SendReceipt:
    """Result of PurchaseOrderIssuer.send()."""

    po_id: int
    po_number: str
    method: str
    recipient: str
    sent_at: datetime

    def as_dict(self) -> dict:
        return {
            'poId': self.po_id,
            'poNumber': self.po_number,
            'method': str(self.method),
            'recipient': self.recipient,
            'sentAt': self.sent_at.isoformat(),
        }


@dataclass(frozen=True)
class ReceivedOrder:
    """Result of PurchaseOrderIssuer.receive()."""

    po_id: int
    po_number: str
    received_at: datetime
    resolved_alert_ids: tuple[int, ...] = ()

    def as_dict(self) -> dict:
        return {
            'poId': self.po_id,
            'poNumber': self.po_number,
            'receivedAt': self.received_at.isoformat(),
            'resolvedAlertIds': list(self.resolved_alert_ids),
        }


def generate_po_number(today: date | None = None) -> str:
    """PO-YYYYMMDD-XXXXXX with a random hex suffix."""
    today = today or timezone.localdate()
    prefix = restockman_settings.PO_NUMBER_PREFIX
    return f"{prefix}-{today:%Y%m%d}-{secrets.token_hex(3).upper()}"


# quantity_ordered is a PositiveIntegerField
MAX_QUANTITY = 2_147_483_647


def _check_quantity(quantity) -> int:
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise ValidationError('INVALID_QUANTITY', quantity=quantity)
    if quantity > MAX_QUANTITY:
        raise ValidationError('INVALID_QUANTITY', quantity=quantity, max_quantity=MAX_QUANTITY)
    return quantity


def _check_total(total: Decimal) -> Decimal:
    """Reject totals that do not fit PurchaseOrder.total_amount."""
    field = PurchaseOrder._meta.get_field('total_amount')
    limit = Decimal(10) ** (field.max_digits - field.decimal_places)
    if total >= limit:
        raise ValidationError('AMOUNT_TOO_LARGE', total_amount=str(total), limit=str(limit))
    return total


class PurchaseOrderIssuer:
    """Turns a replenishment decision into a purchase order."""

    def __init__(self, store: AlertStore | None = None,
                 notifier: NotificationSink | None = None,
                 using: str = DEFAULT_DB_ALIAS,
                 number_factory=generate_po_number):
        self.using = using
        self.store = store or AlertStore(using=using)
        self._notifier = notifier
        self.number_factory = number_factory

    @property
    def notifier(self) -> NotificationSink:
        if self._notifier is None:
            from restockman.adapters import get_notifier
            self._notifier = get_notifier()
        return self._notifier

    # ══════════════════════════════════════════════════════════════
    # ISSUE
    # ══════════════════════════════════════════════════════════════

    def _insert(self, **fields) -> PurchaseOrder:
        """Insert with a fresh po_number, retrying on number collisions."""
        attempts = max(1, restockman_settings.PO_NUMBER_MAX_ATTEMPTS)
        orders = PurchaseOrder.objects.using(self.using)
        for _attempt in range(attempts):
            po_number = self.number_factory()
            try:
                with transaction.atomic(using=self.using):
                    return orders.create(po_number=po_number, **fields)
            except IntegrityError:
                if not orders.filter(po_number=po_number).exists():
                    raise
                logger.warning("purchase_order.number_collision", extra={"po_number": po_number})
        raise ConflictError('PO_NUMBER_EXHAUSTED', attempts=attempts)

    @storage_retry
    def issue(self, product_id, quantity, notes: str | None = None,
              alert_id=None, expected_delivery_date: date | None = None) -> IssuedOrder:
        """
        Create a purchase order for a product, optionally resolving an alert.

        Args:
            product_id: Product to reorder
            quantity: Units to order (integer > 0)
            notes: Free text stored on the order
            alert_id: Alert resolved by this order, if any
            expected_delivery_date: Drives overdue replenishment alerts

        Returns:
            IssuedOrder

        Raises:
            ValidationError('INVALID_QUANTITY' | 'AMOUNT_TOO_LARGE' |
                            'NO_SUPPLIER' | 'ORDER_MISMATCH')
            NotFoundError('PRODUCT_NOT_FOUND' | 'ALERT_NOT_FOUND')
            ConflictError('ALERT_TERMINAL' | 'PO_NUMBER_EXHAUSTED')
        """
        quantity = _check_quantity(quantity)

        product = (
            Product.objects.using(self.using)
            .select_related('supplier')
            .filter(pk=product_id)
            .first()
        )
        if product is None:
            raise NotFoundError('PRODUCT_NOT_FOUND', product_id=product_id)
        if product.supplier_id is None:
            raise ValidationError('NO_SUPPLIER', product_id=product.pk)
        if alert_id is not None:
            self.store.get(alert_id)

        unit_price = product.unit_price
        total = _check_total(Decimal(quantity) * unit_price)

        with transaction.atomic(using=self.using):
            order = self._insert(
                product=product,
                supplier_id=product.supplier_id,
                quantity_ordered=quantity,
                unit_price_at_issuance=unit_price,
                total_amount=total,
                notes=notes or '',
                expected_delivery_date=expected_delivery_date,
            )
            if alert_id is not None:
                self.store.resolve(alert_id, order)

        logger.info(
            "purchase_order.issued",
            extra={
                "po_id": order.pk,
                "po_number": order.po_number,
                "product_id": product.pk,
                "quantity": quantity,
                "total_amount": str(total),
                "alert_id": alert_id,
            },
        )
        return IssuedOrder(
            po_id=order.pk,
            po_number=order.po_number,
            total_amount=order.total_amount,
            alert_id=alert_id,
        )

    def _lock(self, po_id) -> PurchaseOrder:
        order = (
            PurchaseOrder.objects.using(self.using)
            .select_for_update()
            .filter(pk=po_id)
            .first()
        )
        if order is None:
            raise NotFoundError('ORDER_NOT_FOUND', po_id=po_id)
        return order

    # ══════════════════════════════════════════════════════════════
    # SEND
    # ══════════════════════════════════════════════════════════════

    @staticmethod
    def build_notification(order: PurchaseOrder, method: str, recipient: str) -> Notification:
        product = order.product
        body = "\n".join([
            f"Purchase order {order.po_number}",
            f"Product: {product.name} ({product.sku})",
            f"Quantity: {order.quantity_ordered} {product.unit}",
            f"Unit price: {order.unit_price_at_issuance}",
            f"Total: {order.total_amount}",
        ])
        if order.expected_delivery_date:
            body += f"\nExpected delivery: {order.expected_delivery_date.isoformat()}"
        if order.notes:
            body += f"\nNotes: {order.notes}"
        return Notification(
            channel=str(method),
            recipient=recipient,
            subject=f"Purchase Order {order.po_number}",
            body=body,
            reference=order.po_number,
            metadata={"po_id": order.pk, "supplier_id": order.supplier_id},
        )

    def _dispatch(self, notification: Notification) -> None:
        try:
            self.notifier.send(notification)
        except Exception:
            logger.exception(
                "notification.failed",
                extra={"channel": notification.channel, "reference": notification.reference},
            )

    @storage_retry
    def send(self, po_id, method: str, recipient: str) -> SendReceipt:
        """
        Record that an order was sent and notify the recipient.

        Sending again overwrites the previous send annotation. A received
        order keeps its status.

        Raises:
            ValidationError('INVALID_METHOD' | 'RECIPIENT_REQUIRED')
            NotFoundError('ORDER_NOT_FOUND')
        """
        if method not in SendMethod.values:
            raise ValidationError('INVALID_METHOD', method=method, allowed=list(SendMethod.values))
        if not isinstance(recipient, str) or not recipient.strip():
            raise ValidationError('RECIPIENT_REQUIRED', po_id=po_id)
        recipient = recipient.strip()

        with transaction.atomic(using=self.using):
            order = self._lock(po_id)
            order.sent_method = method
            order.sent_to = recipient
            order.sent_at = timezone.now()
            if order.status == OrderStatus.CREATED:
                order.status = OrderStatus.SENT
            order.save(update_fields=['sent_method', 'sent_to', 'sent_at', 'status'])

            notification = self.build_notification(order, method, recipient)
            transaction.on_commit(
                partial(self._dispatch, notification),
                using=self.using,
                robust=True,
            )

        logger.info(
            "purchase_order.sent",
            extra={"po_id": order.pk, "po_number": order.po_number, "method": method},
        )
        return SendReceipt(
            po_id=order.pk,
            po_number=order.po_number,
            method=method,
            recipient=recipient,
            sent_at=order.sent_at,
        )

    # ══════════════════════════════════════════════════════════════
    # RECEIVE
    # ══════════════════════════════════════════════════════════════

    @storage_retry
    def receive(self, po_id) -> ReceivedOrder:
        """
        Mark an order as delivered.

        Open overdue alerts raised for this order are resolved by it in the
        same transaction. Receiving twice returns the first receipt.

        Raises:
            NotFoundError('ORDER_NOT_FOUND')
        """
        with transaction.atomic(using=self.using):
            order = self._lock(po_id)
            if order.status == OrderStatus.RECEIVED:
                return ReceivedOrder(
                    po_id=order.pk,
                    po_number=order.po_number,
                    received_at=order.received_at,
                )

            order.status = OrderStatus.RECEIVED
            order.received_at = timezone.now()
            order.save(update_fields=['status', 'received_at'])

            alert_ids = list(
                Alert.objects.using(self.using)
                .open()
                .for_subject(order.pk, AlertType.OVERDUE_REPLENISHMENT)
                .filter(product_id=order.product_id)
                .values_list('pk', flat=True)
            )
            for alert_id in alert_ids:
                self.store.resolve(alert_id, order)

        logger.info(
            "purchase_order.received",
            extra={"po_id": order.pk, "po_number": order.po_number, "resolved_alerts": alert_ids},
        )
        return ReceivedOrder(
            po_id=order.pk,
            po_number=order.po_number,
            received_at=order.received_at,
            resolved_alert_ids=tuple(alert_ids),
        )
