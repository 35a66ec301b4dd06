"""
Tests for PurchaseOrderIssuer.
"""

import logging
import re
from datetime import timedelta
from decimal import Decimal

import pytest

from restockman.exceptions import ConflictError, NotFoundError, ValidationError
from restockman.models import Alert, AlertStatus, OrderStatus, PurchaseOrder
from restockman.services.generator import AlertGenerator
from restockman.services.orders import PurchaseOrderIssuer


pytestmark = pytest.mark.django_db


@pytest.fixture
def issuer(recording_notifier):
    return PurchaseOrderIssuer(notifier=recording_notifier)


@pytest.fixture
def alert(product):
    return AlertGenerator().generate(include_overdue=False)[0]


class TestIssue:
    """Tests for issue()."""

    def test_issue_snapshots_price(self, issuer, product):
        issued = issuer.issue(product.pk, 40, notes='weekly top-up')

        order = PurchaseOrder.objects.get(pk=issued.po_id)
        assert re.fullmatch(r'PO-\d{8}-[0-9A-F]{6}', issued.po_number)
        assert issued.total_amount == Decimal('100.00')
        assert order.unit_price_at_issuance == Decimal('2.50')
        assert order.supplier_id == product.supplier_id
        assert order.status == OrderStatus.CREATED
        assert order.notes == 'weekly top-up'
        assert issued.alert_id is None

    def test_later_price_change_keeps_total(self, issuer, product):
        issued = issuer.issue(product.pk, 10)
        product.unit_price = Decimal('9.99')
        product.save()

        order = PurchaseOrder.objects.get(pk=issued.po_id)
        assert order.total_amount == Decimal('25.00')
        assert order.computed_total == Decimal('25.00')

    def test_issue_resolves_alert(self, issuer, product, alert):
        issued = issuer.issue(product.pk, 40, alert_id=alert.pk)

        alert.refresh_from_db()
        assert alert.status == AlertStatus.RESOLVED
        assert alert.resolving_purchase_order_id == issued.po_id
        assert alert.resolved_at is not None
        assert issued.alert_id == alert.pk

    def test_expected_delivery_date(self, issuer, product, today):
        issued = issuer.issue(product.pk, 5, expected_delivery_date=today + timedelta(days=7))

        assert PurchaseOrder.objects.get(pk=issued.po_id).expected_delivery_date == today + timedelta(days=7)

    @pytest.mark.parametrize('quantity', [0, -5, 2.5, '10', True, None])
    def test_invalid_quantity(self, issuer, product, quantity):
        with pytest.raises(ValidationError) as exc:
            issuer.issue(product.pk, quantity)

        assert exc.value.code == 'INVALID_QUANTITY'
        assert PurchaseOrder.objects.count() == 0

    def test_product_without_supplier(self, issuer, make_product):
        orphan = make_product(supplier=None)

        with pytest.raises(ValidationError) as exc:
            issuer.issue(orphan.pk, 10)

        assert exc.value.code == 'NO_SUPPLIER'
        assert PurchaseOrder.objects.count() == 0

    def test_unknown_product(self, issuer, db):
        with pytest.raises(NotFoundError) as exc:
            issuer.issue(555555, 10)

        assert exc.value.code == 'PRODUCT_NOT_FOUND'

    def test_unknown_alert(self, issuer, product):
        with pytest.raises(NotFoundError) as exc:
            issuer.issue(product.pk, 10, alert_id=555555)

        assert exc.value.code == 'ALERT_NOT_FOUND'
        assert PurchaseOrder.objects.count() == 0

    def test_closed_alert_rolls_back_order(self, issuer, product, alert, store):
        """The order and the resolution commit together or not at all."""
        store.ignore(alert.pk)

        with pytest.raises(ConflictError) as exc:
            issuer.issue(product.pk, 40, alert_id=alert.pk)

        assert exc.value.code == 'ALERT_TERMINAL'
        assert PurchaseOrder.objects.count() == 0
        alert.refresh_from_db()
        assert alert.status == AlertStatus.IGNORED

    def test_alert_for_other_product_rolls_back(self, issuer, make_product, alert):
        other = make_product(name='Other')

        with pytest.raises(ValidationError) as exc:
            issuer.issue(other.pk, 40, alert_id=alert.pk)

        assert exc.value.code == 'ORDER_MISMATCH'
        assert PurchaseOrder.objects.count() == 0
        assert Alert.objects.get(pk=alert.pk).status == AlertStatus.ACTIVE

    def test_quantity_above_field_range(self, issuer, product):
        with pytest.raises(ValidationError) as exc:
            issuer.issue(product.pk, 10 ** 13)

        assert exc.value.code == 'INVALID_QUANTITY'
        assert PurchaseOrder.objects.count() == 0

    def test_total_above_amount_precision(self, issuer, make_product):
        pricey = make_product(unit_price=Decimal('50000.00'))

        with pytest.raises(ValidationError) as exc:
            issuer.issue(pricey.pk, 2_000_000_000)

        assert exc.value.code == 'AMOUNT_TOO_LARGE'
        assert PurchaseOrder.objects.count() == 0

    def test_number_collision_retries(self, recording_notifier, product, make_order):
        make_order(product, po_number='PO-20260101-AAAAAA')
        numbers = iter(['PO-20260101-AAAAAA', 'PO-20260101-BBBBBB'])
        issuer = PurchaseOrderIssuer(notifier=recording_notifier, number_factory=lambda: next(numbers))

        issued = issuer.issue(product.pk, 10)

        assert issued.po_number == 'PO-20260101-BBBBBB'

    def test_number_collisions_exhausted(self, recording_notifier, product, make_order, settings):
        settings.RESTOCKMAN = {'PO_NUMBER_MAX_ATTEMPTS': 3, 'STORAGE_RETRY_BACKOFF': 0}
        make_order(product, po_number='PO-20260101-AAAAAA')
        issuer = PurchaseOrderIssuer(notifier=recording_notifier,
                                     number_factory=lambda: 'PO-20260101-AAAAAA')

        with pytest.raises(ConflictError) as exc:
            issuer.issue(product.pk, 10)

        assert exc.value.code == 'PO_NUMBER_EXHAUSTED'
        assert PurchaseOrder.objects.count() == 1


class TestSend:
    """Tests for send()."""

    def test_send_records_and_notifies(self, issuer, product, recording_notifier,
                                       django_capture_on_commit_callbacks):
        issued = issuer.issue(product.pk, 40)

        with django_capture_on_commit_callbacks(execute=True):
            receipt = issuer.send(issued.po_id, 'email', 'orders@acme.test')

        order = PurchaseOrder.objects.get(pk=issued.po_id)
        assert order.status == OrderStatus.SENT
        assert order.sent_method == 'email'
        assert order.sent_to == 'orders@acme.test'
        assert order.sent_at == receipt.sent_at
        assert receipt.po_number == issued.po_number

        [notification] = recording_notifier.sent
        assert notification.channel == 'email'
        assert notification.recipient == 'orders@acme.test'
        assert notification.reference == issued.po_number
        assert 'Quantity: 40 pcs' in notification.body

    def test_notification_waits_for_commit(self, issuer, product, recording_notifier,
                                           django_capture_on_commit_callbacks):
        issued = issuer.issue(product.pk, 40)

        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            issuer.send(issued.po_id, 'sms', '+1 555 0100')

        assert len(callbacks) == 1
        assert recording_notifier.sent == []

    def test_notifier_failure_does_not_fail_send(self, product, failing_notifier, caplog,
                                                 django_capture_on_commit_callbacks):
        issuer = PurchaseOrderIssuer(notifier=failing_notifier)
        issued = issuer.issue(product.pk, 40)

        with caplog.at_level(logging.ERROR, logger='restockman'):
            with django_capture_on_commit_callbacks(execute=True):
                receipt = issuer.send(issued.po_id, 'whatsapp', '+1 555 0100')

        assert receipt.method == 'whatsapp'
        assert PurchaseOrder.objects.get(pk=issued.po_id).status == OrderStatus.SENT
        assert any(r.getMessage() == 'notification.failed' for r in caplog.records)

    def test_invalid_method(self, issuer, product):
        issued = issuer.issue(product.pk, 40)

        with pytest.raises(ValidationError) as exc:
            issuer.send(issued.po_id, 'fax', 'x')

        assert exc.value.code == 'INVALID_METHOD'
        assert PurchaseOrder.objects.get(pk=issued.po_id).sent_at is None

    @pytest.mark.parametrize('recipient', ['', '   ', None])
    def test_recipient_required(self, issuer, product, recipient):
        issued = issuer.issue(product.pk, 40)

        with pytest.raises(ValidationError) as exc:
            issuer.send(issued.po_id, 'email', recipient)

        assert exc.value.code == 'RECIPIENT_REQUIRED'

    def test_unknown_order(self, issuer, db):
        with pytest.raises(NotFoundError) as exc:
            issuer.send(424242, 'print', 'warehouse')

        assert exc.value.code == 'ORDER_NOT_FOUND'

    def test_send_keeps_received_status(self, issuer, product):
        issued = issuer.issue(product.pk, 40)
        issuer.receive(issued.po_id)

        issuer.send(issued.po_id, 'print', 'warehouse')

        assert PurchaseOrder.objects.get(pk=issued.po_id).status == OrderStatus.RECEIVED


class TestReceive:
    """Tests for receive()."""

    def test_receive_marks_delivery(self, issuer, product):
        issued = issuer.issue(product.pk, 40)

        received = issuer.receive(issued.po_id)

        order = PurchaseOrder.objects.get(pk=issued.po_id)
        assert order.status == OrderStatus.RECEIVED
        assert order.received_at == received.received_at
        assert received.resolved_alert_ids == ()

    def test_receive_resolves_open_overdue_alert(self, issuer, product, make_order, today):
        order = make_order(product, expected_delivery_date=today - timedelta(days=5))
        [alert] = AlertGenerator().scan_overdue(today=today)

        received = issuer.receive(order.pk)

        alert.refresh_from_db()
        assert received.resolved_alert_ids == (alert.pk,)
        assert alert.status == AlertStatus.RESOLVED
        assert alert.resolving_purchase_order_id == order.pk
        assert order.days_overdue(today) == 5
        order.refresh_from_db()
        assert order.days_overdue(today) == 0
        assert AlertGenerator().scan_overdue(today=today) == []

    def test_receive_twice_returns_first_receipt(self, issuer, product):
        issued = issuer.issue(product.pk, 40)
        first = issuer.receive(issued.po_id)

        second = issuer.receive(issued.po_id)

        assert second.received_at == first.received_at

    def test_unknown_order(self, issuer, db):
        with pytest.raises(NotFoundError) as exc:
            issuer.receive(424242)

        assert exc.value.code == 'ORDER_NOT_FOUND'
