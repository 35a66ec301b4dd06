"""
Tests for AlertStore: lifecycle, listing, creation and stats.
"""

from datetime import timedelta

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from restockman.exceptions import ConflictError, NotFoundError, ValidationError
from restockman.models import (
    Alert,
    AlertAction,
    AlertEvent,
    AlertPriority,
    AlertStatus,
    AlertType,
    PurchaseOrder,
)


pytestmark = pytest.mark.django_db


def new_alert(store, related_id=1, priority=AlertPriority.MEDIUM,
              alert_type=AlertType.LOW_STOCK, **kwargs):
    return store.create(
        alert_type=alert_type,
        priority=priority,
        related_id=related_id,
        title=f'Alert {related_id}',
        **kwargs
    )


class TestCreate:
    """Tests for AlertStore.create()."""

    def test_create_records_event(self, store):
        alert = new_alert(store)

        assert alert.status == AlertStatus.ACTIVE
        events = list(alert.events.all())
        assert len(events) == 1
        assert events[0].action == AlertAction.CREATED
        assert events[0].to_status == AlertStatus.ACTIVE

    def test_duplicate_open_alert_conflicts(self, store):
        new_alert(store, related_id=7)

        with pytest.raises(ConflictError) as exc:
            new_alert(store, related_id=7)

        assert exc.value.code == 'DUPLICATE_ACTIVE_ALERT'
        assert Alert.objects.count() == 1

    def test_same_subject_other_type_is_allowed(self, store):
        new_alert(store, related_id=7, alert_type=AlertType.LOW_STOCK)
        new_alert(store, related_id=7, alert_type=AlertType.OUT_OF_STOCK,
                  priority=AlertPriority.CRITICAL)

        assert Alert.objects.count() == 2

    def test_create_if_absent_returns_none_on_duplicate(self, store):
        first = store.create_if_absent(
            alert_type=AlertType.LOW_STOCK, priority=AlertPriority.HIGH,
            related_id=3, title='Low',
        )
        second = store.create_if_absent(
            alert_type=AlertType.LOW_STOCK, priority=AlertPriority.HIGH,
            related_id=3, title='Low',
        )

        assert first is not None
        assert second is None

    def test_database_rejects_second_open_alert(self):
        """The uniqueness holds even when the service is bypassed."""
        Alert.objects.create(alert_type=AlertType.LOW_STOCK, priority=AlertPriority.LOW,
                             related_id=5, title='A')

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Alert.objects.create(alert_type=AlertType.LOW_STOCK, priority=AlertPriority.LOW,
                                     related_id=5, title='B', status=AlertStatus.ACKNOWLEDGED)

    def test_database_rejects_resolved_without_order(self):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Alert.objects.create(alert_type=AlertType.LOW_STOCK, priority=AlertPriority.LOW,
                                     related_id=5, title='A', status=AlertStatus.RESOLVED)

    @pytest.mark.parametrize('field,value,code', [
        ('alert_type', 'flood', 'INVALID_TYPE'),
        ('priority', 'urgent', 'INVALID_PRIORITY'),
    ])
    def test_invalid_choices(self, store, field, value, code):
        fields = {
            'alert_type': AlertType.LOW_STOCK,
            'priority': AlertPriority.LOW,
            'related_id': 1,
            'title': 'x',
            field: value,
        }
        with pytest.raises(ValidationError) as exc:
            store.create(**fields)

        assert exc.value.code == code

    def test_unknown_product(self, store):
        with pytest.raises(NotFoundError) as exc:
            new_alert(store, product_id=424242)

        assert exc.value.code == 'PRODUCT_NOT_FOUND'


class TestTransitions:
    """Tests for acknowledge/ignore/resolve/delete."""

    def test_acknowledge(self, store):
        alert = new_alert(store)

        acked = store.acknowledge(alert.pk, notes='on it')

        assert acked.status == AlertStatus.ACKNOWLEDGED
        assert acked.acknowledged_at is not None
        latest = store.history(alert.pk)[0]
        assert latest.action == AlertAction.ACKNOWLEDGED
        assert latest.from_status == AlertStatus.ACTIVE
        assert latest.notes == 'on it'

    def test_acknowledge_is_idempotent(self, store):
        alert = new_alert(store)
        first = store.acknowledge(alert.pk)

        second = store.acknowledge(alert.pk)

        assert second.status == AlertStatus.ACKNOWLEDGED
        assert second.acknowledged_at == first.acknowledged_at
        assert AlertEvent.objects.filter(alert=alert, action=AlertAction.ACKNOWLEDGED).count() == 1

    def test_ignore_with_reason(self, store):
        alert = new_alert(store)

        ignored = store.ignore(alert.pk, reason='discontinued')

        assert ignored.status == AlertStatus.IGNORED
        assert ignored.ignore_reason == 'discontinued'
        assert ignored.ignored_at is not None
        assert PurchaseOrder.objects.count() == 0

    def test_ignore_acknowledged(self, store):
        alert = new_alert(store)
        store.acknowledge(alert.pk)

        assert store.ignore(alert.pk).status == AlertStatus.IGNORED

    @pytest.mark.parametrize('method', ['acknowledge', 'ignore'])
    def test_terminal_alert_rejects_transitions(self, store, method):
        alert = new_alert(store)
        store.ignore(alert.pk)

        with pytest.raises(ConflictError) as exc:
            getattr(store, method)(alert.pk)

        assert exc.value.code == 'ALERT_TERMINAL'
        alert.refresh_from_db()
        assert alert.status == AlertStatus.IGNORED

    def test_unknown_alert(self, store):
        with pytest.raises(NotFoundError) as exc:
            store.acknowledge(123456)

        assert exc.value.code == 'ALERT_NOT_FOUND'

    def test_resolve_requires_order(self, store):
        alert = new_alert(store)

        with pytest.raises(ValidationError) as exc:
            store.resolve(alert.pk, None)

        assert exc.value.code == 'ORDER_REQUIRED'

    def test_resolve_with_order(self, store, product, make_order):
        alert = new_alert(store, related_id=product.pk, product_id=product.pk)
        order = make_order(product)

        resolved = store.resolve(alert.pk, order)

        assert resolved.status == AlertStatus.RESOLVED
        assert resolved.resolving_purchase_order == order
        assert store.history(alert.pk)[0].notes == f'Resolved by purchase order {order.po_number}'

    def test_resolve_rejects_other_product(self, store, make_product, make_order):
        first = make_product()
        second = make_product()
        alert = new_alert(store, related_id=first.pk, product_id=first.pk)

        with pytest.raises(ValidationError) as exc:
            store.resolve(alert.pk, make_order(second))

        assert exc.value.code == 'ORDER_MISMATCH'

    def test_delete_removes_history(self, store):
        alert = new_alert(store)
        store.acknowledge(alert.pk)

        store.delete(alert.pk)

        assert not Alert.objects.filter(pk=alert.pk).exists()
        assert not AlertEvent.objects.filter(alert_id=alert.pk).exists()
        with pytest.raises(NotFoundError):
            store.get(alert.pk)


class TestList:
    """Tests for AlertStore.list()."""

    def test_orders_by_priority_then_newest(self, store):
        low = new_alert(store, related_id=1, priority=AlertPriority.LOW)
        critical = new_alert(store, related_id=2, priority=AlertPriority.CRITICAL)
        high = new_alert(store, related_id=3, priority=AlertPriority.HIGH)
        medium_old = new_alert(store, related_id=4, priority=AlertPriority.MEDIUM)
        medium_new = new_alert(store, related_id=5, priority=AlertPriority.MEDIUM)
        Alert.objects.filter(pk=medium_old.pk).update(created_at=timezone.now() - timedelta(hours=1))

        page = store.list()

        assert [a.pk for a in page.items] == [critical.pk, high.pk, medium_new.pk, medium_old.pk, low.pk]

    def test_same_instant_ties_break_by_id(self, store):
        now = timezone.now()
        alerts = [
            Alert.objects.create(alert_type=AlertType.LOW_STOCK, priority=AlertPriority.HIGH,
                                 related_id=i, title=f'A{i}', created_at=now)
            for i in range(3)
        ]

        page = store.list()

        assert [a.pk for a in page.items] == [a.pk for a in reversed(alerts)]

    def test_filters(self, store):
        new_alert(store, related_id=1, priority=AlertPriority.HIGH)
        second = new_alert(store, related_id=2, priority=AlertPriority.LOW)
        store.ignore(second.pk)

        assert store.list(status='ignored').total == 1
        assert store.list(status='active', priority='high').total == 1
        assert store.list(alert_type='out_of_stock').total == 0

    def test_pagination(self, store):
        for i in range(15):
            new_alert(store, related_id=i)

        first = store.list(page=1, limit=10)
        second = store.list(page=2, limit=10)

        assert len(first.items) == 10
        assert len(second.items) == 5
        assert second.pagination() == {'total': 15, 'page': 2, 'limit': 10, 'pages': 2}
        assert not {a.pk for a in first.items} & {a.pk for a in second.items}

    def test_page_past_the_end_is_empty(self, store):
        new_alert(store)

        page = store.list(page=10 ** 20)

        assert page.items == []
        assert page.total == 1

    def test_limit_is_capped(self, store):
        assert store.list(limit=5000).limit == 100

    @pytest.mark.parametrize('kwargs,code', [
        ({'status': 'closed'}, 'INVALID_STATUS'),
        ({'alert_type': 'flood'}, 'INVALID_TYPE'),
        ({'priority': 'urgent'}, 'INVALID_PRIORITY'),
        ({'page': 0}, 'INVALID_PAGE'),
        ({'limit': 'many'}, 'INVALID_PAGE'),
    ])
    def test_invalid_filters(self, store, kwargs, code):
        with pytest.raises(ValidationError) as exc:
            store.list(**kwargs)

        assert exc.value.code == code


class TestStats:

    def test_counts_window(self, store):
        new_alert(store, related_id=1, priority=AlertPriority.HIGH)
        acked = new_alert(store, related_id=2, priority=AlertPriority.CRITICAL,
                          alert_type=AlertType.OUT_OF_STOCK)
        store.acknowledge(acked.pk)
        old = new_alert(store, related_id=3)
        Alert.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=45))

        stats = store.stats(days=30)

        assert stats['total'] == 2
        assert stats['by_status']['active'] == 1
        assert stats['by_status']['acknowledged'] == 1
        assert stats['by_status']['resolved'] == 0
        assert stats['by_priority']['critical'] == 1
        assert stats['by_type']['out_of_stock'] == 1
        assert stats['by_type']['low_stock'] == 1
