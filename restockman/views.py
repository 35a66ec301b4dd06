"""
JSON API — thin views over the Restock facade.

Mount in the project urls.py:
    path('api/restock/', include('restockman.urls')),

Every response carries "success". Errors use the RestockError envelope:
    {"success": false, "error": {"code": ..., "message": ..., "data": {...}}}
with the HTTP status of the error class (400, 404, 409, 503).

JSON keys are camelCase here; everything behind the views is snake_case.
"""

import json
import logging
from datetime import date

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from restockman.exceptions import RestockError, ValidationError
from restockman.models.alert import Alert, AlertEvent
from restockman.service import Restock

logger = logging.getLogger('restockman')


# ══════════════════════════════════════════════════════════════
# SERIALIZATION
# ══════════════════════════════════════════════════════════════


def _iso(value):
    return value.isoformat() if value else None


def alert_as_dict(alert: Alert) -> dict:
    return {
        'id': alert.pk,
        'type': alert.alert_type,
        'priority': alert.priority,
        'status': alert.status,
        'relatedId': alert.related_id,
        'productId': alert.product_id,
        'title': alert.title,
        'message': alert.message,
        'currentStock': alert.current_stock,
        'lowStockThreshold': alert.low_stock_threshold,
        'ignoreReason': alert.ignore_reason,
        'resolvingPurchaseOrderId': alert.resolving_purchase_order_id,
        'acknowledgedAt': _iso(alert.acknowledged_at),
        'ignoredAt': _iso(alert.ignored_at),
        'resolvedAt': _iso(alert.resolved_at),
        'createdAt': _iso(alert.created_at),
        'updatedAt': _iso(alert.updated_at),
    }


def event_as_dict(event: AlertEvent) -> dict:
    return {
        'action': event.action,
        'fromStatus': event.from_status or None,
        'toStatus': event.to_status,
        'notes': event.notes,
        'createdAt': _iso(event.created_at),
    }


# ══════════════════════════════════════════════════════════════
# REQUEST PARSING
# ══════════════════════════════════════════════════════════════


def parse_body(request) -> dict:
    """Decode a JSON object body (empty body = {})."""
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError('INVALID_PAYLOAD', error=str(exc)) from None
    if not isinstance(payload, dict):
        raise ValidationError('INVALID_PAYLOAD', message='JSON object expected')
    return payload


def query_int(request, name, default=None):
    raw = request.GET.get(name)
    if raw in (None, ''):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError('INVALID_PAYLOAD', message=f'{name} must be an integer', **{name: raw}) from None


def body_date(payload, name):
    raw = payload.get(name)
    if raw in (None, ''):
        return None
    try:
        return date.fromisoformat(raw)
    except (TypeError, ValueError):
        raise ValidationError('INVALID_PAYLOAD', message=f'{name} must be an ISO date', **{name: raw}) from None


def body_int(payload, name, required=False):
    value = payload.get(name)
    if value is None:
        if required:
            raise ValidationError('INVALID_PAYLOAD', message=f'{name} is required')
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError('INVALID_PAYLOAD', message=f'{name} must be an integer', **{name: value})
    return value


# ══════════════════════════════════════════════════════════════
# VIEWS
# ══════════════════════════════════════════════════════════════


@method_decorator(csrf_exempt, name='dispatch')
class RestockView(View):
    """Base view: turns RestockError into the JSON error envelope."""

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except RestockError as exc:
            logger.info(
                "api.error",
                extra={"code": exc.code, "status": exc.http_status, "path": request.path},
            )
            return JsonResponse({'success': False, 'error': exc.as_dict()}, status=exc.http_status)


class AlertListView(RestockView):

    def get(self, request):
        page = Restock.list_alerts(
            status=request.GET.get('status') or None,
            alert_type=request.GET.get('type') or None,
            priority=request.GET.get('priority') or None,
            page=request.GET.get('page') or 1,
            limit=request.GET.get('limit') or None,
        )
        return JsonResponse({
            'success': True,
            'items': [alert_as_dict(a) for a in page.items],
            'pagination': page.pagination(),
        })

    def post(self, request):
        payload = parse_body(request)
        product_id = body_int(payload, 'productId')
        related_id = body_int(payload, 'relatedId')
        if related_id is None:
            related_id = product_id
        if related_id is None:
            raise ValidationError('INVALID_PAYLOAD', message='relatedId or productId is required')
        if related_id < 0:
            raise ValidationError('INVALID_PAYLOAD', message='relatedId must not be negative')

        alert = Restock.create_alert(
            alert_type=payload.get('type'),
            priority=payload.get('priority'),
            related_id=related_id,
            product_id=product_id,
            title=payload.get('title') or '',
            message=payload.get('message') or '',
            current_stock=body_int(payload, 'currentStock'),
            low_stock_threshold=body_int(payload, 'lowStockThreshold'),
        )
        return JsonResponse({'success': True, 'alert': alert_as_dict(alert)}, status=201)


class AlertGenerateView(RestockView):

    def post(self, request):
        payload = parse_body(request)
        created = Restock.generate_alerts(include_overdue=payload.get('includeOverdue', True) is not False)
        return JsonResponse({
            'success': True,
            'created': len(created),
            'alerts': [alert_as_dict(a) for a in created],
        })


class AlertStatsView(RestockView):

    def get(self, request):
        days = query_int(request, 'days', 30)
        if days <= 0 or days > 36500:
            raise ValidationError('INVALID_PAYLOAD', message='days must be between 1 and 36500', days=days)
        stats = Restock.alert_stats(days=days)
        return JsonResponse({
            'success': True,
            'windowDays': stats['window_days'],
            'total': stats['total'],
            'byStatus': stats['by_status'],
            'byPriority': stats['by_priority'],
            'byType': stats['by_type'],
        })


class AlertDetailView(RestockView):

    def get(self, request, alert_id):
        alert = Restock.get_alert(alert_id)
        return JsonResponse({
            'success': True,
            'alert': alert_as_dict(alert),
            'history': [event_as_dict(e) for e in alert.events.all()],
        })

    def delete(self, request, alert_id):
        Restock.delete_alert(alert_id)
        return JsonResponse({'success': True})


class AlertAcknowledgeView(RestockView):

    def post(self, request, alert_id):
        payload = parse_body(request)
        alert = Restock.acknowledge(alert_id, notes=payload.get('notes') or '')
        return JsonResponse({'success': True, 'alert': alert_as_dict(alert)})


class AlertIgnoreView(RestockView):

    def post(self, request, alert_id):
        payload = parse_body(request)
        alert = Restock.ignore(alert_id, reason=payload.get('reason'))
        return JsonResponse({'success': True, 'alert': alert_as_dict(alert)})


class ReplenishmentView(RestockView):

    def get(self, request, product_id):
        advice = Restock.recommend(
            product_id,
            window_days=query_int(request, 'windowDays'),
            coverage_days=query_int(request, 'coverageDays'),
        )
        return JsonResponse({'success': True, 'recommendation': advice.as_dict()})


class ReorderSuggestionsView(RestockView):

    def get(self, request):
        limit = query_int(request, 'limit', 50)
        if limit <= 0:
            raise ValidationError('INVALID_PAYLOAD', message='limit must be positive', limit=limit)
        result = Restock.reorder_suggestions(limit=limit)
        return JsonResponse({
            'success': True,
            'items': [r.as_dict() for r in result['items']],
            'totalItems': result['total_items'],
            'totalEstimatedCost': str(result['total_estimated_cost']),
        })


class PurchaseOrderCreateView(RestockView):

    def post(self, request):
        payload = parse_body(request)
        product_id = body_int(payload, 'productId', required=True)
        if 'quantity' not in payload:
            raise ValidationError('INVALID_QUANTITY', quantity=None)
        issued = Restock.issue_order(
            product_id,
            payload['quantity'],
            notes=payload.get('notes'),
            alert_id=body_int(payload, 'alertId'),
            expected_delivery_date=body_date(payload, 'expectedDeliveryDate'),
        )
        return JsonResponse({'success': True, **issued.as_dict()}, status=201)


class PurchaseOrderSendView(RestockView):

    def post(self, request, po_id):
        payload = parse_body(request)
        receipt = Restock.send_order(po_id, payload.get('method'), payload.get('recipient'))
        return JsonResponse({'success': True, **receipt.as_dict()})


class PurchaseOrderReceiveView(RestockView):

    def post(self, request, po_id):
        received = Restock.receive_order(po_id)
        return JsonResponse({'success': True, **received.as_dict()})


class ForecastView(RestockView):

    def get(self, request):
        limit = query_int(request, 'limit')
        if limit is not None and limit <= 0:
            raise ValidationError('INVALID_PAYLOAD', message='limit must be positive', limit=limit)
        forecast = Restock.forecast(limit=limit, window_days=query_int(request, 'windowDays'))
        return JsonResponse({'success': True, **forecast.as_dict()})
