from django.urls import path

from restockman import views

app_name = 'restockman'

urlpatterns = [
    path('alerts/', views.AlertListView.as_view(), name='alert-list'),
    path('alerts/generate/', views.AlertGenerateView.as_view(), name='alert-generate'),
    path('alerts/stats/', views.AlertStatsView.as_view(), name='alert-stats'),
    path('alerts/<int:alert_id>/', views.AlertDetailView.as_view(), name='alert-detail'),
    path('alerts/<int:alert_id>/acknowledge/', views.AlertAcknowledgeView.as_view(), name='alert-acknowledge'),
    path('alerts/<int:alert_id>/ignore/', views.AlertIgnoreView.as_view(), name='alert-ignore'),
    path('products/<int:product_id>/replenishment/', views.ReplenishmentView.as_view(), name='product-replenishment'),
    path('reorder-suggestions/', views.ReorderSuggestionsView.as_view(), name='reorder-suggestions'),
    path('purchase-orders/', views.PurchaseOrderCreateView.as_view(), name='purchase-order-create'),
    path('purchase-orders/<int:po_id>/send/', views.PurchaseOrderSendView.as_view(), name='purchase-order-send'),
    path('purchase-orders/<int:po_id>/receive/', views.PurchaseOrderReceiveView.as_view(), name='purchase-order-receive'),
    path('forecast/', views.ForecastView.as_view(), name='forecast'),
]
