"""
Restockman services — one module per component.

Re-exports the public classes:
    from restockman.services import AlertGenerator, AlertStore, ReplenishmentPlanner
"""

from restockman.services.alerts import AlertStore, Page
from restockman.services.forecast import ForecastReporter
from restockman.services.generator import AlertGenerator
from restockman.services.orders import IssuedOrder, PurchaseOrderIssuer, ReceivedOrder, SendReceipt
from restockman.services.planning import Recommendation, ReplenishmentPlanner

__all__ = [
    'AlertStore',
    'Page',
    'AlertGenerator',
    'ReplenishmentPlanner',
    'Recommendation',
    'PurchaseOrderIssuer',
    'IssuedOrder',
    'SendReceipt',
    'ReceivedOrder',
    'ForecastReporter',
]
