"""
Restockman configuration.

Usage in settings.py:
    RESTOCKMAN = {
        "SNAPSHOT_PROVIDER": "restockman.adapters.catalog.ModelSnapshotProvider",
        "NOTIFIER": "restockman.adapters.noop.LoggingNotifier",
        "CONSUMPTION_WINDOW_DAYS": 30,
        "COVERAGE_DAYS": 30,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class RestockmanSettings:
    """Restockman configuration settings."""

    # Inventory snapshot backend (dotted path)
    SNAPSHOT_PROVIDER: str = "restockman.adapters.catalog.ModelSnapshotProvider"

    # Notification sink for purchase order dispatch (dotted path)
    NOTIFIER: str = "restockman.adapters.noop.LoggingNotifier"

    # Trailing window of outbound movements used for the consumption rate
    CONSUMPTION_WINDOW_DAYS: int = 30

    # Days of demand a suggested order should cover
    COVERAGE_DAYS: int = 30

    # Dashboard forecast: top N products and reorder horizon
    FORECAST_LIMIT: int = 20
    REORDER_HORIZON_DAYS: int = 30

    # Overdue purchase order priority thresholds (days past expected delivery)
    OVERDUE_HIGH_DAYS: int = 7
    OVERDUE_MEDIUM_DAYS: int = 3

    # Purchase order numbering
    PO_NUMBER_PREFIX: str = "PO"
    PO_NUMBER_MAX_ATTEMPTS: int = 5

    # Bounded retry for transient storage errors
    STORAGE_RETRY_ATTEMPTS: int = 3
    STORAGE_RETRY_BACKOFF: float = 0.05

    # Alert listing
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100


def get_restockman_settings() -> RestockmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "RESTOCKMAN", {})
    return RestockmanSettings(**{
        k: v for k, v in user_settings.items()
        if k in RestockmanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_restockman_settings(), name)


restockman_settings = _LazySettings()
