"""
Adapter registry — loads the configured snapshot provider and notifier.

Usage:
    from restockman.adapters import get_snapshot_provider, get_notifier

    provider = get_snapshot_provider()
    for product in provider.list_products():
        ...

Settings:
    RESTOCKMAN = {
        "SNAPSHOT_PROVIDER": "restockman.adapters.catalog.ModelSnapshotProvider",
        "NOTIFIER": "restockman.adapters.noop.LoggingNotifier",
    }

A dotted path that cannot be imported raises ImproperlyConfigured.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from restockman.conf import restockman_settings
from restockman.protocols.inventory import InventorySnapshotProvider
from restockman.protocols.notification import NotificationSink

logger = logging.getLogger(__name__)


# Cached adapter instances, keyed by setting name
_lock = threading.Lock()
_instances: dict[str, Any] = {}


def _load(setting_name: str) -> Any:
    instance = _instances.get(setting_name)
    if instance is None:
        with _lock:
            instance = _instances.get(setting_name)
            if instance is None:  # double-checked
                path = getattr(restockman_settings, setting_name)
                if not path:
                    raise ImproperlyConfigured(
                        f"RESTOCKMAN['{setting_name}'] must be configured."
                    )
                try:
                    adapter_class = import_string(path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import {setting_name} '{path}': {e}"
                    ) from e
                instance = adapter_class()
                _instances[setting_name] = instance
                logger.debug("Loaded %s: %s", setting_name, path)
    return instance


def get_snapshot_provider() -> InventorySnapshotProvider:
    """Return the configured inventory snapshot provider."""
    return _load("SNAPSHOT_PROVIDER")


def get_notifier() -> NotificationSink:
    """Return the configured notification sink."""
    return _load("NOTIFIER")


def reset_adapters() -> None:
    """Drop cached adapter instances. Useful for testing."""
    with _lock:
        _instances.clear()
