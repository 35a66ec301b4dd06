"""
Bounded retry for transient storage failures.

Wraps a whole unit of work (usually one transaction.atomic() block), so a
retry replays the unit from scratch and never continues a half-written one.
"""

import functools
import logging
import time

from django.db import InterfaceError, OperationalError

from restockman.conf import restockman_settings
from restockman.exceptions import DependencyError

logger = logging.getLogger('restockman')

TRANSIENT_ERRORS = (OperationalError, InterfaceError)


def storage_retry(func):
    """
    Retry ``func`` on transient database errors, then raise DependencyError.

    Attempts and backoff come from RESTOCKMAN settings
    (STORAGE_RETRY_ATTEMPTS, STORAGE_RETRY_BACKOFF). Backoff doubles on
    every attempt.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        attempts = max(1, restockman_settings.STORAGE_RETRY_ATTEMPTS)
        delay = restockman_settings.STORAGE_RETRY_BACKOFF
        for attempt in range(1, attempts + 1):
            try:
                return func(*args, **kwargs)
            except TRANSIENT_ERRORS as exc:
                if attempt == attempts:
                    logger.error(
                        "storage.unavailable",
                        extra={"operation": func.__qualname__, "attempts": attempts},
                    )
                    raise DependencyError(
                        'STORAGE_UNAVAILABLE',
                        operation=func.__qualname__,
                        error=str(exc),
                    ) from exc
                logger.warning(
                    "storage.retry",
                    extra={"operation": func.__qualname__, "attempt": attempt, "error": str(exc)},
                )
                if delay:
                    time.sleep(delay * (2 ** (attempt - 1)))

    return wrapper
