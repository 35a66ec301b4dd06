"""
Logging Notifier — Stub notification sink for development and testing.

This adapter implements the NotificationSink protocol without talking to
any real channel: every notification is written to the 'restockman'
logger and dropped.

Usage in settings.py (this is the default):
    RESTOCKMAN = {
        "NOTIFIER": "restockman.adapters.noop.LoggingNotifier",
    }

WARNING: Nothing is delivered. Point NOTIFIER at a real e-mail/SMS
gateway adapter in production.
"""

from __future__ import annotations

import logging

from restockman.protocols.notification import Notification

logger = logging.getLogger('restockman')


class LoggingNotifier:
    """
    No-delivery notification sink.

    Suitable for:
    - Local development without a mail or SMS gateway
    - Tests that only care that a notification was handed over
    - Deployments where purchase orders are sent by hand
    """

    def send(self, notification: Notification) -> None:
        """
        Log the notification. Never raises.

        Args:
            notification: Message to "deliver".
        """
        logger.info(
            "notification.logged",
            extra={
                "channel": notification.channel,
                "recipient": notification.recipient,
                "subject": notification.subject,
                "reference": notification.reference,
            },
        )
