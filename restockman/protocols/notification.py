"""
Notification Sink Protocol — fire-and-forget delivery of outbound messages.

Restockman hands a Notification to the sink after the database work has
committed. A sink may queue, deliver or drop it; whatever it does, it
cannot undo what was already written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class Notification:
    """Message to deliver through an external channel."""

    channel: str  # "email", "sms", "whatsapp", "print"
    recipient: str
    subject: str
    body: str
    reference: str | None = None  # PO number, alert id, ...
    metadata: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class NotificationSink(Protocol):
    """Protocol for outbound notification delivery."""

    def send(self, notification: Notification) -> None:
        """
        Deliver or enqueue a notification.

        May raise on channel failure; callers log and move on.
        """
        ...
