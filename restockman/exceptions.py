"""
Exceptions for Restockman.

All errors are RestockError subclasses with a structured code for
programmatic handling. The subclass tells the caller what went wrong
(bad input, missing record, state conflict, storage outage); the code
tells it exactly which rule fired.
"""

from decimal import Decimal
from typing import Any


class BaseError(Exception):
    """
    Exception carrying a machine-readable code plus context data.

    Usage:
        raise RestockError('INVALID_QUANTITY', requested=quantity)
        raise RestockError('NO_SUPPLIER', message='Custom text', product_id=7)
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.data!r})"


class RestockError(BaseError):
    """
    Structured exception for alert and replenishment operations.

    Usage:
        try:
            restock.issue_order(product_id=7, quantity=20, alert_id=3)
        except RestockError as e:
            if e.code == 'NO_SUPPLIER':
                print(f"Product {e.data['product_id']} has no supplier")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
        http_status: Status used when the error crosses the JSON API
    """

    http_status = 500

    _default_messages = {
        'INVALID_QUANTITY': 'Quantity must be a positive integer',
        'AMOUNT_TOO_LARGE': 'Order total exceeds the supported amount',
        'INVALID_STATUS': 'Invalid status value',
        'INVALID_TYPE': 'Invalid alert type',
        'INVALID_PRIORITY': 'Invalid priority value',
        'INVALID_PAGE': 'Invalid pagination parameters',
        'INVALID_METHOD': 'Unsupported send method',
        'INVALID_PAYLOAD': 'Malformed request body',
        'RECIPIENT_REQUIRED': 'Recipient is required',
        'NO_SUPPLIER': 'No supplier associated with this product',
        'ORDER_REQUIRED': 'A purchase order is required to resolve an alert',
        'ORDER_MISMATCH': 'Purchase order does not match the alert product',
        'ALERT_NOT_FOUND': 'Alert not found',
        'PRODUCT_NOT_FOUND': 'Product not found',
        'ORDER_NOT_FOUND': 'Purchase order not found',
        'ALERT_TERMINAL': 'Alert is already closed',
        'DUPLICATE_ACTIVE_ALERT': 'An open alert already exists for this subject',
        'PO_NUMBER_EXHAUSTED': 'Could not allocate a unique purchase order number',
        'STORAGE_UNAVAILABLE': 'Storage unavailable, try again later',
    }

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class ValidationError(RestockError):
    """Missing or invalid input. Nothing was written."""

    http_status = 400


class NotFoundError(RestockError):
    """Unknown alert, product or purchase order id."""

    http_status = 404


class ConflictError(RestockError):
    """Transition on a closed alert, or a duplicate open alert."""

    http_status = 409


class DependencyError(RestockError):
    """Storage unavailable or timed out after the bounded retry."""

    http_status = 503
