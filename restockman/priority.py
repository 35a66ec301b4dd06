"""
Priority rules — isolated, testable, reusable.

One place decides how urgent a shortfall is. The generator uses it when
an alert is created, the forecast reporter uses it to tag rows, and the
alert store uses the rank to order listings.

Examples:
    - stock=0, threshold=5   -> critical (out of stock)
    - stock=2, threshold=10  -> high     (at or below half the threshold)
    - stock=7, threshold=10  -> medium
    - stock=12, threshold=10 -> None     (no shortfall)
"""

from restockman.models.enums import AlertPriority, AlertType

PRIORITY_RANK = {
    AlertPriority.CRITICAL.value: 4,
    AlertPriority.HIGH.value: 3,
    AlertPriority.MEDIUM.value: 2,
    AlertPriority.LOW.value: 1,
}


def is_short(stock: int, threshold: int) -> bool:
    """Is the product at or below its low stock threshold?"""
    return stock <= threshold


def alert_type_for(stock: int) -> AlertType:
    """Out of stock when nothing is left, low stock otherwise."""
    if stock <= 0:
        return AlertType.OUT_OF_STOCK
    return AlertType.LOW_STOCK


def priority_for(stock: int, threshold: int) -> AlertPriority | None:
    """
    Priority of a stock shortfall.

    Monotonic in stock: the less there is relative to the threshold, the
    higher the priority. Compares ``2 * stock`` with the threshold so
    half-thresholds on odd numbers need no float rounding.

    Args:
        stock: Current stock level
        threshold: Low stock threshold of the product

    Returns:
        AlertPriority, or None when stock is above the threshold
    """
    if stock <= 0:
        return AlertPriority.CRITICAL
    if not is_short(stock, threshold):
        return None
    if stock * 2 <= threshold:
        return AlertPriority.HIGH
    return AlertPriority.MEDIUM


def overdue_priority(days_overdue: int, high_after: int = 7,
                     medium_after: int = 3) -> AlertPriority:
    """Priority of a purchase order that is past its expected delivery."""
    if days_overdue > high_after:
        return AlertPriority.HIGH
    if days_overdue > medium_after:
        return AlertPriority.MEDIUM
    return AlertPriority.LOW


def rank(priority: str) -> int:
    """Numeric rank of a priority (higher = more urgent)."""
    return PRIORITY_RANK.get(str(priority), 0)
