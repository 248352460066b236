"""
Cooldown Module

Implements the rate limit on low-stock alerts: a product is not re-alerted
while its last alert is still active, nor within the cooldown window
(24 hours default) unless it was restocked or edited since that alert.
"""
from datetime import datetime, timedelta
from typing import TypedDict, Optional

from domain.entities import NotificationRecord


class CooldownResult(TypedDict):
    should_notify: bool
    is_in_cooldown: bool
    remaining_hours: Optional[float]
    last_notified_at: Optional[str]
    explanation: str


# Default cooldown period in hours
DEFAULT_STOCK_COOLDOWN_HOURS = 24


def _naive(value: datetime) -> datetime:
    # Make naive for comparison
    return value.replace(tzinfo=None) if value.tzinfo else value


def compute_stock_alert_cooldown(
    latest_record: Optional[NotificationRecord],
    product_updated_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
    cooldown_hours: int = DEFAULT_STOCK_COOLDOWN_HOURS
) -> CooldownResult:
    """
    Decide whether a low-stock alert may be raised for a product.

    Args:
        latest_record: Most recent notification stored under the product's key
        product_updated_at: Last modification time of the product
        now: Reference time (defaults to datetime.now())
        cooldown_hours: Cooldown period in hours (default 24)

    Returns:
        CooldownResult with the decision and remaining cooldown time
    """
    now = _naive(now or datetime.now())

    if latest_record is None:
        return CooldownResult(
            should_notify=True,
            is_in_cooldown=False,
            remaining_hours=None,
            last_notified_at=None,
            explanation="No previous low-stock alert - eligible"
        )

    last_at = _naive(latest_record.created_at)

    if not latest_record.archived:
        return CooldownResult(
            should_notify=False,
            is_in_cooldown=True,
            remaining_hours=None,
            last_notified_at=last_at.isoformat(),
            explanation=f"Previous alert still active (created {last_at.strftime('%Y-%m-%d %H:%M')})"
        )

    if product_updated_at is not None and _naive(product_updated_at) > last_at:
        return CooldownResult(
            should_notify=True,
            is_in_cooldown=False,
            remaining_hours=0,
            last_notified_at=last_at.isoformat(),
            explanation="Product changed since last alert - eligible"
        )

    elapsed = now - last_at
    window = timedelta(hours=cooldown_hours)
    if elapsed < window:
        remaining_hours = (window - elapsed).total_seconds() / 3600
        return CooldownResult(
            should_notify=False,
            is_in_cooldown=True,
            remaining_hours=round(remaining_hours, 1),
            last_notified_at=last_at.isoformat(),
            explanation=f"Cooldown active: {remaining_hours:.1f} hours remaining (last alert: {last_at.strftime('%Y-%m-%d %H:%M')})"
        )

    return CooldownResult(
        should_notify=True,
        is_in_cooldown=False,
        remaining_hours=0,
        last_notified_at=last_at.isoformat(),
        explanation=f"Cooldown expired - eligible (last alert: {last_at.strftime('%Y-%m-%d %H:%M')})"
    )
