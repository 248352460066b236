from .sequential_payment import is_sequential_payment
from .period_classifier import infer_period_type
from .rescheduler import schedule_next_pending_monthly, schedule_all_pending_monthly
from .notifications import (
    overdue_key,
    upcoming_key,
    low_stock_key,
    parse_key,
    NotificationValidator,
    NotificationFormatter,
)
from .dedup import NotificationDedupService
from .cooldown import compute_stock_alert_cooldown

__all__ = [
    "is_sequential_payment", "infer_period_type",
    "schedule_next_pending_monthly", "schedule_all_pending_monthly",
    "overdue_key", "upcoming_key", "low_stock_key", "parse_key",
    "NotificationValidator", "NotificationFormatter", "NotificationDedupService",
    "compute_stock_alert_cooldown",
]
