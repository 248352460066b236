"""
Configuration module for the installment engine.

All configuration values are loaded from environment variables with sensible defaults.
See .env.example for all available configuration options.
"""
import os
from dataclasses import dataclass


def _get_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    return float(os.getenv(key, default))


def _get_int(key: str, default: int) -> int:
    """Get int from environment variable."""
    return int(os.getenv(key, default))


def _get_bool(key: str, default: bool) -> bool:
    """Get bool from environment variable ("false", "0" and "no" are false)."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() not in ("false", "0", "no", "")


@dataclass
class SchedulerConfig:
    """Periodic scan and storage retry settings."""

    interval_seconds: float = _get_float("SCHEDULER_INTERVAL_SECONDS", 300.0)
    max_retries: int = _get_int("SCHEDULER_MAX_RETRIES", 3)
    retry_delay_ms: int = _get_int("SCHEDULER_RETRY_DELAY_MS", 1000)
    # Window used to coalesce scans triggered by data changes
    debounce_ms: int = _get_int("SCAN_DEBOUNCE_MS", 500)
    enabled: bool = _get_bool("SCHEDULER_ENABLED", True)


@dataclass
class InstallmentAlertConfig:
    """Which installments the scan looks at."""

    upcoming_days_ahead: int = _get_int("UPCOMING_DAYS_AHEAD", 3)
    max_upcoming_to_process: int = _get_int("MAX_UPCOMING_TO_PROCESS", 50)


@dataclass
class StockConfig:
    """Low-stock alert settings."""

    low_stock_threshold: int = _get_int("LOW_STOCK_THRESHOLD", 1)
    notification_cooldown_hours: int = _get_int("STOCK_NOTIFICATION_COOLDOWN_HOURS", 24)


@dataclass
class RetentionConfig:
    """Archived notifications older than this are purged by the scan."""

    retention_days: int = _get_int("NOTIFICATIONS_RETENTION_DAYS", 90)


# Global config instances (lazy loaded)
_scheduler_config = None
_alert_config = None
_stock_config = None
_retention_config = None


def get_scheduler_config() -> SchedulerConfig:
    """Get scheduler configuration."""
    global _scheduler_config
    if _scheduler_config is None:
        _scheduler_config = SchedulerConfig()
    return _scheduler_config


def get_alert_config() -> InstallmentAlertConfig:
    """Get installment alert configuration."""
    global _alert_config
    if _alert_config is None:
        _alert_config = InstallmentAlertConfig()
    return _alert_config


def get_stock_config() -> StockConfig:
    """Get stock alert configuration."""
    global _stock_config
    if _stock_config is None:
        _stock_config = StockConfig()
    return _stock_config


def get_retention_config() -> RetentionConfig:
    """Get retention configuration."""
    global _retention_config
    if _retention_config is None:
        _retention_config = RetentionConfig()
    return _retention_config


def reload_config():
    """Force reload of all configuration from environment variables."""
    global _scheduler_config, _alert_config, _stock_config, _retention_config
    _scheduler_config = SchedulerConfig(
        interval_seconds=_get_float("SCHEDULER_INTERVAL_SECONDS", 300.0),
        max_retries=_get_int("SCHEDULER_MAX_RETRIES", 3),
        retry_delay_ms=_get_int("SCHEDULER_RETRY_DELAY_MS", 1000),
        debounce_ms=_get_int("SCAN_DEBOUNCE_MS", 500),
        enabled=_get_bool("SCHEDULER_ENABLED", True),
    )
    _alert_config = InstallmentAlertConfig(
        upcoming_days_ahead=_get_int("UPCOMING_DAYS_AHEAD", 3),
        max_upcoming_to_process=_get_int("MAX_UPCOMING_TO_PROCESS", 50),
    )
    _stock_config = StockConfig(
        low_stock_threshold=_get_int("LOW_STOCK_THRESHOLD", 1),
        notification_cooldown_hours=_get_int("STOCK_NOTIFICATION_COOLDOWN_HOURS", 24),
    )
    _retention_config = RetentionConfig(
        retention_days=_get_int("NOTIFICATIONS_RETENTION_DAYS", 90),
    )
