"""
Metrics adapter that implements MetricsPort protocol.

This adapter wraps the Prometheus counters to provide a clean interface for
the application layer.
"""
from infrastructure.metrics.metrics import (
    installments_rescheduled_total,
    notification_scan_failures_total,
    notifications_created_total,
    payments_recorded_total,
)


class MetricsAdapter:
    """Adapter that implements MetricsPort by incrementing Prometheus counters."""

    def increment_notifications_created(self, kind: str) -> None:
        notifications_created_total.labels(kind=kind).inc()

    def increment_scan_failure(self, kind: str, reason: str) -> None:
        notification_scan_failures_total.labels(kind=kind, reason=reason).inc()

    def increment_rescheduled(self) -> None:
        installments_rescheduled_total.inc()

    def increment_payments_recorded(self, outcome: str) -> None:
        payments_recorded_total.labels(outcome=outcome).inc()
