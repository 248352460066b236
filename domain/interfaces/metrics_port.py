from typing_extensions import Protocol


class MetricsPort(Protocol):
    """Protocol for metrics operations."""
    
    def increment_notifications_created(self, kind: str) -> None:
        """
        Increment the notifications_created_total counter.
        
        Args:
            kind: One of "overdue", "upcoming" or "stock_low"
        """
        ...
    
    def increment_scan_failure(self, kind: str, reason: str) -> None:
        """
        Increment the notification_scan_failures_total counter.
        
        Args:
            kind: Alert kind being evaluated
            reason: "validation" or "storage"
        """
        ...

    def increment_rescheduled(self) -> None:
        """Increment the installments_rescheduled_total counter."""
        ...

    def increment_payments_recorded(self, outcome: str) -> None:
        """
        Increment the payments_recorded_total counter.
        
        Args:
            outcome: One of "paid", "partial", "out_of_order" or "error"
        """
        ...
