from .notification_scheduler import NotificationScheduler

__all__ = ["NotificationScheduler"]
