from typing import Optional

from domain.entities import NotificationRecord
from domain.interfaces import LoggingPort, NotificationRepository, bind_or_noop


class NotificationInboxService:
    """User-facing side of the notification lifecycle: read, archive, purge."""

    def __init__(self, notification_repo: NotificationRepository, logging_port: Optional[LoggingPort] = None):
        self.notification_repo = notification_repo
        self.logging_port = logging_port

    async def list_notifications(self, limit: int = 50) -> list[NotificationRecord]:
        return await self.notification_repo.list_notifications(limit)

    async def mark_read(self, notification_id: int) -> None:
        await self.notification_repo.mark_read(notification_id)

    async def archive(self, notification_id: int) -> None:
        await self.notification_repo.archive(notification_id)

    async def purge_archived(self) -> int:
        count = await self.notification_repo.purge_archived()
        bind_or_noop(self.logging_port, step="notification_inbox").info("archived_notifications_purged", count=count)
        return count
