from datetime import date, datetime
from typing_extensions import Protocol
from typing import Optional
from domain.entities import NotificationRecord, NotificationType


class NotificationRepository(Protocol):
    async def create_notification(self, message: str, type: NotificationType, key: Optional[str] = None) -> int: ...
    async def exists_today_with_key(self, key: str, today: date) -> bool: ...
    async def get_latest_by_key(self, key: str) -> Optional[NotificationRecord]: ...
    async def list_notifications(self, limit: int = 50) -> list[NotificationRecord]: ...
    async def mark_read(self, notification_id: int) -> None: ...
    async def archive(self, notification_id: int) -> None: ...
    async def purge_archived(self) -> int: ...
    async def purge_archived_older_than(self, cutoff: datetime) -> int: ...
