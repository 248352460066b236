"""
Notification dedup engine.

A key may have at most one record per calendar day. A new day makes the key
eligible again even if the condition behind it still holds, so an installment
that stays overdue is re-notified once a day.
"""
from datetime import date
from typing import Optional

from domain.interfaces import NotificationRepository


class NotificationDedupService:
    def __init__(self, notification_repo: NotificationRepository):
        self.notification_repo = notification_repo

    async def exists_today_with_key(self, key: str, today: Optional[date] = None) -> bool:
        """True if a record with ``key`` was created or archived on the local calendar day."""
        return await self.notification_repo.exists_today_with_key(key, today or date.today())

    async def should_notify(self, key: str, today: Optional[date] = None) -> bool:
        return not await self.exists_today_with_key(key, today)
