from datetime import date, datetime, time, timedelta
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_, delete, func, or_, select, update
from domain.entities import NotificationRecord, NotificationType
from domain.interfaces import NotificationRepository
from infrastructure.db.models import NotificationModel
from infrastructure.db.repositories.session_guard import rollback_on_error


class NotificationRepoSqlalchemy(NotificationRepository):
    """SQLAlchemy implementation of NotificationRepository."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @rollback_on_error
    async def create_notification(
        self,
        message: str,
        type: NotificationType,
        key: Optional[str] = None,
    ) -> int:
        notification_model = NotificationModel(
            message=message,
            type=type.value if isinstance(type, NotificationType) else str(type),
            message_key=key,
            created_at=datetime.now(),
        )
        self.db.add(notification_model)
        await self.db.commit()
        await self.db.refresh(notification_model)
        return notification_model.id

    @rollback_on_error
    async def exists_today_with_key(self, key: str, today: date) -> bool:
        """
        True when a notification with this key was created or archived on ``today``.

        Archiving counts so that dismissing an alert keeps it quiet for the
        rest of the day.
        """
        start = datetime.combine(today, time.min)
        end = start + timedelta(days=1)
        stmt = select(func.count(NotificationModel.id)).where(
            NotificationModel.message_key == key,
            or_(
                and_(NotificationModel.created_at >= start, NotificationModel.created_at < end),
                and_(NotificationModel.archived_at >= start, NotificationModel.archived_at < end),
            ),
        )
        result = await self.db.execute(stmt)
        return (result.scalar() or 0) > 0

    @rollback_on_error
    async def get_latest_by_key(self, key: str) -> Optional[NotificationRecord]:
        stmt = (
            select(NotificationModel)
            .where(NotificationModel.message_key == key)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        notification_model = result.scalar_one_or_none()
        return notification_model.to_domain() if notification_model else None

    @rollback_on_error
    async def list_notifications(self, limit: int = 50) -> list[NotificationRecord]:
        """Latest non-archived notifications, oldest first."""
        stmt = (
            select(NotificationModel)
            .where(NotificationModel.archived_at.is_(None))
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [model.to_domain() for model in reversed(result.scalars().all())]

    @rollback_on_error
    async def mark_read(self, notification_id: int) -> None:
        stmt = (
            update(NotificationModel)
            .where(NotificationModel.id == notification_id, NotificationModel.read_at.is_(None))
            .values(read_at=datetime.now())
            .execution_options(synchronize_session="fetch")
        )
        await self.db.execute(stmt)
        await self.db.commit()

    @rollback_on_error
    async def archive(self, notification_id: int) -> None:
        stmt = (
            update(NotificationModel)
            .where(NotificationModel.id == notification_id, NotificationModel.archived_at.is_(None))
            .values(archived_at=datetime.now())
            .execution_options(synchronize_session="fetch")
        )
        await self.db.execute(stmt)
        await self.db.commit()

    @rollback_on_error
    async def purge_archived(self) -> int:
        result = await self.db.execute(
            delete(NotificationModel)
            .where(NotificationModel.archived_at.is_not(None))
            .execution_options(synchronize_session="fetch")
        )
        await self.db.commit()
        return result.rowcount or 0

    @rollback_on_error
    async def purge_archived_older_than(self, cutoff: datetime) -> int:
        result = await self.db.execute(
            delete(NotificationModel)
            .where(NotificationModel.archived_at < cutoff)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.commit()
        return result.rowcount or 0
