from datetime import datetime
from typing import Optional
from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.orm import Mapped
from domain.entities import NotificationRecord, NotificationType
from infrastructure.db.models.base import Base


class NotificationModel(Base):
    """
    Stored alert. message_key ("<type>|<id>") is the only link back to the
    installment or product that raised it.
    """

    __tablename__ = "notifications"

    id: Mapped[int] = Column(Integer, primary_key=True, autoincrement=True)
    message: Mapped[str] = Column(String, nullable=False)
    type: Mapped[str] = Column(String, nullable=False, default=NotificationType.INFO.value)
    message_key: Mapped[Optional[str]] = Column(String, nullable=True, index=True)
    created_at: Mapped[datetime] = Column(DateTime, nullable=False, default=datetime.now)
    read_at: Mapped[Optional[datetime]] = Column(DateTime, nullable=True)
    archived_at: Mapped[Optional[datetime]] = Column(DateTime, nullable=True)

    def to_domain(self) -> NotificationRecord:
        return NotificationRecord(
            id=self.id,
            key=self.message_key,
            message=self.message,
            type=NotificationType(self.type),
            created_at=self.created_at,
            read_at=self.read_at,
            archived_at=self.archived_at,
        )
