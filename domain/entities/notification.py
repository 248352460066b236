from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class NotificationType(str, Enum):
    ALERT = "alert"
    REMINDER = "reminder"
    INFO = "info"


class NotificationKind(str, Enum):
    """Alert condition encoded as the first segment of a notification key."""
    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    STOCK_LOW = "stock_low"


@dataclass
class NotificationRecord:
    id: Optional[int]
    key: Optional[str]
    message: str
    type: NotificationType
    created_at: datetime
    read_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None

    @property
    def read(self) -> bool:
        return self.read_at is not None

    @property
    def archived(self) -> bool:
        return self.archived_at is not None
