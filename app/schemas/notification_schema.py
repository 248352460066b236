# app/schemas/notification_schema.py
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class NotificationResponse(BaseModel):
    id: int
    key: Optional[str] = None
    message: str
    type: str
    created_at: datetime
    read: bool
    archived: bool


class ScanEntryResponse(BaseModel):
    key: str
    reason: Optional[str] = None
    notification_id: Optional[int] = None


class ScanReportResponse(BaseModel):
    created: List[ScanEntryResponse]
    skipped: List[ScanEntryResponse]
    failed: List[ScanEntryResponse]
    purged: bool


class SaleItem(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)


class SaleItemsRequest(BaseModel):
    items: List[SaleItem] = Field(..., min_length=1)


class PurgeResponse(BaseModel):
    purged: int
