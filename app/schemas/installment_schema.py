# app/schemas/installment_schema.py
from typing import Optional
from datetime import date
from decimal import Decimal
from pydantic import BaseModel, Field


class PaymentCreate(BaseModel):
    amount: Decimal
    payment_method: str = "cash"
    reference: Optional[str] = None
    paid_date: Optional[date] = None


class MarkPaidRequest(BaseModel):
    paid_date: Optional[date] = None


class LateFeeRequest(BaseModel):
    fee: Decimal = Field(..., ge=0)


class RescheduledResponse(BaseModel):
    nextPendingId: int
    newDueISO: str


class PaymentResponse(BaseModel):
    installment_id: int
    status: str
    rescheduled: Optional[RescheduledResponse] = None


class InstallmentResponse(BaseModel):
    id: int
    sale_id: int
    installment_number: int
    due_date: date
    original_due_date: Optional[date] = None
    amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    late_fee: Decimal
    status: str
    paid_date: Optional[date] = None
