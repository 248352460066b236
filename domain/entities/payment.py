from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class PaymentStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class Payment:
    id: Optional[int]
    sale_id: int
    installment_id: int
    amount: Decimal
    transaction_date: date
    payment_method: str = "cash"
    reference: Optional[str] = None
    status: PaymentStatus = PaymentStatus.COMPLETED
