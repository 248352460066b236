from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from .installment import Installment


class PeriodType(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


@dataclass
class Sale:
    id: Optional[int]
    customer_id: int
    created_at: date
    period_type: Optional[PeriodType] = None
    installments: list[Installment] = field(default_factory=list)

    def ordered_installments(self) -> list[Installment]:
        return sorted(self.installments, key=lambda i: i.installment_number)
