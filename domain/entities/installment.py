from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


@dataclass
class Installment:
    id: Optional[int]
    sale_id: int
    installment_number: int
    due_date: date
    amount: Decimal
    balance: Decimal
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_amount: Decimal = Decimal("0")
    paid_date: Optional[date] = None
    original_due_date: Optional[date] = None
    late_fee: Decimal = Decimal("0")
    customer_name: Optional[str] = None
    notes: Optional[str] = None

    def __post_init__(self):
        if self.original_due_date is None:
            self.original_due_date = self.due_date

    @staticmethod
    def create(sale_id: int, installment_number: int, due_date: date, amount: Decimal) -> 'Installment':
        return Installment(
            id=None,
            sale_id=sale_id,
            installment_number=installment_number,
            due_date=due_date,
            amount=amount,
            balance=amount,
        )

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID

    @property
    def anchor_date(self) -> date:
        """Due date the schedule was pinned to when the installment was created."""
        return self.original_due_date or self.due_date

    def effective_status(self, today: Optional[date] = None) -> InstallmentStatus:
        """Stored status, overridden to overdue once the due date has passed."""
        today = today or date.today()
        if self.status in (InstallmentStatus.PAID, InstallmentStatus.CANCELLED):
            return self.status
        if self.due_date < today:
            return InstallmentStatus.OVERDUE
        return self.status
