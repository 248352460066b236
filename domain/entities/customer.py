from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from .installment import InstallmentStatus
from .sale import Sale


@dataclass
class Customer:
    id: Optional[int]
    name: str
    sales: list[Sale] = field(default_factory=list)

    @property
    def total_owed(self) -> Decimal:
        """Sum of outstanding balances across every sale. Derived, never stored."""
        return sum(
            (
                inst.balance
                for sale in self.sales
                for inst in sale.installments
                if inst.status not in (InstallmentStatus.PAID, InstallmentStatus.CANCELLED)
            ),
            Decimal("0"),
        )
