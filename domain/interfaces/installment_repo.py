from datetime import date
from decimal import Decimal
from typing_extensions import Protocol
from typing import Any, Optional
from domain.entities import Installment, Payment, Sale


class InstallmentRepository(Protocol):
    async def get_installment(self, installment_id: int) -> Optional[Installment]: ...
    async def get_installments_by_sale(self, sale_id: int) -> list[Installment]: ...
    async def get_sale(self, sale_id: int) -> Optional[Sale]: ...
    async def record_payment(
        self,
        installment_id: int,
        amount: Decimal,
        paid_date: date,
        payment_method: str = "cash",
        reference: Optional[str] = None,
    ) -> Installment: ...
    async def mark_installment_paid(self, installment_id: int, paid_date: date) -> Installment: ...
    async def update_installment(self, installment_id: int, fields: dict[str, Any]) -> None: ...
    async def get_payments_by_sale(self, sale_id: int) -> list[Payment]: ...
    async def revert_payment(self, installment_id: int, payment_id: int) -> Installment: ...
    async def apply_late_fee(self, installment_id: int, fee: Decimal) -> Installment: ...
    async def get_overdue(self, today: date) -> list[Installment]: ...
    async def get_upcoming(self, today: date, days_ahead: int, limit: int) -> list[Installment]: ...
