from datetime import date
from decimal import Decimal
from typing import Optional
from sqlalchemy import Column, String, Integer, Date, Numeric, ForeignKey
from sqlalchemy.orm import Mapped
from domain.entities import Payment, PaymentStatus
from infrastructure.db.models.base import Base


class PaymentModel(Base):
    """One money movement against an installment."""

    __tablename__ = "payment_transactions"

    id: Mapped[int] = Column(Integer, primary_key=True, autoincrement=True)
    sale_id: Mapped[int] = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    installment_id: Mapped[int] = Column(Integer, ForeignKey("installments.id", ondelete="CASCADE"), nullable=False)
    amount: Mapped[Decimal] = Column(Numeric(12, 2, asdecimal=True), nullable=False)
    payment_method: Mapped[str] = Column(String, nullable=False, default="cash")
    reference: Mapped[Optional[str]] = Column(String, nullable=True)
    transaction_date: Mapped[date] = Column(Date, nullable=False)
    status: Mapped[str] = Column(String, nullable=False, default=PaymentStatus.COMPLETED.value)

    def to_domain(self) -> Payment:
        return Payment(
            id=self.id,
            sale_id=self.sale_id,
            installment_id=self.installment_id,
            amount=Decimal(self.amount),
            transaction_date=self.transaction_date,
            payment_method=self.payment_method,
            reference=self.reference,
            status=PaymentStatus(self.status),
        )
