from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from sqlalchemy import Column, String, Integer, Date, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, relationship
from domain.entities import Installment, InstallmentStatus
from infrastructure.db.models.base import Base

if TYPE_CHECKING:
    from infrastructure.db.models.sales import SaleModel

Money = Numeric(12, 2, asdecimal=True)


class InstallmentModel(Base):
    __tablename__ = "installments"
    __table_args__ = (UniqueConstraint("sale_id", "installment_number", name="uq_installment_sale_number"),)
    
    id: Mapped[int] = Column(Integer, primary_key=True, autoincrement=True)
    sale_id: Mapped[int] = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    installment_number: Mapped[int] = Column(Integer, nullable=False)
    due_date: Mapped[date] = Column(Date, nullable=False, index=True)
    # Due date at creation; restored when a payment is reverted
    original_due_date: Mapped[date] = Column(Date, nullable=False)
    amount: Mapped[Decimal] = Column(Money, nullable=False)
    paid_amount: Mapped[Decimal] = Column(Money, nullable=False, default=Decimal("0"))
    balance: Mapped[Decimal] = Column(Money, nullable=False)
    late_fee: Mapped[Decimal] = Column(Money, nullable=False, default=Decimal("0"))
    status: Mapped[str] = Column(String, nullable=False, default=InstallmentStatus.PENDING.value)
    paid_date: Mapped[Optional[date]] = Column(Date, nullable=True)
    notes: Mapped[Optional[str]] = Column(String, nullable=True)
    
    # Relationship back to sale (many-to-one)
    sale_rel: Mapped["SaleModel"] = relationship(
        "SaleModel",
        back_populates="installments_rel"
    )
    
    def to_domain(self, customer_name: Optional[str] = None) -> Installment:
        """Convert database model to domain entity."""
        return Installment(
            id=self.id,
            sale_id=self.sale_id,
            installment_number=self.installment_number,
            due_date=self.due_date,
            original_due_date=self.original_due_date,
            amount=Decimal(self.amount),
            paid_amount=Decimal(self.paid_amount or 0),
            balance=Decimal(self.balance),
            late_fee=Decimal(self.late_fee or 0),
            status=InstallmentStatus(self.status),
            paid_date=self.paid_date,
            customer_name=customer_name,
            notes=self.notes,
        )
    
    @classmethod
    def from_domain(cls, installment: Installment) -> "InstallmentModel":
        """Convert domain Installment entity to database model."""
        return cls(
            id=installment.id,
            sale_id=installment.sale_id,
            installment_number=installment.installment_number,
            due_date=installment.due_date,
            original_due_date=installment.original_due_date or installment.due_date,
            amount=installment.amount,
            paid_amount=installment.paid_amount,
            balance=installment.balance,
            late_fee=installment.late_fee,
            status=installment.status.value if isinstance(installment.status, InstallmentStatus) else str(installment.status),
            paid_date=installment.paid_date,
            notes=installment.notes,
        )
