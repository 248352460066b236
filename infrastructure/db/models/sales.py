from datetime import date
from typing import TYPE_CHECKING, Optional
from sqlalchemy import Column, String, Integer, Date, ForeignKey
from sqlalchemy.orm import Mapped, relationship
from domain.entities import PeriodType, Sale
from infrastructure.db.models.base import Base

if TYPE_CHECKING:
    from infrastructure.db.models.customers import CustomerModel
    from infrastructure.db.models.installments import InstallmentModel
    from infrastructure.db.models.payments import PaymentModel


class SaleModel(Base):
    __tablename__ = "sales"

    id: Mapped[int] = Column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[date] = Column(Date, nullable=False)
    period_type: Mapped[Optional[str]] = Column(String, nullable=True)

    customer_rel: Mapped["CustomerModel"] = relationship("CustomerModel", back_populates="sales_rel")

    # Installments and payments are owned by the sale (one-to-many, cascade delete)
    installments_rel: Mapped[list["InstallmentModel"]] = relationship(
        "InstallmentModel",
        back_populates="sale_rel",
        cascade="all, delete-orphan",
        order_by="InstallmentModel.installment_number",
        lazy="selectin",
    )
    payments_rel: Mapped[list["PaymentModel"]] = relationship(
        "PaymentModel",
        cascade="all, delete-orphan",
    )

    def to_domain(self) -> Sale:
        """Convert database model to domain entity, installments included."""
        return Sale(
            id=self.id,
            customer_id=self.customer_id,
            created_at=self.created_at,
            period_type=PeriodType(self.period_type) if self.period_type else None,
            installments=[inst.to_domain() for inst in self.installments_rel],
        )
