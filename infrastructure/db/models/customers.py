from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.orm import Mapped, relationship
from infrastructure.db.models.base import Base

if TYPE_CHECKING:
    from infrastructure.db.models.sales import SaleModel


class CustomerModel(Base):
    __tablename__ = "customers"

    id: Mapped[int] = Column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = Column(String, nullable=False)
    created_at: Mapped[datetime] = Column(DateTime, nullable=False, default=datetime.now)

    # Sales are owned by the customer (one-to-many, cascade delete)
    sales_rel: Mapped[list["SaleModel"]] = relationship(
        "SaleModel",
        back_populates="customer_rel",
        cascade="all, delete-orphan",
    )
