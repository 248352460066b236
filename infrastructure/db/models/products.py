from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import Column, String, Integer, DateTime, Numeric
from sqlalchemy.orm import Mapped
from domain.entities import Product
from infrastructure.db.models.base import Base


class ProductModel(Base):
    __tablename__ = "products"

    id: Mapped[int] = Column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = Column(String, nullable=False)
    stock: Mapped[int] = Column(Integer, nullable=False, default=0)
    price: Mapped[Decimal] = Column(Numeric(12, 2, asdecimal=True), nullable=False, default=Decimal("0"))
    category: Mapped[Optional[str]] = Column(String, nullable=True)
    updated_at: Mapped[datetime] = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def to_domain(self) -> Product:
        return Product(
            id=self.id,
            name=self.name,
            stock=self.stock,
            price=Decimal(self.price or 0),
            category=self.category,
            updated_at=self.updated_at,
        )
