"""Builders for domain entities and seeded database rows used across tests."""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities import Installment, InstallmentStatus, Product
from infrastructure.db.models import CustomerModel, InstallmentModel, NotificationModel, ProductModel, SaleModel


def make_installment(
    number: int,
    due: date,
    status: InstallmentStatus = InstallmentStatus.PENDING,
    paid_date: Optional[date] = None,
    id: Optional[int] = None,
    amount: Decimal = Decimal("100"),
    sale_id: int = 1,
    customer_name: Optional[str] = "Ana Perez",
    original_due_date: Optional[date] = None,
) -> Installment:
    paid = status == InstallmentStatus.PAID
    return Installment(
        id=number if id is None else id,
        sale_id=sale_id,
        installment_number=number,
        due_date=due,
        original_due_date=original_due_date,
        amount=amount,
        balance=Decimal("0") if paid else amount,
        paid_amount=amount if paid else Decimal("0"),
        status=status,
        paid_date=paid_date,
        customer_name=customer_name,
    )


def make_product(id: int = 1, name: str = "Notebook", stock: int = 0, updated_at: Optional[datetime] = None) -> Product:
    return Product(id=id, name=name, stock=stock, price=Decimal("10"), category="Stationery", updated_at=updated_at)


async def seed_sale(
    session: AsyncSession,
    due_dates: list[date],
    period_type: Optional[str] = "monthly",
    customer_name: str = "Ana Perez",
    amount: Decimal = Decimal("100"),
) -> tuple[int, list[int]]:
    """Insert a customer, a sale and one pending installment per due date."""
    customer = CustomerModel(name=customer_name)
    session.add(customer)
    await session.flush()
    sale = SaleModel(customer_id=customer.id, created_at=due_dates[0], period_type=period_type)
    session.add(sale)
    await session.flush()
    installments = [
        InstallmentModel.from_domain(Installment.create(sale.id, number, due, amount))
        for number, due in enumerate(due_dates, start=1)
    ]
    session.add_all(installments)
    await session.commit()
    return sale.id, [inst.id for inst in installments]


async def seed_product(session: AsyncSession, name: str = "Notebook", stock: int = 0, updated_at: Optional[datetime] = None) -> int:
    product = ProductModel(name=name, stock=stock, price=Decimal("10"), updated_at=updated_at or datetime(2025, 1, 1, 9, 0))
    session.add(product)
    await session.commit()
    return product.id


async def seed_notification(
    session: AsyncSession,
    key: str,
    created_at: datetime,
    archived_at: Optional[datetime] = None,
    type: str = "alert",
) -> int:
    notification = NotificationModel(message=f"seeded {key}", type=type, message_key=key, created_at=created_at, archived_at=archived_at)
    session.add(notification)
    await session.commit()
    return notification.id
