from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from domain.entities import Installment, InstallmentStatus, Payment, PaymentStatus, Sale
from domain.exceptions import (
    InstallmentNotFoundError,
    PaymentAmountError,
    PaymentNotFoundError,
    ValidationError,
)
from domain.interfaces import InstallmentRepository
from infrastructure.db.models import CustomerModel, InstallmentModel, PaymentModel, SaleModel
from infrastructure.db.repositories.session_guard import rollback_on_error

# Columns update_installment may touch
UPDATABLE_FIELDS = {"due_date", "status", "notes", "paid_date"}

OPEN_STATUSES = (InstallmentStatus.PENDING.value, InstallmentStatus.OVERDUE.value)


class InstallmentRepoSqlalchemy(InstallmentRepository):
    """SQLAlchemy implementation of InstallmentRepository."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, installment_id: int) -> InstallmentModel:
        installment_model = await self.db.get(InstallmentModel, installment_id)
        if installment_model is None:
            raise InstallmentNotFoundError(
                f"Installment {installment_id} not found",
                context={"installment_id": installment_id},
            )
        return installment_model

    async def _commit_and_convert(self, installment_model: InstallmentModel) -> Installment:
        await self.db.commit()
        await self.db.refresh(installment_model)
        return installment_model.to_domain()

    @rollback_on_error
    async def get_installment(self, installment_id: int) -> Optional[Installment]:
        """Get an installment by ID."""
        installment_model = await self.db.get(InstallmentModel, installment_id)
        return installment_model.to_domain() if installment_model else None

    @rollback_on_error
    async def get_installments_by_sale(self, sale_id: int) -> list[Installment]:
        """Get all installments of a sale ordered by installment number."""
        stmt = (
            select(InstallmentModel)
            .where(InstallmentModel.sale_id == sale_id)
            .order_by(InstallmentModel.installment_number)
        )
        result = await self.db.execute(stmt)
        return [model.to_domain() for model in result.scalars().all()]

    @rollback_on_error
    async def get_sale(self, sale_id: int) -> Optional[Sale]:
        stmt = select(SaleModel).where(SaleModel.id == sale_id)
        result = await self.db.execute(stmt)
        sale_model = result.scalar_one_or_none()
        return sale_model.to_domain() if sale_model else None

    @rollback_on_error
    async def record_payment(
        self,
        installment_id: int,
        amount: Decimal,
        paid_date: date,
        payment_method: str = "cash",
        reference: Optional[str] = None,
    ) -> Installment:
        """
        Apply a (possibly partial) payment and store its transaction.

        The installment becomes paid when the balance reaches zero; otherwise
        it stays pending with the reduced balance.
        """
        installment_model = await self._load(installment_id)
        if installment_model.status == InstallmentStatus.PAID.value:
            raise PaymentAmountError("Installment is already paid", context={"installment_id": installment_id})

        remaining = installment_model.amount - installment_model.paid_amount
        if amount <= 0 or amount > remaining:
            raise PaymentAmountError(
                "Payment amount must be positive and not exceed the remaining balance",
                context={"installment_id": installment_id, "amount": str(amount), "remaining": str(remaining)},
            )

        new_paid = installment_model.paid_amount + amount
        balance = max(Decimal("0"), installment_model.amount - new_paid)
        installment_model.paid_amount = new_paid
        installment_model.balance = balance
        if balance == 0:
            installment_model.status = InstallmentStatus.PAID.value
            installment_model.paid_date = paid_date
            if paid_date < installment_model.due_date:
                installment_model.notes = "Paid in advance"
        else:
            installment_model.status = InstallmentStatus.PENDING.value

        self.db.add(PaymentModel(
            sale_id=installment_model.sale_id,
            installment_id=installment_model.id,
            amount=amount,
            payment_method=payment_method,
            reference=reference,
            transaction_date=paid_date,
            status=PaymentStatus.COMPLETED.value,
        ))
        return await self._commit_and_convert(installment_model)

    @rollback_on_error
    async def mark_installment_paid(self, installment_id: int, paid_date: date) -> Installment:
        """Settle whatever is left on the installment in one payment."""
        installment_model = await self._load(installment_id)
        if installment_model.status == InstallmentStatus.PAID.value:
            raise PaymentAmountError("Installment is already paid", context={"installment_id": installment_id})

        remaining = installment_model.amount - installment_model.paid_amount
        installment_model.paid_amount = installment_model.amount
        installment_model.balance = Decimal("0")
        installment_model.status = InstallmentStatus.PAID.value
        installment_model.paid_date = paid_date
        if paid_date < installment_model.due_date:
            installment_model.notes = "Paid in advance"

        if remaining > 0:
            self.db.add(PaymentModel(
                sale_id=installment_model.sale_id,
                installment_id=installment_model.id,
                amount=remaining,
                payment_method="cash",
                reference="Marked as paid",
                transaction_date=paid_date,
                status=PaymentStatus.COMPLETED.value,
            ))
        return await self._commit_and_convert(installment_model)

    @rollback_on_error
    async def update_installment(self, installment_id: int, fields: dict[str, Any]) -> None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot update installment fields: {', '.join(sorted(unknown))}",
                context={"installment_id": installment_id},
            )
        installment_model = await self._load(installment_id)
        for name, value in fields.items():
            if isinstance(value, InstallmentStatus):
                value = value.value
            setattr(installment_model, name, value)
        await self.db.commit()

    @rollback_on_error
    async def get_payments_by_sale(self, sale_id: int) -> list[Payment]:
        stmt = (
            select(PaymentModel)
            .where(PaymentModel.sale_id == sale_id)
            .order_by(PaymentModel.transaction_date, PaymentModel.id)
        )
        result = await self.db.execute(stmt)
        return [model.to_domain() for model in result.scalars().all()]

    @rollback_on_error
    async def revert_payment(self, installment_id: int, payment_id: int) -> Installment:
        """
        Cancel a payment and give its amount back to the installment balance.

        An installment that is no longer fully paid returns to pending with its
        original due date; rescheduling applied on top of it is undone.
        """
        payment_model = await self.db.get(PaymentModel, payment_id)
        if payment_model is None or payment_model.installment_id != installment_id:
            raise PaymentNotFoundError(
                f"Payment {payment_id} not found for installment {installment_id}",
                context={"installment_id": installment_id, "payment_id": payment_id},
            )
        if payment_model.status == PaymentStatus.CANCELLED.value:
            raise ValidationError("Payment was already reverted", context={"payment_id": payment_id})

        installment_model = await self._load(installment_id)
        new_paid = max(Decimal("0"), installment_model.paid_amount - payment_model.amount)
        balance = max(Decimal("0"), installment_model.amount - new_paid)
        installment_model.paid_amount = new_paid
        installment_model.balance = balance
        if balance > 0:
            installment_model.status = InstallmentStatus.PENDING.value
            installment_model.paid_date = None
            installment_model.notes = None
            installment_model.due_date = installment_model.original_due_date or installment_model.due_date

        payment_model.status = PaymentStatus.CANCELLED.value
        return await self._commit_and_convert(installment_model)

    @rollback_on_error
    async def apply_late_fee(self, installment_id: int, fee: Decimal) -> Installment:
        """Add a late fee to both the amount and the outstanding balance."""
        installment_model = await self._load(installment_id)
        if installment_model.status == InstallmentStatus.PAID.value:
            raise ValidationError(
                "Cannot apply a late fee to a paid installment",
                context={"installment_id": installment_id},
            )
        installment_model.late_fee = (installment_model.late_fee or Decimal("0")) + fee
        installment_model.amount = installment_model.amount + fee
        installment_model.balance = installment_model.balance + fee
        return await self._commit_and_convert(installment_model)

    @rollback_on_error
    async def get_overdue(self, today: date) -> list[Installment]:
        """Open installments with a balance whose due date has passed."""
        stmt = (
            select(InstallmentModel, CustomerModel.name)
            .join(SaleModel, SaleModel.id == InstallmentModel.sale_id)
            .join(CustomerModel, CustomerModel.id == SaleModel.customer_id)
            .where(
                InstallmentModel.status.in_(OPEN_STATUSES),
                InstallmentModel.due_date < today,
                InstallmentModel.balance > 0,
            )
            .order_by(InstallmentModel.due_date, InstallmentModel.id)
        )
        result = await self.db.execute(stmt)
        return [model.to_domain(customer_name=name) for model, name in result.all()]

    @rollback_on_error
    async def get_upcoming(self, today: date, days_ahead: int, limit: int) -> list[Installment]:
        """Pending installments due between today and today + days_ahead, inclusive."""
        stmt = (
            select(InstallmentModel, CustomerModel.name)
            .join(SaleModel, SaleModel.id == InstallmentModel.sale_id)
            .join(CustomerModel, CustomerModel.id == SaleModel.customer_id)
            .where(
                InstallmentModel.status == InstallmentStatus.PENDING.value,
                InstallmentModel.due_date >= today,
                InstallmentModel.due_date <= today + timedelta(days=days_ahead),
                InstallmentModel.balance > 0,
            )
            .order_by(InstallmentModel.due_date, InstallmentModel.id)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [model.to_domain(customer_name=name) for model, name in result.all()]
