from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Awaitable, Callable, Optional, Union

from application.service.retrying_service import RetryingService
from domain.entities import Installment, InstallmentStatus, PeriodType
from domain.exceptions import InstallmentNotFoundError, PaymentAmountError, ValidationError
from domain.interfaces import BoundLogger, InstallmentRepository, LoggingPort, MetricsPort, bind_or_noop
from domain.results import PaymentOutcome, RescheduleResult
from domain.services import infer_period_type, is_sequential_payment, schedule_all_pending_monthly
from domain.utils.date_utils import DateLike, parse_iso_date


class PaymentServiceBase(RetryingService):
    """
    Shared flow for recording a payment on an installment:

    1. load the installment and the installments of its sale
    2. enforce the sequential payment rule
    3. persist the payment
    4. on a monthly sale, once the installment is fully paid, re-read the sale
       and move every pending installment, one month apart
    """

    step = "payment"

    def __init__(
        self,
        installment_repo: InstallmentRepository,
        metrics_port: Optional[MetricsPort] = None,
        logging_port: Optional[LoggingPort] = None,
        max_retries: Optional[int] = None,
        retry_delay_ms: Optional[int] = None,
    ):
        """
        Args:
            installment_repo: Storage for installments, sales and payments (required)
            metrics_port: Metrics port (optional)
            logging_port: Logging port for structured logging (optional)
            max_retries: Attempts per storage call (defaults to SchedulerConfig)
            retry_delay_ms: Linear backoff base (defaults to SchedulerConfig)
        """
        super().__init__(max_retries, retry_delay_ms)
        self.installment_repo = installment_repo
        self.metrics_port = metrics_port
        self.logging_port = logging_port

    def _metric(self, outcome: str) -> None:
        if self.metrics_port:
            self.metrics_port.increment_payments_recorded(outcome=outcome)

    async def _load(self, installment_id: int) -> tuple[Installment, list[Installment]]:
        installment = await self.installment_repo.get_installment(installment_id)
        if installment is None:
            raise InstallmentNotFoundError(
                f"Installment with id {installment_id} not found",
                {"installment_id": installment_id},
            )
        siblings = await self.installment_repo.get_installments_by_sale(installment.sale_id)
        return installment, siblings

    @staticmethod
    def _check_not_paid(installment: Installment) -> None:
        if installment.status == InstallmentStatus.PAID:
            raise PaymentAmountError("Installment is already paid", {"installment_id": installment.id})

    async def _pay(
        self,
        installment_id: int,
        paid_date: Optional[DateLike],
        check: Callable[[Installment], None],
        write: Callable[[Installment, date], Awaitable[Installment]],
    ) -> PaymentOutcome:
        log = bind_or_noop(self.logging_port, installment_id=installment_id, step=self.step)
        try:
            paid_on = parse_iso_date(paid_date) or date.today()
        except ValueError as e:
            return PaymentOutcome(installment_id=installment_id, error=ValidationError(str(e)))

        loaded = await self._call(lambda: self._load(installment_id), "load_installment", log)
        if not loaded.success:
            self._metric("error")
            return PaymentOutcome(installment_id=installment_id, error=loaded.error)
        installment, siblings = loaded.data

        if not is_sequential_payment(siblings, installment.installment_number):
            log.warning(
                "payment_out_of_order",
                sale_id=installment.sale_id,
                installment_number=installment.installment_number,
            )
            self._metric("out_of_order")
            return PaymentOutcome(
                installment_id=installment_id,
                status=installment.status,
                sequencing_violation=True,
            )

        try:
            self._check_not_paid(installment)
            check(installment)
        except PaymentAmountError as e:
            log.warning("payment_rejected", error=e.message)
            self._metric("error")
            return PaymentOutcome(installment_id=installment_id, status=installment.status, error=e)

        written = await self._call(lambda: write(installment, paid_on), "record_payment", log)
        if not written.success:
            self._metric("error")
            return PaymentOutcome(installment_id=installment_id, status=installment.status, error=written.error)
        updated = written.data

        log.info(
            "payment_recorded",
            sale_id=updated.sale_id,
            installment_number=updated.installment_number,
            status=updated.status.value,
            balance=str(updated.balance),
            paid_date=paid_on.isoformat(),
        )

        rescheduled = None
        if updated.status == InstallmentStatus.PAID:
            self._metric("paid")
            rescheduled = await self._reschedule(updated.sale_id, log)
        else:
            self._metric("partial")

        return PaymentOutcome(installment_id=installment_id, status=updated.status, rescheduled=rescheduled)

    async def _reschedule(self, sale_id: int, log: BoundLogger) -> Optional[RescheduleResult]:
        # Read again: another payment on this sale may have landed meanwhile
        async def load_sale():
            sale = await self.installment_repo.get_sale(sale_id)
            return sale, await self.installment_repo.get_installments_by_sale(sale_id)

        fresh = await self._call(load_sale, "load_sale_installments", log)
        if not fresh.success:
            log.error("reschedule_load_failed", sale_id=sale_id, error=str(fresh.error))
            return None
        sale, installments = fresh.data

        period_type = sale.period_type if sale and sale.period_type else infer_period_type(installments)
        if period_type != PeriodType.MONTHLY:
            log.info("reschedule_skipped", sale_id=sale_id, period_type=period_type.value)
            return None

        moves = schedule_all_pending_monthly(installments)
        if not moves:
            return None

        moved = 0
        for move in moves:
            new_due = parse_iso_date(move.new_due_iso)
            persisted = await self._call(
                lambda: self.installment_repo.update_installment(move.next_pending_id, {"due_date": new_due}),
                "update_installment_due_date",
                log,
            )
            if not persisted.success:
                log.error(
                    "reschedule_persist_failed",
                    sale_id=sale_id,
                    installment_id=move.next_pending_id,
                    moved=moved,
                    error=str(persisted.error),
                )
                break
            moved += 1

        # The next pending installment is the one reported to the caller
        if moved == 0:
            return None
        result = moves[0]

        log.info(
            "installment_rescheduled",
            sale_id=sale_id,
            next_pending_id=result.next_pending_id,
            new_due_date=result.new_due_iso,
            moved=moved,
        )
        if self.metrics_port:
            self.metrics_port.increment_rescheduled()
        return result


class RecordPaymentService(PaymentServiceBase):
    """Record a full or partial payment on an installment."""

    step = "record_payment"

    async def execute(
        self,
        installment_id: int,
        amount: Union[Decimal, int, float, str],
        payment_method: str = "cash",
        reference: Optional[str] = None,
        paid_date: Optional[DateLike] = None,
    ) -> PaymentOutcome:
        try:
            value = Decimal(str(amount))
            if not value.is_finite():
                raise InvalidOperation(amount)
        except (InvalidOperation, ValueError):
            error = PaymentAmountError(f"Invalid payment amount: {amount!r}", {"installment_id": installment_id})
            return PaymentOutcome(installment_id=installment_id, error=error)

        def check(installment: Installment) -> None:
            remaining = installment.amount - installment.paid_amount
            if value <= 0:
                raise PaymentAmountError("Payment amount must be greater than 0", {"installment_id": installment.id})
            if value > remaining:
                raise PaymentAmountError(
                    f"Payment amount exceeds the remaining balance. Maximum: {remaining}",
                    {"installment_id": installment.id, "remaining": str(remaining)},
                )

        async def write(installment: Installment, paid_on: date) -> Installment:
            return await self.installment_repo.record_payment(
                installment.id, value, paid_on, payment_method=payment_method, reference=reference
            )

        return await self._pay(installment_id, paid_date, check, write)


class MarkInstallmentPaidService(PaymentServiceBase):
    """Settle the remaining balance of an installment in one go."""

    step = "mark_installment_paid"

    async def execute(self, installment_id: int, paid_date: Optional[DateLike] = None) -> PaymentOutcome:
        async def write(installment: Installment, paid_on: date) -> Installment:
            return await self.installment_repo.mark_installment_paid(installment.id, paid_on)

        return await self._pay(installment_id, paid_date, lambda installment: None, write)
