from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from application.service.retrying_service import RetryingService
from domain.entities import Installment
from domain.exceptions import ValidationError
from domain.interfaces import InstallmentRepository, LoggingPort, bind_or_noop
from domain.results import RetryResult


class ApplyLateFeeService(RetryingService):
    """Add a non-negative late fee to an installment's amount and balance."""

    def __init__(
        self,
        installment_repo: InstallmentRepository,
        logging_port: Optional[LoggingPort] = None,
        max_retries: Optional[int] = None,
        retry_delay_ms: Optional[int] = None,
    ):
        super().__init__(max_retries, retry_delay_ms)
        self.installment_repo = installment_repo
        self.logging_port = logging_port

    async def execute(self, installment_id: int, fee: Union[Decimal, int, float, str]) -> RetryResult[Installment]:
        log = bind_or_noop(self.logging_port, installment_id=installment_id, step="apply_late_fee")
        try:
            value = Decimal(str(fee))
        except (InvalidOperation, ValueError):
            value = None
        if value is None or not value.is_finite() or value < 0:
            error = ValidationError("Late fee must be a non-negative amount", {"installment_id": installment_id, "fee": str(fee)})
            log.warning("late_fee_rejected", fee=str(fee))
            return RetryResult.failed(error, attempts=0)

        result = await self._call(
            lambda: self.installment_repo.apply_late_fee(installment_id, value),
            "apply_late_fee",
            log,
        )
        if result.success:
            log.info("late_fee_applied", fee=str(value), balance=str(result.data.balance))
        return result
