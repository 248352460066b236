from typing import Optional

from application.service.retrying_service import RetryingService
from domain.entities import Installment
from domain.interfaces import InstallmentRepository, LoggingPort, bind_or_noop
from domain.results import RetryResult


class RevertPaymentService(RetryingService):
    """
    Cancel a recorded payment.

    The payment amount is taken back off the installment; if that leaves a
    balance the installment returns to pending, loses its paid date and goes
    back to its original due date.
    """

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

    async def execute(self, installment_id: int, payment_id: int) -> RetryResult[Installment]:
        log = bind_or_noop(self.logging_port, installment_id=installment_id, payment_id=payment_id, step="revert_payment")
        result = await self._call(
            lambda: self.installment_repo.revert_payment(installment_id, payment_id),
            "revert_payment",
            log,
        )
        if result.success:
            log.info(
                "payment_reverted",
                status=result.data.status.value,
                balance=str(result.data.balance),
                due_date=result.data.due_date.isoformat(),
            )
        return result
