from fastapi import APIRouter, Depends, HTTPException, status, Request, Response
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from application.service.record_payment import RecordPaymentService, MarkInstallmentPaidService
from application.service.revert_payment import RevertPaymentService
from application.service.apply_late_fee import ApplyLateFeeService
from application.service.notification_scan import NotificationScanService
from application.service.check_low_stock import CheckLowStockAfterSaleService
from application.service.notification_inbox import NotificationInboxService
from app.dependencies import get_logging_port, get_metrics_port
from app.schemas.installment_schema import (
    PaymentCreate,
    MarkPaidRequest,
    LateFeeRequest,
    PaymentResponse,
    RescheduledResponse,
    InstallmentResponse,
)
from app.schemas.notification_schema import (
    NotificationResponse,
    ScanReportResponse,
    ScanEntryResponse,
    SaleItemsRequest,
    PurgeResponse,
)
from domain.entities import Installment
from domain.exceptions import EngineError, NotFoundError, ValidationError
from domain.results import PaymentOutcome, ScanReport
from infrastructure.db.database import get_db_session
from infrastructure.db.repositories.installment_repo_sqlalchemy import InstallmentRepoSqlalchemy
from infrastructure.db.repositories.notification_repo_sqlalchemy import NotificationRepoSqlalchemy
from infrastructure.db.repositories.product_repo_sqlalchemy import ProductRepoSqlalchemy
from infrastructure.logging.logging_adapter import LoggingAdapter
from infrastructure.metrics.metrics_adapter import MetricsAdapter

router = APIRouter(prefix="/v1")


def raise_for_error(error: Optional[EngineError]) -> None:
    """Map engine errors to HTTP status codes."""
    if error is None:
        return
    if isinstance(error, ValidationError):
        status_code, label = status.HTTP_422_UNPROCESSABLE_ENTITY, "validation_error"
    elif isinstance(error, NotFoundError):
        status_code, label = status.HTTP_404_NOT_FOUND, "not_found"
    else:
        status_code, label = status.HTTP_503_SERVICE_UNAVAILABLE, "storage_error"
    raise HTTPException(
        status_code=status_code,
        detail={"error": label, "message": error.message, "context": error.context},
    )


def notify_data_changed(request: Request) -> None:
    """Ask the running scheduler for a debounced scan, if there is one."""
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is not None and scheduler.running:
        scheduler.trigger()


def to_payment_response(outcome: PaymentOutcome) -> PaymentResponse:
    if outcome.sequencing_violation:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "sequencing_violation",
                "message": "Earlier installments of this sale must be paid first",
                "installment_id": outcome.installment_id,
            },
        )
    raise_for_error(outcome.error)
    return PaymentResponse(
        installment_id=outcome.installment_id,
        status=outcome.status.value,
        rescheduled=RescheduledResponse(**outcome.rescheduled.to_dict()) if outcome.rescheduled else None,
    )


def to_installment_response(installment: Installment) -> InstallmentResponse:
    return InstallmentResponse(
        id=installment.id,
        sale_id=installment.sale_id,
        installment_number=installment.installment_number,
        due_date=installment.due_date,
        original_due_date=installment.original_due_date,
        amount=installment.amount,
        paid_amount=installment.paid_amount,
        balance=installment.balance,
        late_fee=installment.late_fee,
        status=installment.status.value,
        paid_date=installment.paid_date,
    )


def to_scan_report_response(report: ScanReport) -> ScanReportResponse:
    def entries(items):
        return [
            ScanEntryResponse(key=e.key, reason=e.reason, notification_id=e.notification_id)
            for e in items
        ]

    return ScanReportResponse(
        created=entries(report.created),
        skipped=entries(report.skipped),
        failed=entries(report.failed),
        purged=report.purged,
    )


@router.post("/installments/{installment_id}/payments")
async def record_payment(
    installment_id: int,
    payload: PaymentCreate,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    logging_port: LoggingAdapter = Depends(get_logging_port),
    metrics_port: MetricsAdapter = Depends(get_metrics_port),
) -> PaymentResponse:
    """
    Record a full or partial payment on an installment.

    - Earlier installments of the sale must already be paid (409 otherwise)
    - On a monthly sale, paying an installment in full moves the next pending
      installment to the month after the payment; the move is returned in `rescheduled`
    """
    srv = RecordPaymentService(
        installment_repo=InstallmentRepoSqlalchemy(db),
        metrics_port=metrics_port,
        logging_port=logging_port,
    )
    outcome = await srv.execute(
        installment_id=installment_id,
        amount=payload.amount,
        payment_method=payload.payment_method,
        reference=payload.reference,
        paid_date=payload.paid_date,
    )
    response = to_payment_response(outcome)
    notify_data_changed(request)
    return response


@router.post("/installments/{installment_id}/mark-paid")
async def mark_installment_paid(
    installment_id: int,
    request: Request,
    payload: Optional[MarkPaidRequest] = None,
    db: AsyncSession = Depends(get_db_session),
    logging_port: LoggingAdapter = Depends(get_logging_port),
    metrics_port: MetricsAdapter = Depends(get_metrics_port),
) -> PaymentResponse:
    """Pay the remaining balance of an installment in one go."""
    srv = MarkInstallmentPaidService(
        installment_repo=InstallmentRepoSqlalchemy(db),
        metrics_port=metrics_port,
        logging_port=logging_port,
    )
    outcome = await srv.execute(installment_id, paid_date=payload.paid_date if payload else None)
    response = to_payment_response(outcome)
    notify_data_changed(request)
    return response


@router.post("/installments/{installment_id}/payments/{payment_id}/revert")
async def revert_payment(
    installment_id: int,
    payment_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    logging_port: LoggingAdapter = Depends(get_logging_port),
) -> InstallmentResponse:
    srv = RevertPaymentService(installment_repo=InstallmentRepoSqlalchemy(db), logging_port=logging_port)
    result = await srv.execute(installment_id, payment_id)
    raise_for_error(result.error)
    notify_data_changed(request)
    return to_installment_response(result.data)


@router.post("/installments/{installment_id}/late-fee")
async def apply_late_fee(
    installment_id: int,
    payload: LateFeeRequest,
    db: AsyncSession = Depends(get_db_session),
    logging_port: LoggingAdapter = Depends(get_logging_port),
) -> InstallmentResponse:
    srv = ApplyLateFeeService(installment_repo=InstallmentRepoSqlalchemy(db), logging_port=logging_port)
    result = await srv.execute(installment_id, payload.fee)
    raise_for_error(result.error)
    return to_installment_response(result.data)


@router.post("/notifications/scan")
async def scan_notifications(
    db: AsyncSession = Depends(get_db_session),
    logging_port: LoggingAdapter = Depends(get_logging_port),
    metrics_port: MetricsAdapter = Depends(get_metrics_port),
) -> ScanReportResponse:
    """
    Run one notification pass now: overdue, upcoming and low-stock alerts,
    then the retention purge. Alerts already raised today are not repeated.
    """
    srv = NotificationScanService(
        installment_repo=InstallmentRepoSqlalchemy(db),
        product_repo=ProductRepoSqlalchemy(db),
        notification_repo=NotificationRepoSqlalchemy(db),
        metrics_port=metrics_port,
        logging_port=logging_port,
    )
    report = await srv.execute()
    return to_scan_report_response(report)


@router.post("/sales/low-stock-check")
async def check_low_stock_after_sale(
    payload: SaleItemsRequest,
    db: AsyncSession = Depends(get_db_session),
    logging_port: LoggingAdapter = Depends(get_logging_port),
    metrics_port: MetricsAdapter = Depends(get_metrics_port),
) -> ScanReportResponse:
    """Raise low-stock alerts for the products of a completed sale."""
    srv = CheckLowStockAfterSaleService(
        product_repo=ProductRepoSqlalchemy(db),
        notification_repo=NotificationRepoSqlalchemy(db),
        metrics_port=metrics_port,
        logging_port=logging_port,
    )
    report = await srv.execute([item.model_dump() for item in payload.items])
    return to_scan_report_response(report)


@router.get("/notifications")
async def list_notifications(limit: int = 50, db: AsyncSession = Depends(get_db_session)) -> list[NotificationResponse]:
    """Latest notifications that have not been archived, oldest first."""
    srv = NotificationInboxService(NotificationRepoSqlalchemy(db))
    records = await srv.list_notifications(limit)
    return [
        NotificationResponse(
            id=r.id,
            key=r.key,
            message=r.message,
            type=r.type.value,
            created_at=r.created_at,
            read=r.read,
            archived=r.archived,
        )
        for r in records
    ]


@router.post("/notifications/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_notification_read(notification_id: int, db: AsyncSession = Depends(get_db_session)) -> Response:
    await NotificationInboxService(NotificationRepoSqlalchemy(db)).mark_read(notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/notifications/{notification_id}/archive", status_code=status.HTTP_204_NO_CONTENT)
async def archive_notification(notification_id: int, db: AsyncSession = Depends(get_db_session)) -> Response:
    await NotificationInboxService(NotificationRepoSqlalchemy(db)).archive(notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/notifications/archived")
async def purge_archived_notifications(
    db: AsyncSession = Depends(get_db_session),
    logging_port: LoggingAdapter = Depends(get_logging_port),
) -> PurgeResponse:
    srv = NotificationInboxService(NotificationRepoSqlalchemy(db), logging_port=logging_port)
    return PurgeResponse(purged=await srv.purge_archived())
