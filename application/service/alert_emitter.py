"""
Raises a single alert: validate the source record, derive its key, ask the
dedup engine, persist. Every outcome lands in the ScanReport; nothing is
raised, so a bad or failing record never stops the caller's loop.
"""
from datetime import date, datetime
from typing import Optional

from application.service.retrying_service import RetryingService
from domain.config import StockConfig, get_stock_config
from domain.entities import Installment, NotificationKind, NotificationType, Product
from domain.exceptions import NotificationValidationError
from domain.interfaces import BoundLogger, MetricsPort, NotificationRepository
from domain.results import ScanEntry, ScanReport
from domain.services import (
    NotificationDedupService,
    NotificationFormatter,
    NotificationValidator,
    compute_stock_alert_cooldown,
    low_stock_key,
    overdue_key,
    upcoming_key,
)


class AlertEmitter(RetryingService):
    def __init__(
        self,
        notification_repo: NotificationRepository,
        metrics_port: Optional[MetricsPort] = None,
        stock_config: Optional[StockConfig] = None,
        max_retries: Optional[int] = None,
        retry_delay_ms: Optional[int] = None,
    ):
        super().__init__(max_retries, retry_delay_ms)
        self.notification_repo = notification_repo
        self.dedup = NotificationDedupService(notification_repo)
        self.metrics_port = metrics_port
        self.stock_config = stock_config or get_stock_config()

    def _failure(self, report: ScanReport, kind: NotificationKind, entry: ScanEntry, reason: str) -> None:
        if reason == "validation":
            report.skipped.append(entry)
        else:
            report.failed.append(entry)
        if self.metrics_port:
            self.metrics_port.increment_scan_failure(kind=kind.value, reason=reason)

    async def _persist(
        self,
        report: ScanReport,
        kind: NotificationKind,
        key: str,
        message: str,
        notification_type: NotificationType,
        log: BoundLogger,
    ) -> None:
        created = await self._call(
            lambda: self.notification_repo.create_notification(message, notification_type, key),
            "create_notification",
            log,
        )
        if not created.success:
            log.error("scan_key_failed", key=key, error=str(created.error))
            self._failure(report, kind, ScanEntry(key=key, reason=str(created.error)), "storage")
            return
        report.created.append(ScanEntry(key=key, notification_id=created.data))
        log.info("notification_created", key=key, notification_id=created.data, type=notification_type.value)
        if self.metrics_port:
            self.metrics_port.increment_notifications_created(kind=kind.value)

    async def emit_installment_alert(
        self,
        installment: Installment,
        kind: NotificationKind,
        report: ScanReport,
        today: date,
        log: BoundLogger,
    ) -> None:
        try:
            NotificationValidator.validate_installment(installment)
        except NotificationValidationError as e:
            log.warning("scan_record_skipped", kind=kind.value, installment_id=getattr(installment, "id", None), error=e.message)
            self._failure(report, kind, ScanEntry(key=f"{kind.value}|{getattr(installment, 'id', None)}", reason=e.message), "validation")
            return

        if kind == NotificationKind.OVERDUE:
            key = overdue_key(installment.id)
            message = NotificationFormatter.overdue_message(installment)
            notification_type = NotificationType.ALERT
        else:
            key = upcoming_key(installment.id)
            message = NotificationFormatter.upcoming_message(installment)
            notification_type = NotificationType.REMINDER

        eligible = await self._call(lambda: self.dedup.should_notify(key, today), "exists_today_with_key", log)
        if not eligible.success:
            log.error("scan_key_failed", key=key, error=str(eligible.error))
            self._failure(report, kind, ScanEntry(key=key, reason=str(eligible.error)), "storage")
            return
        if not eligible.data:
            log.debug("notification_deduplicated", key=key)
            return

        await self._persist(report, kind, key, message, notification_type, log)

    async def emit_low_stock_alert(
        self,
        product: Product,
        report: ScanReport,
        today: date,
        now: datetime,
        log: BoundLogger,
    ) -> None:
        kind = NotificationKind.STOCK_LOW
        try:
            NotificationValidator.validate_product(product)
        except NotificationValidationError as e:
            log.warning("scan_record_skipped", kind=kind.value, product_id=getattr(product, "id", None), error=e.message)
            self._failure(report, kind, ScanEntry(key=f"{kind.value}|{getattr(product, 'id', None)}", reason=e.message), "validation")
            return

        key = low_stock_key(product.id)

        async def check():
            if not await self.dedup.should_notify(key, today):
                return False, "already notified today"
            latest = await self.notification_repo.get_latest_by_key(key)
            cooldown = compute_stock_alert_cooldown(
                latest,
                product_updated_at=product.updated_at,
                now=now,
                cooldown_hours=self.stock_config.notification_cooldown_hours,
            )
            return cooldown["should_notify"], cooldown["explanation"]

        eligible = await self._call(check, "check_stock_alert", log)
        if not eligible.success:
            log.error("scan_key_failed", key=key, error=str(eligible.error))
            self._failure(report, kind, ScanEntry(key=key, reason=str(eligible.error)), "storage")
            return
        should_notify, explanation = eligible.data
        if not should_notify:
            log.debug("notification_deduplicated", key=key, reason=explanation)
            return

        message = NotificationFormatter.low_stock_message(product)
        await self._persist(report, kind, key, message, NotificationType.REMINDER, log)
