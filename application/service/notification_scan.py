import time
from datetime import date, datetime, timedelta
from typing import Optional

from application.service.alert_emitter import AlertEmitter
from application.service.retrying_service import RetryingService
from domain.config import (
    InstallmentAlertConfig,
    RetentionConfig,
    StockConfig,
    get_alert_config,
    get_retention_config,
    get_stock_config,
)
from domain.entities import InstallmentStatus, NotificationKind
from domain.interfaces import (
    InstallmentRepository,
    LoggingPort,
    MetricsPort,
    NotificationRepository,
    ProductRepository,
    bind_or_noop,
)
from domain.results import ScanEntry, ScanReport


class NotificationScanService(RetryingService):
    def __init__(
        self,
        installment_repo: InstallmentRepository,
        product_repo: ProductRepository,
        notification_repo: NotificationRepository,
        metrics_port: Optional[MetricsPort] = None,
        logging_port: Optional[LoggingPort] = None,
        alert_config: Optional[InstallmentAlertConfig] = None,
        stock_config: Optional[StockConfig] = None,
        retention_config: Optional[RetentionConfig] = None,
        max_retries: Optional[int] = None,
        retry_delay_ms: Optional[int] = None,
    ):
        """
        Initialize the notification scan.
        
        Args:
            installment_repo: Source of overdue and upcoming installments
            product_repo: Source of low-stock products
            notification_repo: Notification persistence (dedup lookups and creation)
            metrics_port: Metrics port (optional)
            logging_port: Logging port for structured logging (optional)
            alert_config: Upcoming window and cap (defaults to env config)
            stock_config: Low-stock threshold and cooldown (defaults to env config)
            retention_config: Retention window for archived records (defaults to env config)
            max_retries: Attempts per storage call (defaults to SchedulerConfig)
            retry_delay_ms: Linear backoff base (defaults to SchedulerConfig)
        """
        super().__init__(max_retries, retry_delay_ms)
        self.installment_repo = installment_repo
        self.product_repo = product_repo
        self.notification_repo = notification_repo
        self.logging_port = logging_port
        self.alert_config = alert_config or get_alert_config()
        self.stock_config = stock_config or get_stock_config()
        self.retention_config = retention_config or get_retention_config()
        self.emitter = AlertEmitter(
            notification_repo,
            metrics_port=metrics_port,
            stock_config=self.stock_config,
            max_retries=self.max_retries,
            retry_delay_ms=self.retry_delay_ms,
        )

    async def execute(self, today: Optional[date] = None, now: Optional[datetime] = None) -> ScanReport:
        """
        Run one scan pass.

        Keys are evaluated one at a time. A record failing validation is
        skipped, a storage failure is recorded as failed; neither stops the
        pass. The next pass re-evaluates whatever did not go through.
        """
        now = now or datetime.now()
        today = today or now.date()
        log = bind_or_noop(self.logging_port, step="notification_scan", scan_date=today.isoformat())
        report = ScanReport()
        start_time = time.time()

        log.info("notification_scan_started")

        # Step 1: overdue installments
        overdue = await self._call(lambda: self.installment_repo.get_overdue(today), "get_overdue_installments", log)
        if overdue.success:
            for installment in overdue.data:
                if installment.effective_status(today) != InstallmentStatus.OVERDUE:
                    continue
                await self.emitter.emit_installment_alert(installment, NotificationKind.OVERDUE, report, today, log)
        else:
            report.failed.append(ScanEntry(key=f"{NotificationKind.OVERDUE.value}|*", reason=str(overdue.error)))

        # Step 2: installments due within the upcoming window
        upcoming = await self._call(
            lambda: self.installment_repo.get_upcoming(
                today,
                self.alert_config.upcoming_days_ahead,
                self.alert_config.max_upcoming_to_process,
            ),
            "get_upcoming_installments",
            log,
        )
        if upcoming.success:
            for installment in upcoming.data:
                await self.emitter.emit_installment_alert(installment, NotificationKind.UPCOMING, report, today, log)
        else:
            report.failed.append(ScanEntry(key=f"{NotificationKind.UPCOMING.value}|*", reason=str(upcoming.error)))

        # Step 3: low stock
        products = await self._call(
            lambda: self.product_repo.get_low_stock(self.stock_config.low_stock_threshold),
            "get_low_stock_products",
            log,
        )
        if products.success:
            for product in products.data:
                await self.emitter.emit_low_stock_alert(product, report, today, now, log)
        else:
            report.failed.append(ScanEntry(key=f"{NotificationKind.STOCK_LOW.value}|*", reason=str(products.error)))

        # Step 4: retention
        if self.retention_config.retention_days > 0:
            cutoff = now - timedelta(days=self.retention_config.retention_days)
            purged = await self._call(
                lambda: self.notification_repo.purge_archived_older_than(cutoff),
                "purge_archived_notifications",
                log,
            )
            report.purged = purged.success
            if purged.success and purged.data:
                log.info("archived_notifications_purged", count=purged.data, cutoff=cutoff.isoformat())

        log.info(
            "notification_scan_finished",
            duration_ms=round((time.time() - start_time) * 1000, 2),
            created=len(report.created),
            skipped=len(report.skipped),
            failed=len(report.failed),
        )
        return report
