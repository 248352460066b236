from datetime import date, datetime
from typing import Any, Optional

from application.service.alert_emitter import AlertEmitter
from application.service.retrying_service import RetryingService
from domain.config import StockConfig, get_stock_config
from domain.exceptions import NotificationValidationError
from domain.interfaces import LoggingPort, MetricsPort, NotificationRepository, ProductRepository, bind_or_noop
from domain.results import ScanEntry, ScanReport
from domain.services import NotificationValidator


class CheckLowStockAfterSaleService(RetryingService):
    """Run the low-stock rule for the products of a sale that was just completed."""

    def __init__(
        self,
        product_repo: ProductRepository,
        notification_repo: NotificationRepository,
        metrics_port: Optional[MetricsPort] = None,
        logging_port: Optional[LoggingPort] = None,
        stock_config: Optional[StockConfig] = None,
        max_retries: Optional[int] = None,
        retry_delay_ms: Optional[int] = None,
    ):
        super().__init__(max_retries, retry_delay_ms)
        self.product_repo = product_repo
        self.logging_port = logging_port
        self.stock_config = stock_config or get_stock_config()
        self.emitter = AlertEmitter(
            notification_repo,
            metrics_port=metrics_port,
            stock_config=self.stock_config,
            max_retries=self.max_retries,
            retry_delay_ms=self.retry_delay_ms,
        )

    async def execute(self, sale_items: Any, now: Optional[datetime] = None) -> ScanReport:
        now = now or datetime.now()
        today: date = now.date()
        log = bind_or_noop(self.logging_port, step="check_low_stock_after_sale")
        report = ScanReport()

        try:
            items = NotificationValidator.validate_sale_items(sale_items)
        except NotificationValidationError as e:
            log.warning("sale_items_rejected", error=e.message, context=e.context)
            report.skipped.append(ScanEntry(key="sale", reason=e.message))
            return report

        # A product sold on several lines is checked once
        product_ids = list(dict.fromkeys(item["product_id"] for item in items))
        for product_id in product_ids:
            fetched = await self._call(lambda: self.product_repo.get_product(product_id), "get_product", log)
            if not fetched.success:
                report.failed.append(ScanEntry(key=f"stock_low|{product_id}", reason=str(fetched.error)))
                continue
            product = fetched.data
            if product is None or product.stock > self.stock_config.low_stock_threshold:
                continue
            await self.emitter.emit_low_stock_alert(product, report, today, now, log)

        return report
