from domain.results import ScanReport
from application.service.notification_scan import NotificationScanService
from infrastructure.db.database import AsyncSessionLocal
from infrastructure.db.repositories.installment_repo_sqlalchemy import InstallmentRepoSqlalchemy
from infrastructure.db.repositories.notification_repo_sqlalchemy import NotificationRepoSqlalchemy
from infrastructure.db.repositories.product_repo_sqlalchemy import ProductRepoSqlalchemy
from infrastructure.logging.logging_adapter import LoggingAdapter
from infrastructure.metrics.metrics_adapter import MetricsAdapter


def get_logging_port() -> LoggingAdapter:
    return LoggingAdapter()


def get_metrics_port() -> MetricsAdapter:
    return MetricsAdapter()


async def run_notification_scan() -> ScanReport:
    """One scheduled scan pass on a session of its own."""
    async with AsyncSessionLocal() as session:
        srv = NotificationScanService(
            installment_repo=InstallmentRepoSqlalchemy(session),
            product_repo=ProductRepoSqlalchemy(session),
            notification_repo=NotificationRepoSqlalchemy(session),
            metrics_port=get_metrics_port(),
            logging_port=get_logging_port(),
        )
        return await srv.execute()
