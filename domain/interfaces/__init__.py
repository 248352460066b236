from .installment_repo import InstallmentRepository
from .product_repo import ProductRepository
from .notification_repo import NotificationRepository
from .metrics_port import MetricsPort
from .logging_port import LoggingPort, BoundLogger, NoOpLogger, bind_or_noop

__all__ = ["InstallmentRepository", "ProductRepository", "NotificationRepository", "MetricsPort", "LoggingPort", "BoundLogger", "NoOpLogger", "bind_or_noop"]
