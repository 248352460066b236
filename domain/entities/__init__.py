# import
from .installment import Installment, InstallmentStatus
from .sale import Sale, PeriodType
from .customer import Customer
from .product import Product
from .payment import Payment, PaymentStatus
from .notification import NotificationRecord, NotificationType, NotificationKind

__all__ = [
    "Installment", "InstallmentStatus", "Sale", "PeriodType", "Customer", "Product",
    "Payment", "PaymentStatus", "NotificationRecord", "NotificationType", "NotificationKind",
]
