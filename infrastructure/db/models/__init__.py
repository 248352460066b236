"""
Database models package.
Import Base from here or from base.py directly.
"""
from infrastructure.db.models.base import Base

# Import all models to ensure they're registered in the same registry
# This must be done after Base is created
from infrastructure.db.models.customers import CustomerModel
from infrastructure.db.models.sales import SaleModel
from infrastructure.db.models.installments import InstallmentModel
from infrastructure.db.models.payments import PaymentModel
from infrastructure.db.models.products import ProductModel
from infrastructure.db.models.notifications import NotificationModel

__all__ = ["Base", "CustomerModel", "SaleModel", "InstallmentModel", "PaymentModel", "ProductModel", "NotificationModel"]
