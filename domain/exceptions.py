"""Domain-specific exceptions"""
from typing import Any, Optional


class EngineError(Exception):
    """Base exception for the installment engine"""

    code = "ENGINE_ERROR"

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ValidationError(EngineError):
    """Malformed installment, product or sale data. Never retried."""

    code = "VALIDATION_ERROR"


class NotificationValidationError(ValidationError):
    """Record handed to the notification engine is incomplete"""

    pass


class PaymentAmountError(ValidationError):
    """Payment amount is not positive or exceeds the remaining balance"""

    pass


class StorageError(EngineError):
    """A storage collaborator call failed"""

    code = "STORAGE_ERROR"

    def __init__(
        self,
        message: str,
        context: Optional[dict[str, Any]] = None,
        original: Optional[BaseException] = None,
    ):
        super().__init__(message, context)
        self.original = original


class NotFoundError(EngineError):
    """Referenced entity does not exist"""

    code = "NOT_FOUND"


class InstallmentNotFoundError(NotFoundError):
    pass


class PaymentNotFoundError(NotFoundError):
    pass
