"""
Notification keys, record validation and message formatting.

A notification key identifies "this alert condition for this entity" and is
the only link a NotificationRecord keeps to its source installment or
product.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from numbers import Number
from typing import Any, Optional

from domain.entities import Installment, NotificationKind, Product
from domain.exceptions import NotificationValidationError
from domain.utils.date_utils import to_iso

KEY_SEPARATOR = "|"


def overdue_key(installment_id: int) -> str:
    return f"{NotificationKind.OVERDUE.value}{KEY_SEPARATOR}{installment_id}"


def upcoming_key(installment_id: int) -> str:
    return f"{NotificationKind.UPCOMING.value}{KEY_SEPARATOR}{installment_id}"


def low_stock_key(product_id: int) -> str:
    return f"{NotificationKind.STOCK_LOW.value}{KEY_SEPARATOR}{product_id}"


@dataclass(frozen=True)
class ParsedKey:
    type: str
    id: int


def parse_key(key: str) -> Optional[ParsedKey]:
    """Split ``"<type>|<id>"``; anything else yields None."""
    parts = key.split(KEY_SEPARATOR)
    if len(parts) != 2:
        return None
    try:
        return ParsedKey(type=parts[0], id=int(parts[1]))
    except ValueError:
        return None


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


class NotificationValidator:
    """
    Fail-fast checks on records entering a notification scan.

    Violations raise NotificationValidationError so the scan can skip the
    single offending record and carry on with the rest.
    """

    @staticmethod
    def validate_installment(installment: Any) -> Any:
        if installment is None:
            raise NotificationValidationError("Installment data is required")
        context = {"installment_id": _field(installment, "id")}
        if not _is_int(_field(installment, "id")):
            raise NotificationValidationError("Valid installment ID is required", context)
        balance = _field(installment, "balance")
        if not _is_number(balance) or balance <= 0:
            raise NotificationValidationError("Valid installment balance is required", context)
        customer_name = _field(installment, "customer_name")
        if not isinstance(customer_name, str) or not customer_name.strip():
            raise NotificationValidationError("Customer name is required", context)
        if not _field(installment, "due_date"):
            raise NotificationValidationError("Due date is required", context)
        return installment

    @staticmethod
    def validate_product(product: Any) -> Any:
        if product is None:
            raise NotificationValidationError("Product data is required")
        context = {"product_id": _field(product, "id")}
        if not _is_int(_field(product, "id")):
            raise NotificationValidationError("Valid product ID is required", context)
        name = _field(product, "name")
        if not isinstance(name, str) or not name.strip():
            raise NotificationValidationError("Product name is required", context)
        if not _is_number(_field(product, "stock")):
            raise NotificationValidationError("Valid product stock is required", context)
        return product

    @staticmethod
    def validate_sale_items(items: Any) -> list[dict]:
        """Normalize the items of a completed sale to product_id/quantity dicts."""
        if not isinstance(items, (list, tuple)):
            raise NotificationValidationError("Sale items must be a list")
        validated = []
        for index, item in enumerate(items):
            product_id = _field(item, "product_id")
            quantity = _field(item, "quantity")
            if not _is_int(product_id):
                raise NotificationValidationError(f"Invalid product_id in item {index}", {"index": index})
            if not _is_number(quantity) or quantity <= 0:
                raise NotificationValidationError(f"Invalid quantity in item {index}", {"index": index})
            validated.append({"product_id": product_id, "quantity": quantity})
        return validated


def _amount(value: Any) -> str:
    return str(Decimal(str(value)).quantize(Decimal("0.01")))


class NotificationFormatter:
    """Plain-text alert messages. Display formatting is left to the host."""

    @staticmethod
    def overdue_message(installment: Installment) -> str:
        return (
            f"Overdue installment - {installment.customer_name} - "
            f"{to_iso(installment.due_date)} - {_amount(installment.balance)}"
        )

    @staticmethod
    def upcoming_message(installment: Installment) -> str:
        return (
            f"Installment due soon - {installment.customer_name} - "
            f"{to_iso(installment.due_date)} - {_amount(installment.balance)}"
        )

    @staticmethod
    def low_stock_message(product: Product) -> str:
        unit = "unit" if product.stock == 1 else "units"
        message = f"Low stock: {product.name} - {product.stock} {unit} left"
        if product.category:
            message = f"{message} - {product.category}"
        return message
