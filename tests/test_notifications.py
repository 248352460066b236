"""
Tests for notification keys, record validation and message formatting.
"""
from datetime import date
from decimal import Decimal

import pytest

from domain.exceptions import NotificationValidationError, ValidationError
from domain.services import (
    NotificationFormatter,
    NotificationValidator,
    low_stock_key,
    overdue_key,
    parse_key,
    upcoming_key,
)
from domain.services.notifications import ParsedKey
from factories import make_installment, make_product


class TestKeys:
    def test_key_formats(self):
        assert overdue_key(42) == "overdue|42"
        assert upcoming_key(7) == "upcoming|7"
        assert low_stock_key(3) == "stock_low|3"

    def test_parse_key(self):
        assert parse_key("overdue|42") == ParsedKey(type="overdue", id=42)
        assert parse_key(low_stock_key(9)) == ParsedKey(type="stock_low", id=9)

    @pytest.mark.parametrize("key", ["overdue", "overdue|abc", "a|b|c", ""])
    def test_parse_key_rejects_malformed(self, key):
        assert parse_key(key) is None


class TestValidateInstallment:
    def test_accepts_complete_installment(self):
        installment = make_installment(1, date(2025, 1, 10))
        assert NotificationValidator.validate_installment(installment) is installment

    def test_accepts_mapping(self):
        record = {"id": 5, "balance": 12.5, "customer_name": "Luis", "due_date": "2025-01-10"}
        assert NotificationValidator.validate_installment(record) == record

    def test_missing_customer_name(self):
        installment = make_installment(1, date(2025, 1, 10), customer_name="  ")
        with pytest.raises(NotificationValidationError, match="Customer name"):
            NotificationValidator.validate_installment(installment)

    def test_zero_balance(self):
        installment = make_installment(1, date(2025, 1, 10))
        installment.balance = Decimal("0")
        with pytest.raises(NotificationValidationError, match="balance"):
            NotificationValidator.validate_installment(installment)

    def test_non_integer_id(self):
        with pytest.raises(NotificationValidationError, match="ID"):
            NotificationValidator.validate_installment(
                {"id": "5", "balance": 10, "customer_name": "Luis", "due_date": "2025-01-10"}
            )

    def test_missing_due_date(self):
        with pytest.raises(NotificationValidationError, match="Due date"):
            NotificationValidator.validate_installment({"id": 5, "balance": 10, "customer_name": "Luis"})

    def test_none(self):
        with pytest.raises(NotificationValidationError):
            NotificationValidator.validate_installment(None)

    def test_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            NotificationValidator.validate_installment({"id": True})
        assert exc_info.value.code == "VALIDATION_ERROR"


class TestValidateProduct:
    def test_accepts_product(self):
        product = make_product(stock=0)
        assert NotificationValidator.validate_product(product) is product

    def test_rejects_blank_name(self):
        with pytest.raises(NotificationValidationError, match="name"):
            NotificationValidator.validate_product(make_product(name=""))

    def test_rejects_missing_stock(self):
        with pytest.raises(NotificationValidationError, match="stock"):
            NotificationValidator.validate_product({"id": 1, "name": "Pen", "stock": None})


class TestValidateSaleItems:
    def test_normalizes_items(self):
        items = NotificationValidator.validate_sale_items([{"product_id": 1, "quantity": 2, "price": 5}])
        assert items == [{"product_id": 1, "quantity": 2}]

    def test_rejects_non_list(self):
        with pytest.raises(NotificationValidationError):
            NotificationValidator.validate_sale_items({"product_id": 1, "quantity": 1})

    def test_rejects_bad_quantity(self):
        with pytest.raises(NotificationValidationError, match="item 1"):
            NotificationValidator.validate_sale_items(
                [{"product_id": 1, "quantity": 1}, {"product_id": 2, "quantity": 0}]
            )


class TestFormatter:
    def test_overdue_message(self):
        installment = make_installment(1, date(2025, 1, 10), amount=Decimal("150.5"))
        assert NotificationFormatter.overdue_message(installment) == "Overdue installment - Ana Perez - 2025-01-10 - 150.50"

    def test_upcoming_message(self):
        installment = make_installment(2, date(2025, 2, 10))
        assert NotificationFormatter.upcoming_message(installment) == "Installment due soon - Ana Perez - 2025-02-10 - 100.00"

    def test_low_stock_message(self):
        assert NotificationFormatter.low_stock_message(make_product(stock=1)) == "Low stock: Notebook - 1 unit left - Stationery"
        product = make_product(stock=0)
        product.category = None
        assert NotificationFormatter.low_stock_message(product) == "Low stock: Notebook - 0 units left"
