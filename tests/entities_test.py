from datetime import date, datetime
from decimal import Decimal

import pytest

from domain.entities import Customer, InstallmentStatus, NotificationRecord, NotificationType, Sale
from domain.utils.date_utils import add_months_capped, days_in_month, parse_iso_date, to_iso
from factories import make_installment


def test_installment_defaults_original_due_date():
    installment = make_installment(1, date(2025, 1, 10))
    assert installment.original_due_date == date(2025, 1, 10)
    assert installment.anchor_date == date(2025, 1, 10)


def test_effective_status_overdue_after_due_date():
    installment = make_installment(1, date(2025, 1, 10))
    assert installment.effective_status(date(2025, 1, 10)) == InstallmentStatus.PENDING
    assert installment.effective_status(date(2025, 1, 11)) == InstallmentStatus.OVERDUE


def test_effective_status_keeps_paid_and_cancelled():
    paid = make_installment(1, date(2025, 1, 10), InstallmentStatus.PAID, paid_date=date(2025, 1, 10))
    cancelled = make_installment(2, date(2025, 1, 10), InstallmentStatus.CANCELLED)
    assert paid.effective_status(date(2025, 6, 1)) == InstallmentStatus.PAID
    assert cancelled.effective_status(date(2025, 6, 1)) == InstallmentStatus.CANCELLED


def test_customer_total_owed():
    sale_a = Sale(id=1, customer_id=1, created_at=date(2025, 1, 1), installments=[
        make_installment(1, date(2025, 1, 10), InstallmentStatus.PAID, paid_date=date(2025, 1, 10)),
        make_installment(2, date(2025, 2, 10)),
        make_installment(3, date(2025, 3, 10), InstallmentStatus.OVERDUE),
    ])
    sale_b = Sale(id=2, customer_id=1, created_at=date(2025, 1, 1), installments=[
        make_installment(1, date(2025, 1, 10), InstallmentStatus.CANCELLED, sale_id=2, id=10),
        make_installment(2, date(2025, 2, 10), sale_id=2, id=11, amount=Decimal("40")),
    ])
    customer = Customer(id=1, name="Ana Perez", sales=[sale_a, sale_b])
    assert customer.total_owed == Decimal("240")


def test_sale_ordered_installments():
    sale = Sale(id=1, customer_id=1, created_at=date(2025, 1, 1), installments=[
        make_installment(2, date(2025, 2, 10)),
        make_installment(1, date(2025, 1, 10)),
    ])
    assert [i.installment_number for i in sale.ordered_installments()] == [1, 2]


def test_notification_flags_follow_timestamps():
    record = NotificationRecord(id=1, key="overdue|1", message="m", type=NotificationType.ALERT, created_at=datetime(2025, 1, 1))
    assert not record.read and not record.archived
    record.read_at = datetime(2025, 1, 2)
    assert record.read


class TestDateUtils:
    def test_parse_iso_date_reads_civil_prefix(self):
        assert parse_iso_date("2025-01-05T23:30:00.000Z") == date(2025, 1, 5)
        assert parse_iso_date(datetime(2025, 1, 5, 23, 30)) == date(2025, 1, 5)
        assert parse_iso_date(None) is None

    def test_parse_iso_date_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_iso_date("05/01/2025")
        with pytest.raises(ValueError):
            parse_iso_date("2025-02-30")

    def test_to_iso(self):
        assert to_iso(date(2025, 2, 3)) == "2025-02-03"

    def test_days_in_month(self):
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2025, 2) == 28
        assert days_in_month(2025, 12) == 31

    def test_add_months_capped(self):
        assert add_months_capped(2025, 1, 1, 31) == date(2025, 2, 28)
        assert add_months_capped(2025, 12, 1, 15) == date(2026, 1, 15)
        assert add_months_capped(2025, 11, 3, 31) == date(2026, 2, 28)
