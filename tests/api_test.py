"""
HTTP surface tests.

Repositories are patched in the router module so no database is touched.
Tests verify the status mapping: validation -> 422, not found -> 404,
out-of-order payment -> 409, storage failure -> 503.
"""
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from app.main import app
from domain.entities import InstallmentStatus, NotificationRecord, NotificationType
from domain.exceptions import InstallmentNotFoundError, PaymentNotFoundError
from infrastructure.db.database import get_db_session
from factories import make_installment, make_product


async def no_db_session():
    yield None


@pytest.fixture
def client():
    """Test client for FastAPI app."""
    app.dependency_overrides[get_db_session] = no_db_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def installment_repo():
    with patch("app.routers.v1.InstallmentRepoSqlalchemy") as repo_class:
        repo = AsyncMock()
        repo_class.return_value = repo
        yield repo


@pytest.fixture
def notification_repo():
    with patch("app.routers.v1.NotificationRepoSqlalchemy") as repo_class:
        repo = AsyncMock()
        repo.exists_today_with_key.return_value = False
        repo.get_latest_by_key.return_value = None
        repo.purge_archived_older_than.return_value = 0
        repo_class.return_value = repo
        yield repo


@pytest.fixture
def product_repo():
    with patch("app.routers.v1.ProductRepoSqlalchemy") as repo_class:
        repo = AsyncMock()
        repo.get_low_stock.return_value = []
        repo_class.return_value = repo
        yield repo


@pytest.fixture(autouse=True)
def no_retry_delay(monkeypatch):
    monkeypatch.setenv("SCHEDULER_RETRY_DELAY_MS", "0")
    monkeypatch.setenv("SCHEDULER_MAX_RETRIES", "2")
    from domain.config import reload_config
    reload_config()
    yield
    monkeypatch.undo()
    reload_config()


def monthly_schedule():
    return [
        make_installment(1, date(2025, 1, 10)),
        make_installment(2, date(2025, 2, 10)),
    ]


class TestPayments:
    def test_record_payment_reschedules_next_installment(self, client, installment_repo):
        schedule = monthly_schedule()
        paid = make_installment(1, date(2025, 1, 10), InstallmentStatus.PAID, paid_date=date(2025, 1, 5))
        installment_repo.get_installment.return_value = schedule[0]
        installment_repo.get_installments_by_sale.side_effect = [schedule, [paid, schedule[1]]]
        installment_repo.record_payment.return_value = paid
        installment_repo.get_sale.return_value = None

        response = client.post("/v1/installments/1/payments", json={"amount": "100", "paid_date": "2025-01-05"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "installment_id": 1,
            "status": "paid",
            "rescheduled": {"nextPendingId": 2, "newDueISO": "2025-02-10"},
        }

    def test_out_of_order_payment_returns_409(self, client, installment_repo):
        schedule = monthly_schedule()
        installment_repo.get_installment.return_value = schedule[1]
        installment_repo.get_installments_by_sale.return_value = schedule

        response = client.post("/v1/installments/2/payments", json={"amount": "100"})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"]["error"] == "sequencing_violation"

    def test_amount_above_balance_returns_422(self, client, installment_repo):
        schedule = monthly_schedule()
        installment_repo.get_installment.return_value = schedule[0]
        installment_repo.get_installments_by_sale.return_value = schedule

        response = client.post("/v1/installments/1/payments", json={"amount": "250"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"]["error"] == "validation_error"

    def test_unknown_installment_returns_404(self, client, installment_repo):
        installment_repo.get_installment.return_value = None
        response = client.post("/v1/installments/77/mark-paid")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_storage_failure_returns_503(self, client, installment_repo):
        installment_repo.get_installment.side_effect = OSError("database is locked")
        response = client.post("/v1/installments/1/payments", json={"amount": "10"})
        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["detail"]["error"] == "storage_error"

    def test_revert_payment(self, client, installment_repo):
        installment_repo.revert_payment.return_value = make_installment(1, date(2025, 1, 10))
        response = client.post("/v1/installments/1/payments/5/revert")
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["status"] == "pending"
        assert body["due_date"] == "2025-01-10"

    def test_revert_unknown_payment_returns_404(self, client, installment_repo):
        installment_repo.revert_payment.side_effect = PaymentNotFoundError("Payment 5 not found")
        response = client.post("/v1/installments/1/payments/5/revert")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_late_fee(self, client, installment_repo):
        installment_repo.apply_late_fee.return_value = make_installment(1, date(2025, 1, 10), amount=Decimal("112.50"))
        response = client.post("/v1/installments/1/late-fee", json={"fee": "12.50"})
        assert response.status_code == status.HTTP_200_OK
        installment_repo.apply_late_fee.assert_awaited_once_with(1, Decimal("12.50"))

    def test_negative_late_fee_is_rejected(self, client, installment_repo):
        response = client.post("/v1/installments/1/late-fee", json={"fee": "-1"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        installment_repo.apply_late_fee.assert_not_awaited()

    def test_late_fee_on_missing_installment(self, client, installment_repo):
        installment_repo.apply_late_fee.side_effect = InstallmentNotFoundError("Installment 1 not found")
        response = client.post("/v1/installments/1/late-fee", json={"fee": "5"})
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestNotifications:
    def test_scan(self, client, installment_repo, notification_repo, product_repo):
        installment_repo.get_overdue.return_value = [make_installment(1, date(2020, 1, 10), id=3)]
        installment_repo.get_upcoming.return_value = []
        notification_repo.create_notification.return_value = 17

        response = client.post("/v1/notifications/scan")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["created"] == [{"key": "overdue|3", "reason": None, "notification_id": 17}]
        assert body["failed"] == []

    def test_low_stock_check(self, client, notification_repo, product_repo):
        product_repo.get_product.return_value = make_product(id=4, stock=1)
        notification_repo.create_notification.return_value = 8

        response = client.post("/v1/sales/low-stock-check", json={"items": [{"product_id": 4, "quantity": 2}]})

        assert response.status_code == status.HTTP_200_OK
        assert [e["key"] for e in response.json()["created"]] == ["stock_low|4"]

    def test_low_stock_check_rejects_empty_items(self, client, notification_repo, product_repo):
        response = client.post("/v1/sales/low-stock-check", json={"items": []})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_inbox(self, client, notification_repo):
        notification_repo.list_notifications.return_value = [
            NotificationRecord(
                id=1, key="overdue|3", message="Overdue installment", type=NotificationType.ALERT,
                created_at=datetime(2025, 3, 10, 9, 0), read_at=datetime(2025, 3, 10, 9, 5),
            )
        ]
        notification_repo.purge_archived.return_value = 2

        listed = client.get("/v1/notifications", params={"limit": 10})
        assert listed.status_code == status.HTTP_200_OK
        assert listed.json()[0]["read"] is True
        assert listed.json()[0]["archived"] is False
        notification_repo.list_notifications.assert_awaited_once_with(10)

        assert client.post("/v1/notifications/1/read").status_code == status.HTTP_204_NO_CONTENT
        notification_repo.mark_read.assert_awaited_once_with(1)
        assert client.post("/v1/notifications/1/archive").status_code == status.HTTP_204_NO_CONTENT
        notification_repo.archive.assert_awaited_once_with(1)

        purged = client.delete("/v1/notifications/archived")
        assert purged.json() == {"purged": 2}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client):
    response = client.get("/metrics")
    assert response.status_code == status.HTTP_200_OK
    assert "payments_recorded_total" in response.text
