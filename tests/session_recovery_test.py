"""
Storage failures on a real aiosqlite session.

A statement hook makes selected INSERTs fail the way a locked database does,
so the shared AsyncSession goes through a failed flush and must be usable by
the retry and by every later key of the same pass.
"""
import sqlite3
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import event

from application.service.notification_scan import NotificationScanService
from application.service.record_payment import RecordPaymentService
from domain.config import InstallmentAlertConfig, RetentionConfig, StockConfig
from domain.entities import InstallmentStatus
from infrastructure.db.repositories.installment_repo_sqlalchemy import InstallmentRepoSqlalchemy
from infrastructure.db.repositories.notification_repo_sqlalchemy import NotificationRepoSqlalchemy
from infrastructure.db.repositories.product_repo_sqlalchemy import ProductRepoSqlalchemy
from factories import seed_sale

# Stored records carry the wall-clock creation time, so the pass runs on the real date
TODAY = date.today()
NOW = datetime.combine(TODAY, datetime.min.time()).replace(hour=9)


@pytest.fixture
def fail_inserts(db_engine):
    """Make the next ``times`` INSERTs into ``table`` raise a locked-database error."""
    hooks = []

    def install(table: str, times: int = 1) -> dict:
        state = {"left": times, "failed": 0}

        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            if statement.startswith(f"INSERT INTO {table}") and state["left"] > 0:
                state["left"] -= 1
                state["failed"] += 1
                raise sqlite3.OperationalError("database is locked")

        event.listen(db_engine.sync_engine, "before_cursor_execute", before_cursor_execute)
        hooks.append(before_cursor_execute)
        return state

    yield install
    for hook in hooks:
        event.remove(db_engine.sync_engine, "before_cursor_execute", hook)


def scan_service(db_session, max_retries=3):
    return NotificationScanService(
        installment_repo=InstallmentRepoSqlalchemy(db_session),
        product_repo=ProductRepoSqlalchemy(db_session),
        notification_repo=NotificationRepoSqlalchemy(db_session),
        alert_config=InstallmentAlertConfig(upcoming_days_ahead=3, max_upcoming_to_process=50),
        stock_config=StockConfig(low_stock_threshold=1, notification_cooldown_hours=24),
        retention_config=RetentionConfig(retention_days=90),
        max_retries=max_retries,
        retry_delay_ms=0,
    )


async def seed_two_overdue(db_session) -> tuple[int, int]:
    _, (first,) = await seed_sale(db_session, [TODAY - timedelta(days=9)], customer_name="Ana Perez")
    _, (second,) = await seed_sale(db_session, [TODAY - timedelta(days=8)], customer_name="Luis Gomez")
    return first, second


@pytest.mark.asyncio
async def test_failed_insert_is_retried_on_same_session(db_session, fail_inserts):
    first, second = await seed_two_overdue(db_session)
    state = fail_inserts("notifications", times=1)

    report = await scan_service(db_session).execute(today=TODAY, now=NOW)

    assert state["failed"] == 1
    assert report.failed == []
    assert report.created_keys == [f"overdue|{first}", f"overdue|{second}"]
    stored = await NotificationRepoSqlalchemy(db_session).list_notifications()
    assert [n.key for n in stored] == [f"overdue|{first}", f"overdue|{second}"]


@pytest.mark.asyncio
async def test_exhausted_key_does_not_poison_later_keys(db_session, fail_inserts):
    first, second = await seed_two_overdue(db_session)
    fail_inserts("notifications", times=2)

    report = await scan_service(db_session, max_retries=2).execute(today=TODAY, now=NOW)

    assert [e.key for e in report.failed] == [f"overdue|{first}"]
    assert report.created_keys == [f"overdue|{second}"]
    assert report.purged is True

    # The next pass picks up the key that failed
    retry_pass = await scan_service(db_session).execute(today=TODAY, now=NOW)
    assert retry_pass.created_keys == [f"overdue|{first}"]


@pytest.mark.asyncio
async def test_payment_commit_failure_is_retried(db_session, fail_inserts):
    sale_id, ids = await seed_sale(db_session, [date(2025, 1, 10), date(2025, 2, 10), date(2025, 3, 10)])
    state = fail_inserts("payment_transactions", times=1)
    repo = InstallmentRepoSqlalchemy(db_session)

    outcome = await RecordPaymentService(repo, max_retries=3, retry_delay_ms=0).execute(
        ids[0], "100", paid_date="2025-01-05"
    )

    assert state["failed"] == 1
    assert outcome.success
    assert outcome.status == InstallmentStatus.PAID
    assert outcome.rescheduled is not None
    payments = await repo.get_payments_by_sale(sale_id)
    assert [p.amount for p in payments] == [Decimal("100")]
    assert (await repo.get_installment(ids[1])).due_date == date(2025, 2, 10)
