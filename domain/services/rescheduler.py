"""
Rescheduler

After a payment on a monthly sale, the pending installments are moved so the
first one falls one calendar month after the most recent payment and each
later one a month after the previous, all pinned to the anchor day of the
installment that was paid last. Paying early or late therefore never makes
the schedule drift away from "the 10th of every month".

All arithmetic is done on civil dates; no timestamps are involved.
"""
from datetime import date
from typing import Optional, Sequence

from domain.entities import Installment, InstallmentStatus
from domain.results import RescheduleResult
from domain.utils.date_utils import add_months_capped, to_iso


def _anchor(installments_of_sale: Sequence[Installment]) -> Optional[tuple[date, int]]:
    """Paid date and anchor day of the installment paid last, if any."""
    paid = [i for i in installments_of_sale if i.status == InstallmentStatus.PAID and i.paid_date]
    if not paid:
        return None
    # Ties on paid_date go to the highest installment number
    last_paid = max(paid, key=lambda i: (i.paid_date, i.installment_number))
    return last_paid.paid_date, last_paid.anchor_date.day


def _pending_in_order(installments_of_sale: Sequence[Installment]) -> list[Installment]:
    pending = [
        i for i in installments_of_sale
        if i.status not in (InstallmentStatus.PAID, InstallmentStatus.CANCELLED) and i.id is not None
    ]
    return sorted(pending, key=lambda i: i.installment_number)


def schedule_next_pending_monthly(installments_of_sale: Sequence[Installment]) -> Optional[RescheduleResult]:
    """
    Compute the new due date of the next pending installment of a sale.

    The caller must pass a fresh read of the sale's installments: a payment on
    another installment of the same sale changes the anchor.

    Args:
        installments_of_sale: Every installment of one sale, in any order

    Returns:
        RescheduleResult with the installment id and the YYYY-MM-DD due date,
        or None when nothing is paid yet or nothing is left to pay.
        The current due date of that installment is not consulted.
    """
    anchor = _anchor(installments_of_sale)
    pending = _pending_in_order(installments_of_sale)
    if anchor is None or not pending:
        return None
    paid_on, anchor_day = anchor
    new_due = add_months_capped(paid_on.year, paid_on.month, 1, anchor_day)
    return RescheduleResult(next_pending_id=pending[0].id, new_due_iso=to_iso(new_due))


def schedule_all_pending_monthly(installments_of_sale: Sequence[Installment]) -> list[RescheduleResult]:
    """
    Compute new due dates for every pending installment of a sale.

    The k-th pending installment (by number, starting at 1) lands k months
    after the month of the last payment, on the anchor day capped to the
    month length. The first entry always equals schedule_next_pending_monthly.

    Returns:
        One RescheduleResult per pending installment, in installment order;
        empty when nothing is paid yet or nothing is left to pay.
    """
    anchor = _anchor(installments_of_sale)
    if anchor is None:
        return []
    paid_on, anchor_day = anchor
    return [
        RescheduleResult(
            next_pending_id=installment.id,
            new_due_iso=to_iso(add_months_capped(paid_on.year, paid_on.month, offset, anchor_day)),
        )
        for offset, installment in enumerate(_pending_in_order(installments_of_sale), start=1)
    ]
