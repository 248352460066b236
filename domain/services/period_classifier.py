"""
Period Classifier

Infers the payment cadence of a sale from the due dates of its installments.
Installments may have been edited by hand, so this is a heuristic: it never
raises on irregular spacing.
"""
from typing import Sequence

from domain.entities import Installment, PeriodType

BIWEEKLY_DAYS = frozenset({1, 15})
WEEKLY_MAX_AVG_DELTA_DAYS = 10
# Mean delta assumed when there is only one due date
DEFAULT_DELTA_DAYS = 30.0


def infer_period_type(installments: Sequence[Installment]) -> PeriodType:
    if not installments:
        return PeriodType.MONTHLY

    days_of_month = {inst.due_date.day for inst in installments}
    if days_of_month <= BIWEEKLY_DAYS:
        return PeriodType.BIWEEKLY

    due_dates = sorted(inst.due_date for inst in installments)
    deltas = [(later - earlier).days for earlier, later in zip(due_dates, due_dates[1:])]
    avg_delta = sum(deltas) / len(deltas) if deltas else DEFAULT_DELTA_DAYS

    return PeriodType.WEEKLY if avg_delta <= WEEKLY_MAX_AVG_DELTA_DAYS else PeriodType.MONTHLY
