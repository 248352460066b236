"""
Sequential payment rule.

Installments of a sale must be paid front to back: an installment can only
be marked paid once every installment with a lower number is paid.
"""
from typing import Iterable

from domain.entities import Installment, InstallmentStatus


def is_sequential_payment(installments_of_sale: Iterable[Installment], candidate_number: int) -> bool:
    """
    Check whether installment ``candidate_number`` may be paid now.

    Args:
        installments_of_sale: Every installment of one sale, in any order
        candidate_number: installment_number the caller wants to mark paid

    Returns:
        False if any lower-numbered installment is not paid, True otherwise
    """
    return not any(
        inst.status != InstallmentStatus.PAID and (inst.installment_number or 0) < candidate_number
        for inst in installments_of_sale
    )
