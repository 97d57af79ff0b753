"""Payment status labels for display."""

from typing import Iterable, Optional

from hsarecon.domain.entities import AllocationBreakdown, PaymentStatus

STATUS_LABELS = {
    PaymentStatus.FULLY_HSA_PAID: "Paid via HSA",
    PaymentStatus.PARTIALLY_PAID_MIXED: "Paid (HSA + Out of Pocket)",
    PaymentStatus.UNPAID_WITH_BALANCE: "Unpaid",
    PaymentStatus.FULLY_PAID_OTHER_ONLY: "Paid Out of Pocket",
    PaymentStatus.NO_CHARGE: "No Charge",
}

OVERPAID_LABEL = "Overpaid"


def status_of(breakdown: AllocationBreakdown) -> PaymentStatus:
    """Map a breakdown to its display status.

    The buckets can satisfy more than one rule at once, so the rules are
    checked in a fixed order and the first match wins.
    """
    total = breakdown.total_invoiced
    hsa = breakdown.paid_via_hsa
    other = breakdown.paid_via_other
    unpaid = breakdown.unpaid_balance

    if total > 0 and hsa == total:
        return PaymentStatus.FULLY_HSA_PAID
    if unpaid > 0:
        return PaymentStatus.UNPAID_WITH_BALANCE
    if other > 0 and unpaid == 0 and hsa == 0:
        return PaymentStatus.FULLY_PAID_OTHER_ONLY
    if hsa > 0 and other > 0:
        return PaymentStatus.PARTIALLY_PAID_MIXED
    return PaymentStatus.NO_CHARGE


def status_label(breakdown: AllocationBreakdown) -> str:
    """Human label for a breakdown, e.g. ``Partially Paid (60%)``.

    A bill that falls through to NO_CHARGE only because it was overpaid
    is labelled ``Overpaid``; its status stays NO_CHARGE.
    """
    status = status_of(breakdown)
    if status is PaymentStatus.UNPAID_WITH_BALANCE and breakdown.total_paid > 0:
        percent = breakdown.total_paid / breakdown.total_invoiced * 100
        return f"Partially Paid ({percent:.0f}%)"
    if status is PaymentStatus.NO_CHARGE and breakdown.is_overpaid:
        return OVERPAID_LABEL
    return STATUS_LABELS[status]


def filter_breakdowns(
    breakdowns: Iterable[AllocationBreakdown],
    statuses: Optional[Iterable[PaymentStatus]] = None,
    hide_settled: bool = False,
    only_eligible: bool = False,
) -> list[AllocationBreakdown]:
    """Filter breakdowns for list views.

    Args:
        breakdowns: Breakdowns to filter
        statuses: Keep only these statuses (None keeps all)
        hide_settled: Drop breakdowns with no unpaid balance and nothing
            left to reimburse
        only_eligible: Keep only breakdowns with a reimbursable amount

    Returns:
        Filtered list in the original order
    """
    wanted = (
        {PaymentStatus.parse(s) for s in statuses} if statuses is not None else None
    )
    result = []
    for breakdown in breakdowns:
        if wanted is not None and status_of(breakdown) not in wanted:
            continue
        if (
            hide_settled
            and breakdown.unpaid_balance == 0
            and breakdown.hsa_reimbursement_eligible == 0
        ):
            continue
        if only_eligible and breakdown.hsa_reimbursement_eligible <= 0:
            continue
        result.append(breakdown)
    return result
