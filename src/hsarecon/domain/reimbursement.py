"""Reimbursement eligibility classification."""

import logging
from dataclasses import replace
from typing import Iterable, Sequence

from hsarecon.domain.eligibility import is_date_eligible, partition_accounts
from hsarecon.domain.entities import (
    ZERO,
    AllocationBreakdown,
    DataWarning,
    EligibilityMode,
    HSAAccount,
    Invoice,
    OutsideAccountWindow,
)

logger = logging.getLogger(__name__)


def window_check_applies(
    mode: EligibilityMode, accounts: Sequence[HSAAccount]
) -> bool:
    """Decide whether account windows gate eligibility for this call.

    In WINDOW_WHEN_ACCOUNTS mode any supplied account record switches the
    check on, including malformed ones.
    """
    if mode is EligibilityMode.FLAG_ONLY:
        return False
    if mode is EligibilityMode.STRICT:
        return True
    return len(accounts) > 0


def _merge_warnings(
    existing: tuple[DataWarning, ...], extra: Iterable[DataWarning]
) -> tuple[DataWarning, ...]:
    merged = list(existing)
    for warning in extra:
        if warning not in merged:
            merged.append(warning)
    return tuple(merged)


def classify(
    invoice: Invoice,
    breakdown: AllocationBreakdown,
    accounts: Iterable[HSAAccount] = (),
    mode: EligibilityMode = EligibilityMode.WINDOW_WHEN_ACCOUNTS,
) -> AllocationBreakdown:
    """Fill in the reimbursement fields of an allocation breakdown.

    Out-of-pocket payments not yet reimbursed are recoverable; any unpaid
    balance is a strategic opportunity (pay by card now, reimburse from the
    HSA later). Both are zero for invoices that are not HSA eligible, and
    both move to ``ineligible_amount`` when the windows apply and the
    invoice date is outside every valid account window.

    Args:
        invoice: Invoice the breakdown was allocated from
        breakdown: Output of ``allocate``
        accounts: The user's HSA accounts
        mode: Eligibility strictness level

    Returns:
        New AllocationBreakdown; the input is not modified
    """
    mode = EligibilityMode.parse(mode)
    accounts = list(accounts)
    valid, invalid = partition_accounts(accounts)
    warnings = _merge_warnings(breakdown.warnings, invalid)

    if not invoice.is_hsa_eligible:
        return replace(
            breakdown,
            hsa_reimbursement_eligible=ZERO,
            already_paid_recoverable=ZERO,
            unpaid_strategic_opportunity=ZERO,
            ineligible_amount=ZERO,
            warnings=warnings,
        )

    recoverable = breakdown.unreimbursed_other
    strategic = breakdown.unpaid_balance
    eligible = recoverable + strategic

    if not window_check_applies(mode, accounts) or is_date_eligible(
        invoice.date, valid
    ):
        return replace(
            breakdown,
            hsa_reimbursement_eligible=eligible,
            already_paid_recoverable=recoverable,
            unpaid_strategic_opportunity=strategic,
            ineligible_amount=ZERO,
            warnings=warnings,
        )

    logger.debug(
        "Invoice %s dated %s is outside all %d valid account window(s)",
        invoice.id,
        invoice.date,
        len(valid),
    )
    if eligible > 0:
        warnings = _merge_warnings(
            warnings,
            [
                OutsideAccountWindow(
                    invoice_id=invoice.id,
                    expense_date=invoice.date,
                    excluded_amount=eligible,
                )
            ],
        )
    return replace(
        breakdown,
        hsa_reimbursement_eligible=ZERO,
        already_paid_recoverable=ZERO,
        unpaid_strategic_opportunity=ZERO,
        ineligible_amount=eligible,
        warnings=warnings,
    )
