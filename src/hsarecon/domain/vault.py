"""Vault growth projections for deferred HSA reimbursements.

Money that could be reimbursed today but is left in the HSA keeps growing
until the planned reimbursement date. Growth is compounded annually with a
fractional exponent: ``amount * (1 + rate) ** years``.
"""

import logging
import math
from datetime import date, datetime
from decimal import Decimal
from numbers import Real
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from hsarecon.domain.allocation import invoiced_total_cents
from hsarecon.domain.entities import (
    Invoice,
    ReimbursementStrategy,
    VaultExpense,
    VaultProjection,
    VaultSummary,
)
from hsarecon.errors import (
    InvalidReturnRateError,
    ValidationError,
    growth_out_of_range,
    invalid_return_rate,
    negative_amount,
)
from hsarecon.utils.money import from_cents, round_money, to_cents

logger = logging.getLogger(__name__)

DEFAULT_RETURN_RATE = 0.08

VAULTED_STRATEGIES = frozenset(
    {ReimbursementStrategy.MEDIUM, ReimbursementStrategy.VAULT}
)

STRATEGY_LABELS = {
    ReimbursementStrategy.IMMEDIATE: "Immediate (< 1 year)",
    ReimbursementStrategy.MEDIUM: "Medium-term (1-3 years)",
    ReimbursementStrategy.VAULT: "Long-term Vault (3+ years)",
}

STRATEGY_HORIZONS = {
    ReimbursementStrategy.IMMEDIATE: relativedelta(months=6),
    ReimbursementStrategy.MEDIUM: relativedelta(years=2),
    ReimbursementStrategy.VAULT: relativedelta(years=5),
}


def validate_return_rate(rate: float) -> float:
    """Reject return rates that are not numbers or would wipe out the principal.

    Negative rates model losses and are allowed down to, but not
    including, -100%.
    """
    if isinstance(rate, bool) or not isinstance(rate, (Real, Decimal)):
        raise ValidationError(f"Annual return rate must be numeric, got {rate!r}")
    rate = float(rate)
    if not math.isfinite(rate):
        raise ValidationError(f"Annual return rate must be finite, got {rate!r}")
    if rate <= -1:
        raise InvalidReturnRateError(invalid_return_rate(rate))
    return rate


def growth_factor(rate: float, years: float) -> Decimal:
    """Compound growth multiplier ``(1 + rate) ** years`` as a Decimal.

    Raises:
        ValidationError: If the multiplier overflows a float
    """
    try:
        return Decimal(str((1 + rate) ** years))
    except OverflowError:
        raise ValidationError(growth_out_of_range(rate, years))


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def elapsed_years(start: date, end: Optional[date]) -> float:
    """Years between an expense and its planned reimbursement.

    Whole calendar years count as exactly one year each, so a ten-year
    anniversary is 10.0 regardless of leap days. The remainder is the
    fraction of the anniversary year that has passed, measured against
    that year's real length (365 or 366 days). No planned date, or one on
    or before the expense, means no time invested.
    """
    if end is None:
        return 0.0
    start = _as_date(start)
    end = _as_date(end)
    if end <= start:
        return 0.0
    whole_years = relativedelta(end, start).years
    anniversary = start + relativedelta(years=whole_years)
    year_length = (anniversary + relativedelta(years=1) - anniversary).days
    return whole_years + (end - anniversary).days / year_length


def expense_elapsed_years(expense: VaultExpense) -> float:
    return elapsed_years(expense.date, expense.planned_reimbursement_date)


def _amount_cents(expense: VaultExpense) -> int:
    cents = to_cents(expense.amount)
    if cents < 0:
        raise ValidationError(negative_amount("amount", expense.id))
    return cents


def _projected_exact(expense: VaultExpense, rate: float) -> Decimal:
    amount = from_cents(_amount_cents(expense))
    years = expense_elapsed_years(expense)
    if years == 0:
        return amount
    return amount * growth_factor(rate, years)


def project_value(
    expense: VaultExpense, annual_return_rate: float = DEFAULT_RETURN_RATE
) -> Decimal:
    """Projected value of a vaulted expense at its planned reimbursement date.

    Args:
        expense: Vaulted expense
        annual_return_rate: Assumed annual return, e.g. 0.08 for 8%

    Returns:
        Projected value rounded to the cent; equals the amount when there
        is no planned date

    Raises:
        InvalidReturnRateError: If the rate is -100% or lower
    """
    rate = validate_return_rate(annual_return_rate)
    return round_money(_projected_exact(expense, rate))


def project_expense(
    expense: VaultExpense, annual_return_rate: float = DEFAULT_RETURN_RATE
) -> VaultProjection:
    """Build a per-expense projection record."""
    return VaultProjection(
        expense_id=expense.id,
        amount=round_money(expense.amount),
        elapsed_years=expense_elapsed_years(expense),
        projected_value=project_value(expense, annual_return_rate),
    )


def is_vaulted(expense: VaultExpense) -> bool:
    return ReimbursementStrategy.parse(expense.reimbursement_strategy) in VAULTED_STRATEGIES


def summarize(
    expenses: Iterable[VaultExpense],
    annual_return_rate: float = DEFAULT_RETURN_RATE,
    today: Optional[date] = None,
) -> VaultSummary:
    """Aggregate vaulted expenses into a portfolio summary.

    Only medium-term and vault strategies count. Undated expenses count
    toward the total and the average with zero years invested.

    Args:
        expenses: Candidate expenses of any strategy
        annual_return_rate: Assumed annual return
        today: Reference date for the next reminder (defaults to today)

    Returns:
        VaultSummary

    Raises:
        InvalidReturnRateError: If the rate is -100% or lower
    """
    rate = validate_return_rate(annual_return_rate)
    today = _as_date(today) if today is not None else date.today()
    vaulted = [expense for expense in expenses if is_vaulted(expense)]

    total_cents = sum(_amount_cents(expense) for expense in vaulted)
    growth = sum(
        (_projected_exact(expense, rate) - from_cents(_amount_cents(expense))
         for expense in vaulted),
        Decimal("0"),
    )
    years = [expense_elapsed_years(expense) for expense in vaulted]
    upcoming = [
        _as_date(expense.planned_reimbursement_date)
        for expense in vaulted
        if expense.planned_reimbursement_date is not None
        and _as_date(expense.planned_reimbursement_date) >= today
    ]

    logger.debug(
        "Summarized %d vaulted expense(s) at rate %.4f", len(vaulted), rate
    )
    return VaultSummary(
        total_in_vault=from_cents(total_cents),
        projected_growth=round_money(growth),
        average_years_invested=sum(years) / len(years) if years else 0.0,
        next_reminder=min(upcoming) if upcoming else None,
        expense_count=len(vaulted),
    )


def strategy_label(strategy) -> str:
    """Display label for a reimbursement strategy."""
    try:
        return STRATEGY_LABELS[ReimbursementStrategy.parse(strategy)]
    except ValidationError:
        return "Unknown"


def default_reimbursement_date(strategy, expense_date: date) -> date:
    """Suggested reimbursement date for a strategy.

    Immediate is six months out, medium-term two years, vault five years.
    """
    return _as_date(expense_date) + STRATEGY_HORIZONS[ReimbursementStrategy.parse(strategy)]


def vault_expense_from_invoice(invoice: Invoice) -> VaultExpense:
    """View an invoice as a vault expense, using its invoiced total."""
    return VaultExpense(
        id=invoice.id,
        date=invoice.date,
        amount=from_cents(invoiced_total_cents(invoice)),
        reimbursement_strategy=ReimbursementStrategy.parse(invoice.reimbursement_strategy),
        planned_reimbursement_date=invoice.planned_reimbursement_date,
        card_payoff_months=invoice.card_payoff_months,
        investment_notes=invoice.investment_notes,
        vendor=invoice.vendor,
        category=invoice.category,
    )
