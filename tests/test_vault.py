"""Tests for vault growth projections."""

from datetime import date
from decimal import Decimal

import pytest

from hsarecon.domain.entities import Invoice, ReimbursementStrategy, VaultExpense
from hsarecon.domain.vault import (
    default_reimbursement_date,
    elapsed_years,
    project_expense,
    project_value,
    strategy_label,
    summarize,
    validate_return_rate,
    vault_expense_from_invoice,
)
from hsarecon.errors import InvalidReturnRateError, ValidationError


def _expense(
    expense_id="V-1",
    amount="1000.00",
    start=date(2023, 1, 1),
    planned=None,
    strategy=ReimbursementStrategy.VAULT,
):
    return VaultExpense(
        id=expense_id,
        date=start,
        amount=Decimal(amount),
        reimbursement_strategy=strategy,
        planned_reimbursement_date=planned,
    )


def test_ten_year_projection():
    expense = _expense(planned=date(2033, 1, 1))

    assert elapsed_years(expense.date, expense.planned_reimbursement_date) == 10.0
    assert project_value(expense, 0.08) == Decimal("2158.92")

    summary = summarize([expense], 0.08, today=date(2023, 1, 1))
    assert summary.projected_growth == Decimal("1158.92")
    assert summary.total_in_vault == Decimal("1000.00")
    assert summary.average_years_invested == 10.0


@pytest.mark.parametrize("rate", [0.08, 0.0, -0.5, 0.25])
def test_zero_growth_boundary(rate):
    same_day = _expense(planned=date(2023, 1, 1))
    undated = _expense(planned=None)

    assert project_value(same_day, rate) == Decimal("1000.00")
    assert project_value(undated, rate) == Decimal("1000.00")


def test_elapsed_years_partial_year():
    assert elapsed_years(date(2023, 1, 1), date(2023, 7, 2)) == 182 / 365
    assert elapsed_years(date(2023, 1, 1), date(2025, 1, 31)) == 2 + 30 / 365


def test_elapsed_years_leap_year_remainder():
    # 2024 is a leap year: the day before the second anniversary is 365 of 366 days
    assert elapsed_years(date(2023, 1, 1), date(2024, 12, 31)) == 1 + 365 / 366
    assert elapsed_years(date(2023, 1, 1), date(2024, 12, 31)) < 2.0
    assert elapsed_years(date(2023, 1, 1), date(2025, 1, 1)) == 2.0


def test_elapsed_years_increases_day_by_day():
    start = date(2023, 3, 15)
    ends = [date(2024, 2, 27), date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]
    values = [elapsed_years(start, end) for end in ends]
    assert values == sorted(values)
    assert len(set(values)) == len(values)


def test_elapsed_years_without_growth_period():
    assert elapsed_years(date(2023, 1, 1), None) == 0.0
    assert elapsed_years(date(2023, 1, 1), date(2022, 1, 1)) == 0.0


def test_negative_return_rate_models_loss():
    expense = _expense(planned=date(2024, 1, 1))
    assert project_value(expense, -0.1) == Decimal("900.00")


@pytest.mark.parametrize("rate", [-1, -1.0, -1.5])
def test_return_rate_at_or_below_minus_one_is_rejected(rate):
    with pytest.raises(InvalidReturnRateError, match="-100%"):
        project_value(_expense(planned=date(2030, 1, 1)), rate)
    with pytest.raises(InvalidReturnRateError):
        summarize([], rate)


@pytest.mark.parametrize("rate", ["0.08", None, True])
def test_non_numeric_return_rate_is_rejected(rate):
    with pytest.raises(ValidationError):
        validate_return_rate(rate)


@pytest.mark.parametrize("rate", [1e300, 1e10])
def test_runaway_growth_fails_loudly(rate):
    expense = _expense(planned=date(2033, 1, 1))
    with pytest.raises(ValidationError):
        project_value(expense, rate)
    with pytest.raises(ValidationError):
        summarize([expense], rate, today=date(2024, 1, 1))


@pytest.mark.parametrize("rate", [float("inf"), float("nan")])
def test_non_finite_return_rate_is_rejected(rate):
    with pytest.raises(ValidationError, match="finite"):
        validate_return_rate(rate)


def test_validate_return_rate_accepts_decimal():
    assert validate_return_rate(Decimal("0.05")) == 0.05


def test_project_expense_record():
    projection = project_expense(_expense(amount="250.00", planned=date(2033, 1, 1)), 0.08)

    assert projection.expense_id == "V-1"
    assert projection.projected_value == Decimal("539.73")
    assert projection.growth == Decimal("289.73")
    assert projection.to_dict()["projectedValue"] == Decimal("539.73")


def test_next_reminder_is_earliest_upcoming():
    expenses = [
        _expense("V-1", planned=date(2026, 1, 1)),
        _expense("V-2", planned=date(2025, 6, 1), strategy=ReimbursementStrategy.MEDIUM),
    ]
    summary = summarize(expenses, today=date(2025, 1, 1))
    assert summary.next_reminder == date(2025, 6, 1)


def test_next_reminder_skips_past_dates():
    expenses = [
        _expense("V-1", planned=date(2024, 6, 1)),
        _expense("V-2", planned=date(2025, 1, 1)),
    ]
    assert summarize(expenses, today=date(2025, 1, 1)).next_reminder == date(2025, 1, 1)
    assert summarize(expenses, today=date(2025, 1, 2)).next_reminder is None


def test_summary_only_counts_medium_and_vault():
    expenses = [
        _expense("V-1", amount="100.00", planned=date(2025, 1, 1)),
        _expense("V-2", amount="200.00", strategy=ReimbursementStrategy.MEDIUM),
        _expense(
            "V-3",
            amount="400.00",
            planned=date(2023, 6, 1),
            strategy=ReimbursementStrategy.IMMEDIATE,
        ),
    ]
    summary = summarize(expenses, 0.08, today=date(2023, 1, 1))

    assert summary.expense_count == 2
    assert summary.total_in_vault == Decimal("300.00")
    # Undated V-2 counts toward the average with zero years
    assert summary.average_years_invested == 1.0
    assert summary.projected_growth == Decimal("16.64")
    assert summary.next_reminder == date(2025, 1, 1)


def test_empty_summary():
    summary = summarize([], today=date(2025, 1, 1))

    assert summary.total_in_vault == 0
    assert summary.projected_growth == 0
    assert summary.average_years_invested == 0.0
    assert summary.next_reminder is None
    assert summary.expense_count == 0
    assert summary.to_dict() == {
        "totalInVault": Decimal("0"),
        "projectedGrowth": Decimal("0"),
        "averageYearsInvested": 0.0,
        "nextReminder": None,
        "expenseCount": 0,
    }


def test_projected_growth_rounds_once():
    expenses = [_expense(f"V-{i}", amount="0.01", planned=date(2024, 1, 1)) for i in range(10)]
    # Each expense grows by 0.0008, which rounds to zero individually
    summary = summarize(expenses, 0.08, today=date(2023, 1, 1))
    assert summary.projected_growth == Decimal("0.01")


def test_strategy_label():
    assert strategy_label(ReimbursementStrategy.IMMEDIATE) == "Immediate (< 1 year)"
    assert strategy_label("medium") == "Medium-term (1-3 years)"
    assert strategy_label("vault") == "Long-term Vault (3+ years)"
    assert strategy_label("someday") == "Unknown"


def test_default_reimbursement_date():
    assert default_reimbursement_date("immediate", date(2024, 1, 31)) == date(2024, 7, 31)
    assert default_reimbursement_date("medium", date(2024, 3, 10)) == date(2026, 3, 10)
    assert default_reimbursement_date(ReimbursementStrategy.VAULT, date(2024, 2, 29)) == date(
        2029, 2, 28
    )


def test_vault_expense_from_invoice():
    invoice = Invoice(
        id="INV-7",
        date=date(2024, 1, 1),
        amount=Decimal("80.00"),
        reimbursement_strategy="vault",
        planned_reimbursement_date=date(2030, 1, 1),
        card_payoff_months=6,
        investment_notes="index fund",
        vendor="Clinic",
    )
    expense = vault_expense_from_invoice(invoice)

    assert expense.amount == Decimal("80.00")
    assert expense.reimbursement_strategy is ReimbursementStrategy.VAULT
    assert expense.planned_reimbursement_date == date(2030, 1, 1)
    assert expense.card_payoff_months == 6
    assert expense.investment_notes == "index fund"


def test_negative_vault_amount_fails_loudly():
    with pytest.raises(ValidationError, match="cannot be negative"):
        project_value(_expense(amount="-1.00"), 0.08)
