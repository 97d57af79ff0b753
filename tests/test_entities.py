"""Tests for domain entities and their serialized forms."""

from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

import pytest

from hsarecon.domain.entities import (
    AllocationBreakdown,
    InvalidAccountWindow,
    Invoice,
    OutsideAccountWindow,
    OverpaymentDetected,
    PaymentSource,
    PaymentStatus,
    UnknownWarning,
    VaultProjection,
    VaultSummary,
    warning_to_dict,
)
from hsarecon.errors import ValidationError


def test_invoiced_total_prefers_total_amount():
    invoice = Invoice(
        id="INV-1", date=date(2024, 1, 1), total_amount=Decimal("10"), amount=Decimal("99")
    )
    assert invoice.invoiced_total == Decimal("10")

    legacy = Invoice(id="INV-2", date=date(2024, 1, 1), amount=Decimal("99"))
    assert legacy.invoiced_total == Decimal("99")

    zero = Invoice(
        id="INV-3", date=date(2024, 1, 1), total_amount=Decimal("0"), amount=Decimal("99")
    )
    assert zero.invoiced_total == Decimal("0")


def test_records_are_immutable(sample_invoice):
    with pytest.raises(FrozenInstanceError):
        sample_invoice.total_amount = Decimal("1")


def test_choice_parse():
    assert PaymentSource.parse(" HSA_Direct ") is PaymentSource.HSA_DIRECT
    assert PaymentStatus.parse(PaymentStatus.NO_CHARGE) is PaymentStatus.NO_CHARGE
    with pytest.raises(ValidationError, match="Unknown PaymentSource 'venmo'"):
        PaymentSource.parse("venmo")


def test_breakdown_to_dict_keys():
    breakdown = AllocationBreakdown(
        invoice_id="INV-1",
        total_invoiced=Decimal("500.00"),
        paid_via_hsa=Decimal("200.00"),
        paid_via_other=Decimal("100.00"),
        unpaid_balance=Decimal("200.00"),
    )
    data = breakdown.to_dict()

    assert list(data) == [
        "invoiceId",
        "totalInvoiced",
        "paidViaHSA",
        "paidViaOther",
        "unpaidBalance",
        "hsaReimbursementEligible",
        "alreadyPaidRecoverable",
        "unpaidStrategicOpportunity",
        "potentialRewards",
        "overpaidAmount",
        "ineligibleAmount",
        "warnings",
    ]
    assert data["paidViaHSA"] == Decimal("200.00")
    assert breakdown.total_paid == Decimal("300.00")
    assert not breakdown.is_overpaid


def test_warning_to_dict():
    warning = InvalidAccountWindow(
        account_id="HSA-1", opened_date=date(2022, 1, 1), closed_date=date(2021, 1, 1)
    )
    data = warning_to_dict(warning)

    assert data["kind"] == "invalid_account_window"
    assert data["accountId"] == "HSA-1"
    assert data["closedDate"] == "2021-01-01"
    assert "excluded from eligibility checks" in data["message"]


def test_warning_messages():
    assert OverpaymentDetected("INV-1", Decimal("1250.5")).message == (
        "Invoice 'INV-1' is overpaid by $1,250.50"
    )
    outside = OutsideAccountWindow("INV-4", date(2019, 1, 5), Decimal("120.00"))
    assert outside.kind == "outside_account_window"
    assert "$120.00 is not reimbursable" in outside.message
    assert UnknownWarning("legacy_flag").message == "legacy_flag"
    assert UnknownWarning("legacy_flag", "kept").message == "legacy_flag: kept"


def test_vault_records_to_dict():
    projection = VaultProjection(
        expense_id="INV-2",
        amount=Decimal("250.00"),
        elapsed_years=10.0,
        projected_value=Decimal("539.73"),
    )
    assert projection.growth == Decimal("289.73")
    assert projection.to_dict()["projectedValue"] == Decimal("539.73")

    summary = VaultSummary(
        total_in_vault=Decimal("0.00"),
        projected_growth=Decimal("0.00"),
        average_years_invested=0.0,
        next_reminder=None,
        expense_count=0,
    )
    assert summary.to_dict()["nextReminder"] is None
