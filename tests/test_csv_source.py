"""Tests for the CSV record source."""

from datetime import date
from decimal import Decimal

import pytest

from hsarecon.domain.entities import PaymentSource, ReimbursementStrategy
from hsarecon.errors import NotFoundError
from hsarecon.sources import create_csv_source
from hsarecon.sources.csv_source import CSVRecordSource, parse_bool


def test_load_sample_directory(data_dir):
    source = CSVRecordSource(data_dir).load()

    assert source.errors == []
    assert [i.id for i in source.list_invoices()] == ["INV-1", "INV-2", "INV-3", "INV-4"]
    assert len(source.list_payments()) == 4
    assert [a.account_name for a in source.list_hsa_accounts()] == ["Fidelity HSA"]


def test_invoice_fields(data_dir):
    source = CSVRecordSource(data_dir).load()
    invoice = source.get_invoice("INV-2")

    assert invoice.date == date(2024, 5, 1)
    assert invoice.total_amount == Decimal("250.00")
    assert invoice.amount is None
    assert invoice.vendor == "Smile Dental"
    assert invoice.is_hsa_eligible is True
    assert invoice.reimbursement_strategy is ReimbursementStrategy.VAULT
    assert invoice.planned_reimbursement_date == date(2034, 5, 1)
    assert invoice.card_payoff_months == 12
    assert invoice.investment_notes == "Keep receipts"

    assert source.get_invoice("INV-3").is_hsa_eligible is False
    assert source.get_invoice("NOPE") is None


def test_payment_fields(data_dir):
    source = CSVRecordSource(data_dir).load()
    payments = source.list_payments("INV-1")

    assert [p.id for p in payments] == ["PAY-1", "PAY-2"]
    assert payments[0].payment_source is PaymentSource.HSA_DIRECT
    assert payments[1].amount == Decimal("100.00")
    assert payments[1].is_reimbursed is False
    assert source.list_payments("INV-3")[0].payment_date == date(2024, 6, 20)


def test_lazy_load(data_dir):
    source = CSVRecordSource(data_dir)
    assert len(source.list_invoices()) == 4


def test_missing_directory(tmp_path):
    with pytest.raises(NotFoundError, match="Data directory not found"):
        CSVRecordSource(tmp_path / "missing").load()


def test_missing_files_read_as_empty(tmp_path):
    source = CSVRecordSource(tmp_path).load()

    assert source.list_invoices() == []
    assert source.list_payments() == []
    assert source.list_hsa_accounts() == []
    assert source.errors == []


def test_bad_rows_are_skipped_and_reported(tmp_path):
    (tmp_path / "invoices.csv").write_text(
        "id,date,total_amount,is_hsa_eligible\n"
        "INV-1,2024-01-10,100.00,yes\n"
        "INV-2,garbage,50.00,yes\n"
        "INV-3,2024-02-01,-5.00,yes\n"
        "INV-1,2024-03-01,20.00,no\n"
        ",2024-03-01,20.00,no\n"
    )
    (tmp_path / "payments.csv").write_text(
        "id,invoice_id,payment_date,amount,payment_source\n"
        "PAY-1,INV-1,2024-01-11,40.00,hsa_direct\n"
        "PAY-2,INV-1,2024-01-12,10.00,credit_card\n"
        "PAY-3,INV-9,2024-01-12,10.00,out_of_pocket\n"
    )

    source = CSVRecordSource(tmp_path).load()

    assert [i.id for i in source.list_invoices()] == ["INV-1"]
    assert [p.id for p in source.list_payments()] == ["PAY-1", "PAY-3"]
    assert len(source.errors) == 6
    assert source.errors[0].startswith("invoices.csv row 3:")
    assert source.errors[1].startswith("invoices.csv row 4:")
    assert source.errors[2] == "invoices.csv row 5: duplicate id 'INV-1'"
    assert source.errors[3] == "invoices.csv row 6: Missing id"
    assert source.errors[4].startswith("payments.csv row 3: Unknown PaymentSource")
    assert source.errors[5] == (
        "payments.csv: payment 'PAY-3' references unknown invoice 'INV-9'"
    )


def test_missing_required_columns(tmp_path):
    (tmp_path / "hsa_accounts.csv").write_text("id,account_name\nHSA-1,Fidelity\n")

    source = CSVRecordSource(tmp_path).load()

    assert source.list_hsa_accounts() == []
    assert source.errors == ["hsa_accounts.csv: missing required columns: opened_date"]


def test_semicolon_delimiter(tmp_path):
    (tmp_path / "hsa_accounts.csv").write_text(
        "id;account_name;opened_date;closed_date;is_active\n"
        "HSA-1;Old HSA;2018-01-01;2021-12-31;no\n"
        "HSA-2;New HSA;2022-01-01;;yes\n"
    )

    accounts = CSVRecordSource(tmp_path).load().list_hsa_accounts()

    assert [a.id for a in accounts] == ["HSA-1", "HSA-2"]
    assert accounts[0].closed_date == date(2021, 12, 31)
    assert accounts[0].is_active is False
    assert accounts[1].closed_date is None


def test_account_name_defaults_to_id(tmp_path):
    (tmp_path / "hsa_accounts.csv").write_text("id,opened_date\nHSA-1,2020-01-01\n")

    account = CSVRecordSource(tmp_path).load().list_hsa_accounts()[0]

    assert account.account_name == "HSA-1"
    assert account.is_active is True


def test_legacy_amount_column(tmp_path):
    (tmp_path / "invoices.csv").write_text("id,date,amount\nINV-1,2024-01-10,$75.50\n")

    invoice = CSVRecordSource(tmp_path).load().list_invoices()[0]

    assert invoice.total_amount is None
    assert invoice.invoiced_total == Decimal("75.50")


def test_create_csv_source_uses_environment(data_dir, monkeypatch):
    from hsarecon.config import get_settings

    monkeypatch.setenv("HSARECON_DATA_DIR", str(data_dir))
    get_settings.cache_clear()
    try:
        source = create_csv_source()
    finally:
        get_settings.cache_clear()

    assert source.data_dir == data_dir


@pytest.mark.parametrize(
    "value,expected",
    [("true", True), ("Yes", True), ("1", True), ("false", False), ("N", False), ("", False)],
)
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected


def test_parse_bool_default_and_invalid():
    assert parse_bool(None, default=True) is True
    assert parse_bool("  ", default=True) is True
    with pytest.raises(ValueError, match="Could not parse boolean"):
        parse_bool("maybe")
