"""Shared pytest fixtures for hsarecon tests."""

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from hsarecon.config import Settings
from hsarecon.domain.entities import (
    HSAAccount,
    Invoice,
    PaymentSource,
    PaymentTransaction,
    ReimbursementStrategy,
)
from hsarecon.domain.reconciliation import ReconciliationService
from hsarecon.sources.memory import InMemoryRecordSource

INVOICES_CSV = """id,date,total_amount,amount,category,vendor,is_hsa_eligible,reimbursement_strategy,planned_reimbursement_date,card_payoff_months,investment_notes
INV-1,2024-03-10,500.00,,Medical,City Clinic,true,immediate,,,
INV-2,2024-05-01,250.00,,Dental,Smile Dental,true,vault,2034-05-01,12,Keep receipts
INV-3,2024-06-15,80.00,,Vision,Eye Care,false,immediate,,,
INV-4,2019-01-05,120.00,,Medical,Old Clinic,true,medium,2026-01-05,,
"""

PAYMENTS_CSV = """id,invoice_id,payment_date,amount,payment_source,is_reimbursed,payment_method_id
PAY-1,INV-1,2024-03-15,200.00,hsa_direct,false,
PAY-2,INV-1,2024-03-20,100.00,out_of_pocket,false,
PAY-3,INV-2,2024-05-02,250.00,out_of_pocket,false,card-1
PAY-4,INV-3,2024-06-20,80.00,out_of_pocket,false,
"""

ACCOUNTS_CSV = """id,account_name,opened_date,closed_date,is_active
HSA-1,Fidelity HSA,2020-01-01,,true
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep HSARECON_* variables from the outer environment out of tests."""
    for name in (
        "HSARECON_DATA_DIR",
        "HSARECON_RETURN_RATE",
        "HSARECON_ELIGIBILITY_MODE",
        "HSARECON_REWARDS_RATE",
        "HSARECON_TAX_RATE",
        "HSARECON_GROWTH_RATE",
        "HSARECON_GROWTH_YEARS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_invoice():
    """A $500 HSA-eligible invoice."""
    return Invoice(
        id="INV-1",
        date=date(2024, 3, 10),
        total_amount=Decimal("500.00"),
        category="Medical",
        vendor="City Clinic",
        is_hsa_eligible=True,
    )


@pytest.fixture
def sample_payments():
    """$200 paid from the HSA and $100 out of pocket, not yet reimbursed."""
    return [
        PaymentTransaction(
            id="PAY-1",
            invoice_id="INV-1",
            payment_date=date(2024, 3, 15),
            amount=Decimal("200.00"),
            payment_source=PaymentSource.HSA_DIRECT,
        ),
        PaymentTransaction(
            id="PAY-2",
            invoice_id="INV-1",
            payment_date=date(2024, 3, 20),
            amount=Decimal("100.00"),
            payment_source=PaymentSource.OUT_OF_POCKET,
            is_reimbursed=False,
        ),
    ]


@pytest.fixture
def sample_account():
    """An open HSA account since 2020."""
    return HSAAccount(
        id="HSA-1",
        account_name="Fidelity HSA",
        opened_date=date(2020, 1, 1),
    )


@pytest.fixture
def settings(tmp_path):
    """Default settings pointing at a temporary data directory."""
    return Settings(data_dir=tmp_path)


@pytest.fixture
def vault_invoice():
    """A $250 invoice vaulted for ten years."""
    return Invoice(
        id="INV-2",
        date=date(2024, 5, 1),
        total_amount=Decimal("250.00"),
        is_hsa_eligible=True,
        reimbursement_strategy=ReimbursementStrategy.VAULT,
        planned_reimbursement_date=date(2034, 5, 1),
    )


@pytest.fixture
def memory_source(sample_invoice, sample_payments, sample_account, vault_invoice):
    """In-memory record source with two invoices and one account."""
    return InMemoryRecordSource(
        invoices=[sample_invoice, vault_invoice],
        payments=sample_payments,
        accounts=[sample_account],
    )


@pytest.fixture
def reconciliation_service(memory_source, settings):
    """ReconciliationService over the in-memory source."""
    return ReconciliationService(memory_source, settings)


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """A data directory holding sample invoices, payments and accounts CSVs."""
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "invoices.csv").write_text(INVOICES_CSV)
    (directory / "payments.csv").write_text(PAYMENTS_CSV)
    (directory / "hsa_accounts.csv").write_text(ACCOUNTS_CSV)
    return directory


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
