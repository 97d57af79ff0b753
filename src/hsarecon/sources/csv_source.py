"""Record source backed by CSV files in a data directory.

Expected files (all optional, missing files read as empty):

- ``invoices.csv``: id, date, total_amount, amount, category, vendor,
  is_hsa_eligible, reimbursement_strategy, planned_reimbursement_date,
  card_payoff_months, investment_notes
- ``payments.csv``: id, invoice_id, payment_date, amount, payment_source,
  is_reimbursed, payment_method_id
- ``hsa_accounts.csv``: id, account_name, opened_date, closed_date, is_active
"""

import csv
import logging
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from hsarecon.domain.entities import (
    HSAAccount,
    Invoice,
    PaymentSource,
    PaymentTransaction,
    ReimbursementStrategy,
)
from hsarecon.errors import DomainError, NotFoundError
from hsarecon.sources.base import RecordSource
from hsarecon.utils.amount_parser import parse_amount
from hsarecon.utils.date_parser import parse_date, parse_optional_date

logger = logging.getLogger(__name__)

INVOICES_FILE = "invoices.csv"
PAYMENTS_FILE = "payments.csv"
ACCOUNTS_FILE = "hsa_accounts.csv"

REQUIRED_COLUMNS = {
    INVOICES_FILE: {"id", "date"},
    PAYMENTS_FILE: {"id", "invoice_id", "amount", "payment_source"},
    ACCOUNTS_FILE: {"id", "opened_date"},
}

TRUE_VALUES = {"true", "yes", "y", "1", "t"}
FALSE_VALUES = {"false", "no", "n", "0", "f", ""}


def parse_bool(value: Optional[str], default: bool = False) -> bool:
    """Parse a CSV boolean cell."""
    if value is None:
        return default
    text = value.strip().lower()
    if text == "":
        return default
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"Could not parse boolean '{value}'")


def _optional_amount(value: Optional[str]):
    if value is None or not value.strip():
        return None
    return parse_amount(value)


def _text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class CSVRecordSource(RecordSource):
    """Read invoices, payments and HSA accounts from CSV files.

    Rows that cannot be parsed are skipped and reported in ``errors`` as
    ``"<file> row N: <message>"``; loading itself only fails when the data
    directory is missing.
    """

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self.errors: list[str] = []
        self._invoices: Optional[list[Invoice]] = None
        self._payments: list[PaymentTransaction] = []
        self._accounts: list[HSAAccount] = []

    def load(self) -> "CSVRecordSource":
        """Read all CSV files from the data directory.

        Raises:
            NotFoundError: If the data directory does not exist
        """
        if not self.data_dir.is_dir():
            raise NotFoundError(f"Data directory not found: {self.data_dir}")

        self.errors = []
        self._invoices = self._load_file(INVOICES_FILE, self._parse_invoice)
        self._payments = self._load_file(PAYMENTS_FILE, self._parse_payment)
        self._accounts = self._load_file(ACCOUNTS_FILE, self._parse_account)

        invoice_ids = {invoice.id for invoice in self._invoices}
        for payment in self._payments:
            if payment.invoice_id not in invoice_ids:
                self.errors.append(
                    f"{PAYMENTS_FILE}: payment '{payment.id}' references unknown "
                    f"invoice '{payment.invoice_id}'"
                )

        logger.debug(
            "Loaded %d invoices, %d payments, %d accounts from %s (%d errors)",
            len(self._invoices),
            len(self._payments),
            len(self._accounts),
            self.data_dir,
            len(self.errors),
        )
        return self

    def _ensure_loaded(self) -> None:
        if self._invoices is None:
            self.load()

    def list_invoices(self) -> list[Invoice]:
        self._ensure_loaded()
        return list(self._invoices)

    def list_payments(self, invoice_id: Optional[str] = None) -> list[PaymentTransaction]:
        self._ensure_loaded()
        if invoice_id is None:
            return list(self._payments)
        return [p for p in self._payments if p.invoice_id == invoice_id]

    def list_hsa_accounts(self) -> list[HSAAccount]:
        self._ensure_loaded()
        return list(self._accounts)

    def _rows(self, file_name: str) -> Iterator[tuple[int, dict[str, Any]]]:
        csv_path = self.data_dir / file_name
        if not csv_path.exists():
            return

        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            sample = f.read(1024)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
            except csv.Error:
                delimiter = ","

            reader = csv.DictReader(f, delimiter=delimiter)
            if reader.fieldnames is None:
                return

            columns = {name.strip() for name in reader.fieldnames if name}
            missing = REQUIRED_COLUMNS[file_name] - columns
            if missing:
                self.errors.append(
                    f"{file_name}: missing required columns: {', '.join(sorted(missing))}"
                )
                return

            # Start at 2 (header is row 1)
            for row_num, row in enumerate(reader, start=2):
                yield row_num, {
                    (key or "").strip(): value for key, value in row.items()
                }

    def _load_file(self, file_name: str, parse_row: Callable[[dict], Any]) -> list:
        records = []
        seen_ids: set[str] = set()
        for row_num, row in self._rows(file_name):
            try:
                record = parse_row(row)
            except (ValueError, DomainError) as e:
                self.errors.append(f"{file_name} row {row_num}: {e}")
                continue
            if record.id in seen_ids:
                self.errors.append(f"{file_name} row {row_num}: duplicate id '{record.id}'")
                continue
            seen_ids.add(record.id)
            records.append(record)
        return records

    @staticmethod
    def _require(row: dict, column: str) -> str:
        value = _text(row.get(column))
        if value is None:
            raise ValueError(f"Missing {column}")
        return value

    def _parse_invoice(self, row: dict) -> Invoice:
        strategy = _text(row.get("reimbursement_strategy"))
        return Invoice(
            id=self._require(row, "id"),
            date=parse_date(self._require(row, "date")),
            total_amount=_optional_amount(row.get("total_amount")),
            amount=_optional_amount(row.get("amount")),
            category=_text(row.get("category")) or "",
            vendor=_text(row.get("vendor")) or "",
            is_hsa_eligible=parse_bool(row.get("is_hsa_eligible")),
            reimbursement_strategy=(
                ReimbursementStrategy.parse(strategy)
                if strategy
                else ReimbursementStrategy.IMMEDIATE
            ),
            planned_reimbursement_date=parse_optional_date(
                row.get("planned_reimbursement_date")
            ),
            card_payoff_months=int(_text(row.get("card_payoff_months")) or 0),
            investment_notes=_text(row.get("investment_notes")),
        )

    def _parse_payment(self, row: dict) -> PaymentTransaction:
        return PaymentTransaction(
            id=self._require(row, "id"),
            invoice_id=self._require(row, "invoice_id"),
            payment_date=parse_optional_date(row.get("payment_date")),
            amount=parse_amount(self._require(row, "amount")),
            payment_source=PaymentSource.parse(self._require(row, "payment_source")),
            is_reimbursed=parse_bool(row.get("is_reimbursed")),
            payment_method_id=_text(row.get("payment_method_id")),
        )

    def _parse_account(self, row: dict) -> HSAAccount:
        account_id = self._require(row, "id")
        return HSAAccount(
            id=account_id,
            account_name=_text(row.get("account_name")) or account_id,
            opened_date=parse_date(self._require(row, "opened_date")),
            closed_date=parse_optional_date(row.get("closed_date")),
            is_active=parse_bool(row.get("is_active"), default=True),
        )
