"""In-memory record source."""

from typing import Iterable, Optional

from hsarecon.domain.entities import HSAAccount, Invoice, PaymentTransaction
from hsarecon.sources.base import RecordSource


class InMemoryRecordSource(RecordSource):
    """Record source over records already held by the caller."""

    def __init__(
        self,
        invoices: Iterable[Invoice] = (),
        payments: Iterable[PaymentTransaction] = (),
        accounts: Iterable[HSAAccount] = (),
    ):
        self._invoices = tuple(invoices)
        self._payments = tuple(payments)
        self._accounts = tuple(accounts)

    def list_invoices(self) -> list[Invoice]:
        return list(self._invoices)

    def list_payments(self, invoice_id: Optional[str] = None) -> list[PaymentTransaction]:
        if invoice_id is None:
            return list(self._payments)
        return [p for p in self._payments if p.invoice_id == invoice_id]

    def list_hsa_accounts(self) -> list[HSAAccount]:
        return list(self._accounts)
