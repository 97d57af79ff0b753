"""Abstract record source interface."""

from abc import ABC, abstractmethod
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from hsarecon.domain.entities import HSAAccount, Invoice, PaymentTransaction


class RecordSource(ABC):
    """Read-only supplier of the records the engine reconciles.

    Implementations hand out snapshots; the engine never writes back.
    """

    @abstractmethod
    def list_invoices(self) -> list[Invoice]:
        """List all invoices."""
        pass

    @abstractmethod
    def list_payments(self, invoice_id: Optional[str] = None) -> list[PaymentTransaction]:
        """List payment transactions, optionally for one invoice."""
        pass

    @abstractmethod
    def list_hsa_accounts(self) -> list[HSAAccount]:
        """List all HSA accounts."""
        pass

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        """Get invoice by ID."""
        for invoice in self.list_invoices():
            if invoice.id == invoice_id:
                return invoice
        return None

    def payments_by_invoice(self) -> dict[str, list[PaymentTransaction]]:
        """Group all payments by invoice ID."""
        grouped: dict[str, list[PaymentTransaction]] = {}
        for payment in self.list_payments():
            grouped.setdefault(payment.invoice_id, []).append(payment)
        return grouped
