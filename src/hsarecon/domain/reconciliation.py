"""Reconciliation domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from hsarecon.domain.allocation import allocate
from hsarecon.domain.eligibility import partition_accounts
from hsarecon.domain.entities import (
    ZERO,
    AggregateStats,
    AllocationBreakdown,
    DataWarning,
    EligibilityMode,
    HSAAccount,
    InvalidAccountWindow,
    Invoice,
    PaymentRecommendation,
    PaymentTransaction,
    ReconciliationResult,
    VaultExpense,
    VaultProjection,
    VaultSummary,
)
from hsarecon.domain.recommendation import recommend_for_invoice
from hsarecon.domain.reimbursement import classify
from hsarecon.domain.status import status_label, status_of
from hsarecon.domain.vault import (
    growth_factor,
    is_vaulted,
    project_expense,
    summarize,
    validate_return_rate,
    vault_expense_from_invoice,
)
from hsarecon.errors import NotFoundError, invoice_not_found
from hsarecon.utils.money import round_money

if TYPE_CHECKING:
    from hsarecon.config import Settings
    from hsarecon.sources.base import RecordSource

logger = logging.getLogger(__name__)


def aggregate_stats(
    breakdowns: Iterable[AllocationBreakdown],
    tax_rate: float = 0.30,
    growth_rate: float = 0.07,
    growth_years: int = 30,
) -> AggregateStats:
    """Total many breakdowns into portfolio statistics.

    Tax savings is the reimbursable total times the marginal tax rate.
    Investment growth potential is what the reimbursable total would be
    worth if left invested for ``growth_years`` at ``growth_rate``.
    """
    growth_rate = validate_return_rate(growth_rate)
    breakdowns = list(breakdowns)

    def total(attr: str) -> Decimal:
        return sum((getattr(b, attr) for b in breakdowns), ZERO)

    eligible = total("hsa_reimbursement_eligible")
    warnings: list[DataWarning] = []
    for breakdown in breakdowns:
        for warning in breakdown.warnings:
            if warning not in warnings:
                warnings.append(warning)

    return AggregateStats(
        invoice_count=len(breakdowns),
        total_invoiced=total("total_invoiced"),
        total_paid_via_hsa=total("paid_via_hsa"),
        total_paid_via_other=total("paid_via_other"),
        total_unpaid=total("unpaid_balance"),
        total_overpaid=total("overpaid_amount"),
        total_hsa_eligible=eligible,
        total_recoverable=total("already_paid_recoverable"),
        total_strategic_opportunity=total("unpaid_strategic_opportunity"),
        total_ineligible=total("ineligible_amount"),
        total_potential_rewards=total("potential_rewards"),
        tax_savings=round_money(eligible * Decimal(str(tax_rate))),
        investment_growth_potential=round_money(
            eligible * growth_factor(growth_rate, growth_years)
        ),
        warnings=tuple(warnings),
    )


class ReconciliationService:
    """Service that runs invoices through allocation, eligibility and status."""

    def __init__(self, source: "RecordSource", settings: Optional["Settings"] = None):
        """Initialize reconciliation service.

        Args:
            source: Record source supplying invoices, payments and accounts
            settings: Rates and strictness; defaults to environment settings
        """
        if settings is None:
            from hsarecon.config import get_settings

            settings = get_settings()
        self.source = source
        self.settings = settings

    def _mode(self, mode: Optional[EligibilityMode]) -> EligibilityMode:
        if mode is None:
            return self.settings.eligibility_mode
        return EligibilityMode.parse(mode)

    def reconcile_invoice(
        self,
        invoice: Invoice,
        payments: Sequence[PaymentTransaction],
        accounts: Sequence[HSAAccount],
        mode: Optional[EligibilityMode] = None,
    ) -> ReconciliationResult:
        """Reconcile one invoice against explicit records."""
        breakdown = allocate(invoice, payments, rewards_rate=self.settings.rewards_rate)
        breakdown = classify(invoice, breakdown, accounts, mode=self._mode(mode))
        return ReconciliationResult(
            invoice=invoice,
            breakdown=breakdown,
            status=status_of(breakdown),
            label=status_label(breakdown),
        )

    def reconcile(
        self, invoice_id: str, mode: Optional[EligibilityMode] = None
    ) -> ReconciliationResult:
        """Reconcile one invoice from the record source.

        Raises:
            NotFoundError: If the invoice does not exist
        """
        invoice = self.source.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        return self.reconcile_invoice(
            invoice,
            self.source.list_payments(invoice_id),
            self.source.list_hsa_accounts(),
            mode=mode,
        )

    def reconcile_all(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        mode: Optional[EligibilityMode] = None,
    ) -> list[ReconciliationResult]:
        """Reconcile every invoice in the source, oldest first.

        Args:
            start_date: Optional inclusive lower bound on invoice date
            end_date: Optional inclusive upper bound on invoice date
            mode: Eligibility strictness (defaults to settings)
        """
        accounts = self.source.list_hsa_accounts()
        payments = self.source.payments_by_invoice()
        mode = self._mode(mode)

        invoices = [
            invoice
            for invoice in self.source.list_invoices()
            if (start_date is None or invoice.date >= start_date)
            and (end_date is None or invoice.date <= end_date)
        ]
        invoices.sort(key=lambda invoice: (invoice.date, invoice.id))

        logger.debug("Reconciling %d invoices in %s mode", len(invoices), mode.value)
        return [
            self.reconcile_invoice(invoice, payments.get(invoice.id, []), accounts, mode)
            for invoice in invoices
        ]

    def recommend(self, invoice_id: str) -> PaymentRecommendation:
        """Payment strategy recommendation for one invoice.

        Uses the configured rewards, tax and long-horizon growth rates.

        Raises:
            NotFoundError: If the invoice does not exist
        """
        invoice = self.source.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        return recommend_for_invoice(
            invoice,
            rewards_rate=self.settings.rewards_rate,
            tax_rate=self.settings.tax_rate,
            investment_return_rate=self.settings.growth_rate,
        )

    def aggregate(self, results: Iterable[ReconciliationResult]) -> AggregateStats:
        """Portfolio statistics for reconciled invoices."""
        return aggregate_stats(
            (result.breakdown for result in results),
            tax_rate=self.settings.tax_rate,
            growth_rate=self.settings.growth_rate,
            growth_years=self.settings.growth_years,
        )

    def account_warnings(self) -> list[InvalidAccountWindow]:
        """Data-quality warnings for malformed HSA accounts."""
        _, invalid = partition_accounts(self.source.list_hsa_accounts())
        return invalid

    def vault_expenses(self) -> list[VaultExpense]:
        """Vaulted invoices (medium-term and vault strategies), oldest first."""
        expenses = [
            vault_expense_from_invoice(invoice)
            for invoice in self.source.list_invoices()
        ]
        expenses = [expense for expense in expenses if is_vaulted(expense)]
        expenses.sort(key=lambda expense: (expense.date, expense.id))
        return expenses

    def vault_projections(
        self, return_rate: Optional[float] = None
    ) -> list[VaultProjection]:
        rate = self.settings.return_rate if return_rate is None else return_rate
        return [project_expense(expense, rate) for expense in self.vault_expenses()]

    def vault_summary(
        self, return_rate: Optional[float] = None, today: Optional[date] = None
    ) -> VaultSummary:
        rate = self.settings.return_rate if return_rate is None else return_rate
        return summarize(self.vault_expenses(), rate, today=today)
