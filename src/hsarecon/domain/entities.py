"""Domain model entities for hsarecon.

Input records (invoices, payment transactions, HSA accounts) are supplied by
whatever owns the data. Everything else here is derived: computed on each
call, never cached, and discarded after use.

Output records expose ``to_dict()`` with the camelCase keys that report
and dashboard consumers read verbatim.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from hsarecon.errors import ValidationError, unknown_choice

ZERO = Decimal("0.00")


class _ChoiceEnum(str, Enum):
    """String enum that parses loosely formatted input."""

    @classmethod
    def parse(cls, value: Any):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                unknown_choice(cls.__name__, value, [m.value for m in cls])
            )


class PaymentSource(_ChoiceEnum):
    HSA_DIRECT = "hsa_direct"
    OUT_OF_POCKET = "out_of_pocket"
    # Recorded as a placeholder by the payment flow; moves no money.
    UNPAID = "unpaid"


class ReimbursementStrategy(_ChoiceEnum):
    IMMEDIATE = "immediate"
    MEDIUM = "medium"
    VAULT = "vault"


class PaymentStatus(_ChoiceEnum):
    FULLY_HSA_PAID = "fully_hsa_paid"
    PARTIALLY_PAID_MIXED = "partially_paid_mixed"
    UNPAID_WITH_BALANCE = "unpaid_with_balance"
    FULLY_PAID_OTHER_ONLY = "fully_paid_other_only"
    NO_CHARGE = "no_charge"


class RecommendedMethod(_ChoiceEnum):
    REWARDS_CARD = "rewards-card"
    HSA_INVEST = "hsa-invest"


class EligibilityMode(_ChoiceEnum):
    """How strictly account windows gate reimbursement eligibility.

    FLAG_ONLY trusts the invoice's HSA-eligible flag alone.
    WINDOW_WHEN_ACCOUNTS checks windows as soon as any account is known.
    STRICT always checks windows, so no accounts means nothing is eligible.
    """

    FLAG_ONLY = "flag_only"
    WINDOW_WHEN_ACCOUNTS = "window_when_accounts"
    STRICT = "strict"


@dataclass(frozen=True)
class Invoice:
    """A medical bill entered by the user.

    ``amount`` is the legacy total field; ``total_amount`` wins when both
    are set.
    """

    id: str
    date: date
    total_amount: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    category: str = ""
    vendor: str = ""
    is_hsa_eligible: bool = False
    reimbursement_strategy: ReimbursementStrategy = ReimbursementStrategy.IMMEDIATE
    planned_reimbursement_date: Optional[date] = None
    card_payoff_months: int = 0
    investment_notes: Optional[str] = None

    @property
    def invoiced_total(self) -> Optional[Decimal]:
        if self.total_amount is not None:
            return self.total_amount
        return self.amount


@dataclass(frozen=True)
class PaymentTransaction:
    """One payment applied to an invoice."""

    id: str
    invoice_id: str
    payment_date: Optional[date]
    amount: Decimal
    payment_source: PaymentSource
    is_reimbursed: bool = False
    payment_method_id: Optional[str] = None


@dataclass(frozen=True)
class HSAAccount:
    """A real-world HSA whose open period gates eligibility."""

    id: str
    account_name: str
    opened_date: date
    closed_date: Optional[date] = None
    is_active: bool = True


# Data-quality warnings. Each variant carries a stable ``kind`` tag so
# consumers can switch on it; UnknownWarning keeps unrecognised tags intact.


@dataclass(frozen=True)
class InvalidAccountWindow:
    account_id: str
    opened_date: date
    closed_date: date

    kind: ClassVar[str] = "invalid_account_window"

    @property
    def message(self) -> str:
        return (
            f"HSA account '{self.account_id}' closes on {self.closed_date.isoformat()}, "
            f"not after it opened on {self.opened_date.isoformat()}; "
            "excluded from eligibility checks"
        )


@dataclass(frozen=True)
class OverpaymentDetected:
    invoice_id: str
    overpaid_amount: Decimal

    kind: ClassVar[str] = "overpayment_detected"

    @property
    def message(self) -> str:
        return (
            f"Invoice '{self.invoice_id}' is overpaid by ${self.overpaid_amount:,.2f}"
        )


@dataclass(frozen=True)
class PaymentBeforeService:
    invoice_id: str
    payment_id: str
    payment_date: date
    service_date: date

    kind: ClassVar[str] = "payment_before_service"

    @property
    def message(self) -> str:
        return (
            f"Payment '{self.payment_id}' on {self.payment_date.isoformat()} precedes "
            f"the service date {self.service_date.isoformat()} of invoice '{self.invoice_id}'"
        )


@dataclass(frozen=True)
class OutsideAccountWindow:
    invoice_id: str
    expense_date: date
    excluded_amount: Decimal

    kind: ClassVar[str] = "outside_account_window"

    @property
    def message(self) -> str:
        return (
            f"Invoice '{self.invoice_id}' dated {self.expense_date.isoformat()} falls outside "
            f"every HSA account window; ${self.excluded_amount:,.2f} is not reimbursable"
        )


@dataclass(frozen=True)
class UnknownWarning:
    tag: str
    detail: str = ""

    kind: ClassVar[str] = "unknown"

    @property
    def message(self) -> str:
        return f"{self.tag}: {self.detail}" if self.detail else self.tag


DataWarning = Union[
    InvalidAccountWindow,
    OverpaymentDetected,
    PaymentBeforeService,
    OutsideAccountWindow,
    UnknownWarning,
]


def warning_to_dict(warning: DataWarning) -> dict[str, Any]:
    """Serialize a warning with its kind tag and message."""
    data: dict[str, Any] = {"kind": warning.kind, "message": warning.message}
    for name, value in vars(warning).items():
        head, *rest = name.split("_")
        key = head + "".join(part.title() for part in rest)
        data[key] = value.isoformat() if isinstance(value, date) else value
    return data


@dataclass(frozen=True)
class AllocationBreakdown:
    """How one invoice was paid and how much of it the HSA can still cover.

    The allocator fills the payment buckets; the eligibility classifier
    fills the reimbursement fields. ``unreimbursed_other`` is the
    out-of-pocket money not yet pulled back out of the HSA, carried from
    one stage to the next.
    """

    invoice_id: str
    total_invoiced: Decimal
    paid_via_hsa: Decimal
    paid_via_other: Decimal
    unpaid_balance: Decimal
    overpaid_amount: Decimal = ZERO
    unreimbursed_other: Decimal = ZERO
    hsa_reimbursement_eligible: Decimal = ZERO
    already_paid_recoverable: Decimal = ZERO
    unpaid_strategic_opportunity: Decimal = ZERO
    ineligible_amount: Decimal = ZERO
    potential_rewards: Decimal = ZERO
    warnings: tuple[DataWarning, ...] = ()

    @property
    def is_overpaid(self) -> bool:
        return self.overpaid_amount > 0

    @property
    def total_paid(self) -> Decimal:
        return self.paid_via_hsa + self.paid_via_other

    def to_dict(self) -> dict[str, Any]:
        return {
            "invoiceId": self.invoice_id,
            "totalInvoiced": self.total_invoiced,
            "paidViaHSA": self.paid_via_hsa,
            "paidViaOther": self.paid_via_other,
            "unpaidBalance": self.unpaid_balance,
            "hsaReimbursementEligible": self.hsa_reimbursement_eligible,
            "alreadyPaidRecoverable": self.already_paid_recoverable,
            "unpaidStrategicOpportunity": self.unpaid_strategic_opportunity,
            "potentialRewards": self.potential_rewards,
            "overpaidAmount": self.overpaid_amount,
            "ineligibleAmount": self.ineligible_amount,
            "warnings": [warning_to_dict(w) for w in self.warnings],
        }


@dataclass(frozen=True)
class VaultExpense:
    """An invoice viewed as money left in the HSA to grow."""

    id: str
    date: date
    amount: Decimal
    reimbursement_strategy: ReimbursementStrategy
    planned_reimbursement_date: Optional[date] = None
    card_payoff_months: int = 0
    investment_notes: Optional[str] = None
    vendor: str = ""
    category: str = ""


@dataclass(frozen=True)
class VaultProjection:
    expense_id: str
    amount: Decimal
    elapsed_years: float
    projected_value: Decimal

    @property
    def growth(self) -> Decimal:
        return self.projected_value - self.amount

    def to_dict(self) -> dict[str, Any]:
        return {
            "expenseId": self.expense_id,
            "amount": self.amount,
            "elapsedYears": self.elapsed_years,
            "projectedValue": self.projected_value,
            "growth": self.growth,
        }


@dataclass(frozen=True)
class VaultSummary:
    total_in_vault: Decimal
    projected_growth: Decimal
    average_years_invested: float
    next_reminder: Optional[date]
    expense_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalInVault": self.total_in_vault,
            "projectedGrowth": self.projected_growth,
            "averageYearsInvested": self.average_years_invested,
            "nextReminder": (
                self.next_reminder.isoformat() if self.next_reminder else None
            ),
            "expenseCount": self.expense_count,
        }


@dataclass(frozen=True)
class ReconciliationResult:
    """Breakdown and display status for one invoice."""

    invoice: Invoice
    breakdown: AllocationBreakdown
    status: PaymentStatus
    label: str

    @property
    def warnings(self) -> tuple[DataWarning, ...]:
        return self.breakdown.warnings


@dataclass(frozen=True)
class AggregateStats:
    """Portfolio totals across many invoices."""

    invoice_count: int
    total_invoiced: Decimal
    total_paid_via_hsa: Decimal
    total_paid_via_other: Decimal
    total_unpaid: Decimal
    total_overpaid: Decimal
    total_hsa_eligible: Decimal
    total_recoverable: Decimal
    total_strategic_opportunity: Decimal
    total_ineligible: Decimal
    total_potential_rewards: Decimal
    tax_savings: Decimal
    investment_growth_potential: Decimal
    warnings: tuple[DataWarning, ...] = field(default=())

    def to_dict(self) -> dict[str, Any]:
        return {
            "invoiceCount": self.invoice_count,
            "totalInvoiced": self.total_invoiced,
            "totalPaidViaHSA": self.total_paid_via_hsa,
            "totalPaidViaOther": self.total_paid_via_other,
            "totalUnpaid": self.total_unpaid,
            "totalOverpaid": self.total_overpaid,
            "totalHSAEligible": self.total_hsa_eligible,
            "totalRecoverable": self.total_recoverable,
            "totalStrategicOpportunity": self.total_strategic_opportunity,
            "totalIneligible": self.total_ineligible,
            "totalPotentialRewards": self.total_potential_rewards,
            "taxSavings": self.tax_savings,
            "investmentGrowthPotential": self.investment_growth_potential,
            "warnings": [warning_to_dict(w) for w in self.warnings],
        }


@dataclass(frozen=True)
class PaymentRecommendation:
    """How to pay for an expense and what the choice is worth.

    ``savings_amount`` is the sum of the four breakdown parts. Timing
    benefit is growth while the card is being paid off; investment growth
    is what the balance earns in the HSA after payoff.
    """

    method: RecommendedMethod
    title: str
    description: str
    rewards: Decimal
    tax_savings: Decimal
    timing_benefit: Decimal
    investment_growth: Decimal
    savings_amount: Decimal
    reasoning: tuple[str, ...] = ()
    confidence: str = "high"

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method.value,
            "title": self.title,
            "description": self.description,
            "savingsAmount": self.savings_amount,
            "taxSavings": self.tax_savings,
            "confidence": self.confidence,
            "reasoning": list(self.reasoning),
            "breakdown": {
                "rewards": self.rewards,
                "taxSavings": self.tax_savings,
                "timingBenefit": self.timing_benefit,
                "investmentGrowth": self.investment_growth,
            },
        }
