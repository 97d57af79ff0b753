"""Payment allocation: split an invoice into HSA, other and unpaid buckets."""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from hsarecon.domain.entities import (
    AllocationBreakdown,
    DataWarning,
    Invoice,
    OverpaymentDetected,
    PaymentBeforeService,
    PaymentSource,
    PaymentTransaction,
)
from hsarecon.errors import ValidationError, negative_amount
from hsarecon.utils.money import clamp_non_negative, from_cents, to_cents

logger = logging.getLogger(__name__)

DEFAULT_REWARDS_RATE = 0.02


def invoiced_total_cents(invoice: Invoice) -> int:
    """Resolve the invoiced total in cents.

    Falls back to the legacy ``amount`` field; an invoice with neither is
    treated as a zero-dollar bill.

    Raises:
        ValidationError: If the total is not numeric or is negative
    """
    value = invoice.invoiced_total
    if value is None:
        return 0
    cents = to_cents(value, "totalAmount")
    if cents < 0:
        raise ValidationError(negative_amount("totalAmount", invoice.id))
    return cents


def payment_cents(payment: PaymentTransaction) -> int:
    """Resolve a payment amount in cents, rejecting negative amounts."""
    cents = to_cents(payment.amount, "amount")
    if cents < 0:
        raise ValidationError(negative_amount("amount", payment.id))
    return cents


def _check_invoice(invoice: Invoice) -> None:
    if invoice is None or not invoice.id:
        raise ValidationError("Invoice id is required")
    if not isinstance(invoice.date, date):
        raise ValidationError(f"Invoice '{invoice.id}' has no service date")


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def allocate(
    invoice: Invoice,
    payments: Iterable[PaymentTransaction],
    rewards_rate: float = DEFAULT_REWARDS_RATE,
) -> AllocationBreakdown:
    """Aggregate an invoice's payments into allocation buckets.

    Args:
        invoice: Invoice being reconciled
        payments: Payment transactions recorded against the invoice
        rewards_rate: Card rewards rate used for ``potential_rewards``

    Returns:
        AllocationBreakdown with the payment buckets filled in. Eligibility
        fields are left at zero for the classifier.

    Raises:
        ValidationError: If a record breaks the input contract (missing id
            or date, non-numeric or negative amounts, unknown payment
            source, or a payment belonging to another invoice)
    """
    _check_invoice(invoice)
    total = invoiced_total_cents(invoice)

    hsa = 0
    other = 0
    unreimbursed_other = 0
    warnings: list[DataWarning] = []

    for payment in payments:
        if payment.invoice_id != invoice.id:
            raise ValidationError(
                f"Payment '{payment.id}' belongs to invoice '{payment.invoice_id}', "
                f"not '{invoice.id}'"
            )
        cents = payment_cents(payment)
        source = PaymentSource.parse(payment.payment_source)

        if source is PaymentSource.HSA_DIRECT:
            hsa += cents
        elif source is PaymentSource.OUT_OF_POCKET:
            other += cents
            if not payment.is_reimbursed:
                unreimbursed_other += cents

        paid_on = _as_date(payment.payment_date)
        if paid_on is not None and paid_on < _as_date(invoice.date):
            warnings.append(
                PaymentBeforeService(
                    invoice_id=invoice.id,
                    payment_id=payment.id,
                    payment_date=paid_on,
                    service_date=_as_date(invoice.date),
                )
            )

    raw_balance = total - hsa - other
    unpaid = clamp_non_negative(raw_balance)
    overpaid = clamp_non_negative(-raw_balance)
    if overpaid:
        logger.warning(
            "Invoice %s overpaid by %s cents (total=%s, hsa=%s, other=%s)",
            invoice.id,
            overpaid,
            total,
            hsa,
            other,
        )
        warnings.append(
            OverpaymentDetected(invoice_id=invoice.id, overpaid_amount=from_cents(overpaid))
        )

    rewards = (from_cents(unpaid) * Decimal(str(rewards_rate))).quantize(Decimal("0.01"))

    return AllocationBreakdown(
        invoice_id=invoice.id,
        total_invoiced=from_cents(total),
        paid_via_hsa=from_cents(hsa),
        paid_via_other=from_cents(other),
        unpaid_balance=from_cents(unpaid),
        overpaid_amount=from_cents(overpaid),
        unreimbursed_other=from_cents(unreimbursed_other),
        potential_rewards=rewards,
        warnings=tuple(warnings),
    )
