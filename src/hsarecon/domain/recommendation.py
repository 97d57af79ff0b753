"""Payment strategy recommendations for new expenses.

An HSA-eligible bill is worth more when it is paid with a rewards card and
reimbursed from the HSA later: the card earns rewards, the HSA money stays
invested while the card is paid off, and keeps growing until the
reimbursement. Bills that are not eligible only earn card rewards.
"""

import logging
from typing import Optional

from hsarecon.domain.allocation import invoiced_total_cents
from hsarecon.domain.entities import Invoice, PaymentRecommendation, RecommendedMethod
from hsarecon.domain.vault import elapsed_years, growth_factor, validate_return_rate
from hsarecon.errors import ValidationError, negative_amount
from hsarecon.utils.money import format_money, from_cents, round_money, to_cents

logger = logging.getLogger(__name__)

DEFAULT_REWARDS_RATE = 0.02
DEFAULT_TAX_RATE = 0.22
DEFAULT_INVESTMENT_RETURN_RATE = 0.07
DEFAULT_CARD_PAYOFF_MONTHS = 12
DEFAULT_HSA_INVESTMENT_YEARS = 5.0


def investment_growth(
    principal: float, monthly_rate: float, months: int, monthly_payment: float = 0.0
) -> float:
    """Growth earned on a balance over ``months`` of monthly compounding.

    With no monthly payment the whole principal compounds. Otherwise each
    month's growth is earned on the balance left after the previous
    payments, and growth stops once the balance is paid down.
    """
    if months <= 0:
        return 0.0
    if monthly_payment <= 0:
        return principal * float(growth_factor(monthly_rate, months)) - principal

    balance = principal
    total = 0.0
    for _ in range(months):
        growth = balance * monthly_rate
        total += growth
        balance = balance + growth - monthly_payment
        if balance <= 0:
            break
    return total


def _check_rate(name: str, rate: float) -> float:
    rate = float(rate)
    if not 0 <= rate <= 1:
        raise ValidationError(f"{name} must be between 0 and 1, got {rate}")
    return rate


def recommend_payment(
    amount,
    is_hsa_eligible: bool,
    rewards_rate: float = DEFAULT_REWARDS_RATE,
    tax_rate: float = DEFAULT_TAX_RATE,
    investment_return_rate: float = DEFAULT_INVESTMENT_RETURN_RATE,
    card_payoff_months: int = DEFAULT_CARD_PAYOFF_MONTHS,
    monthly_payment=0,
    hsa_investment_years: float = DEFAULT_HSA_INVESTMENT_YEARS,
) -> PaymentRecommendation:
    """Recommend how to pay for an expense.

    Args:
        amount: Expense amount
        is_hsa_eligible: Whether the expense can be reimbursed from the HSA
        rewards_rate: Card rewards rate, e.g. 0.02 for 2%
        tax_rate: Marginal tax rate saved by paying through the HSA
        investment_return_rate: Assumed annual return on invested HSA money
        card_payoff_months: Months taken to pay off the card
        monthly_payment: Card payment per month; 0 pays in full at the end
        hsa_investment_years: Years until the HSA reimbursement

    Returns:
        PaymentRecommendation with amounts rounded to the cent

    Raises:
        ValidationError: If an amount, rate or period is out of range
    """
    cents = to_cents(amount)
    if cents < 0:
        raise ValidationError(negative_amount("amount", "expense"))
    payment_cents = to_cents(monthly_payment, "monthly_payment")
    if payment_cents < 0:
        raise ValidationError(negative_amount("monthly_payment", "expense"))
    if card_payoff_months < 0:
        raise ValidationError(f"Card payoff months cannot be negative, got {card_payoff_months}")
    if hsa_investment_years < 0:
        raise ValidationError(
            f"HSA investment years cannot be negative, got {hsa_investment_years}"
        )
    rewards_rate = _check_rate("rewards_rate", rewards_rate)
    tax_rate = _check_rate("tax_rate", tax_rate)
    rate = validate_return_rate(investment_return_rate)

    principal = float(from_cents(cents))
    rewards = round_money(principal * rewards_rate)

    if not is_hsa_eligible:
        return PaymentRecommendation(
            method=RecommendedMethod.REWARDS_CARD,
            title="Use Your Rewards Card",
            description="This expense isn't HSA-eligible. Here's what you'd earn from card rewards.",
            rewards=rewards,
            tax_savings=round_money(0),
            timing_benefit=round_money(0),
            investment_growth=round_money(0),
            savings_amount=rewards,
            reasoning=(
                "This expense is not eligible for HSA reimbursement",
                f"A {rewards_rate:.1%} rewards card earns {format_money(rewards)} back on this expense",
            ),
        )

    payment = float(from_cents(payment_cents))
    tax_savings = principal * tax_rate
    timing = investment_growth(principal, rate / 12, card_payoff_months, payment)

    remaining = max(0.0, principal - payment * card_payoff_months) if payment > 0 else principal
    years_after_payoff = hsa_investment_years - card_payoff_months / 12
    long_term = 0.0
    if years_after_payoff > 0:
        long_term = remaining * float(growth_factor(rate, years_after_payoff)) - remaining

    total = principal * rewards_rate + tax_savings + timing + long_term
    logger.debug(
        "Recommendation for %s: timing=%.2f long_term=%.2f total=%.2f",
        principal,
        timing,
        long_term,
        total,
    )

    reasoning = [
        f"Credit card rewards: +{format_money(rewards)} (earned immediately)",
        f"HSA tax savings: +{format_money(tax_savings)} ({tax_rate:.0%} of expense)",
    ]
    if timing > 0:
        declining = " with declining balance" if payment > 0 else ""
        reasoning.append(
            f"Growth during payoff: +{format_money(timing)} "
            f"({card_payoff_months} months{declining})"
        )
    if long_term > 0:
        reasoning.append(
            f"Long-term growth: +{format_money(long_term)} "
            f"({years_after_payoff:.1f} years after payoff)"
        )
    reasoning.extend(
        [
            "Card must be paid off on time to avoid interest charges",
            "Receipts are required for HSA reimbursement; there is no deadline to submit",
        ]
    )

    payoff = "immediately" if card_payoff_months <= 1 else f"over {card_payoff_months} months"
    return PaymentRecommendation(
        method=RecommendedMethod.HSA_INVEST,
        title="Rewards Card + Delayed HSA Reimbursement",
        description=(
            f"Paying with a rewards card {payoff} and reimbursing from your HSA in "
            f"{hsa_investment_years:g} years could save you {format_money(total)}."
        ),
        rewards=rewards,
        tax_savings=round_money(tax_savings),
        timing_benefit=round_money(timing),
        investment_growth=round_money(long_term),
        savings_amount=round_money(total),
        reasoning=tuple(reasoning),
    )


def recommend_for_invoice(
    invoice: Invoice,
    rewards_rate: float = DEFAULT_REWARDS_RATE,
    tax_rate: float = DEFAULT_TAX_RATE,
    investment_return_rate: float = DEFAULT_INVESTMENT_RETURN_RATE,
    hsa_investment_years: Optional[float] = None,
) -> PaymentRecommendation:
    """Recommend a payment strategy for a recorded invoice.

    The card payoff period comes from the invoice. The investment horizon
    runs to the planned reimbursement date when one is set, otherwise it
    defaults to five years.
    """
    if hsa_investment_years is None:
        if invoice.planned_reimbursement_date is not None:
            hsa_investment_years = elapsed_years(
                invoice.date, invoice.planned_reimbursement_date
            )
        else:
            hsa_investment_years = DEFAULT_HSA_INVESTMENT_YEARS
    return recommend_payment(
        from_cents(invoiced_total_cents(invoice)),
        invoice.is_hsa_eligible,
        rewards_rate=rewards_rate,
        tax_rate=tax_rate,
        investment_return_rate=investment_return_rate,
        card_payoff_months=invoice.card_payoff_months,
        hsa_investment_years=hsa_investment_years,
    )
