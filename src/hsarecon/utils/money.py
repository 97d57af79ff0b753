"""Money helpers.

Amounts are carried as integer cents inside the engine and converted back to
``Decimal`` (quantized to the cent) only when building output records.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from hsarecon.errors import ValidationError

CENT = Decimal("0.01")


def to_cents(value: Any, field: str = "amount") -> int:
    """Convert a numeric amount into integer cents.

    Args:
        value: Decimal, int, float or numeric string
        field: Field name used in error messages

    Returns:
        Amount in cents, rounded half-up

    Raises:
        ValidationError: If the value is missing, boolean or not numeric
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be numeric, got {value!r}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        return value * 100
    elif isinstance(value, (float, str)):
        try:
            # str() keeps floats like 0.1 from dragging in binary noise
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{field} must be numeric, got {value!r}")
    else:
        raise ValidationError(f"{field} must be numeric, got {value!r}")

    if not amount.is_finite():
        raise ValidationError(f"{field} must be finite, got {value!r}")

    try:
        cents = (amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"{field} is out of range, got {value!r}")
    return int(cents)


def from_cents(cents: int) -> Decimal:
    """Convert integer cents to a Decimal with two places."""
    return (Decimal(cents) / 100).quantize(CENT)


def clamp_non_negative(cents: int) -> int:
    """Clamp a cent amount at zero."""
    return max(0, cents)


def round_money(value: Any) -> Decimal:
    """Round any numeric value to the cent."""
    return from_cents(to_cents(value))


def format_money(value: Any) -> str:
    """Format an amount for display, e.g. ``$1,234.56``."""
    amount = round_money(value)
    if amount < 0:
        return f"-${-amount:,.2f}"
    return f"${amount:,.2f}"
