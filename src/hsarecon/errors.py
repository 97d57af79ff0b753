"""Shared error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input that breaks the calculation contract."""


class InvalidReturnRateError(ValidationError):
    """Annual return rate at or below -100%."""


class NotFoundError(DomainError):
    """Requested record does not exist."""


def invoice_not_found(invoice_id: str) -> str:
    """Return message for missing invoice."""
    return f"Invoice '{invoice_id}' not found"


def invalid_return_rate(rate: float) -> str:
    """Return message for a return rate that would wipe out the principal."""
    return f"Annual return rate must be greater than -100%, got {rate:.2%}"


def negative_amount(field: str, record_id: str) -> str:
    """Return message for a negative money field."""
    return f"{field} cannot be negative (record '{record_id}')"


def unknown_choice(field: str, value: object, choices: list[str]) -> str:
    """Return message for a value outside an enumerated set."""
    return f"Unknown {field} {value!r}. Expected one of: {', '.join(choices)}"


def growth_out_of_range(rate: float, years: float) -> str:
    """Return message for a growth projection too large to represent."""
    return f"Growth at {rate:.2%} over {years:.1f} years is too large to project"
