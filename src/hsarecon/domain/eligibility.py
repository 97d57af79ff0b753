"""HSA account windows and date eligibility."""

import logging
from datetime import date, datetime
from typing import Iterable, Optional

from hsarecon.domain.entities import HSAAccount, InvalidAccountWindow
from hsarecon.errors import ValidationError

logger = logging.getLogger(__name__)


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"Expected a date, got {value!r}")


def validate_account_window(
    opened_date: date, closed_date: Optional[date]
) -> Optional[str]:
    """Check that an account closes strictly after it opens.

    Returns:
        Error message, or None if the window is valid
    """
    if closed_date is None:
        return None
    if _as_date(closed_date) <= _as_date(opened_date):
        return "Closed date must be after opened date"
    return None


def has_valid_window(account: HSAAccount) -> bool:
    return validate_account_window(account.opened_date, account.closed_date) is None


def partition_accounts(
    accounts: Iterable[HSAAccount],
) -> tuple[list[HSAAccount], list[InvalidAccountWindow]]:
    """Split accounts into usable ones and data-quality warnings.

    Malformed accounts are left out of eligibility checks rather than
    raising.
    """
    valid: list[HSAAccount] = []
    invalid: list[InvalidAccountWindow] = []
    for account in accounts:
        if has_valid_window(account):
            valid.append(account)
            continue
        logger.warning(
            "HSA account %s has closed_date %s on or before opened_date %s",
            account.id,
            account.closed_date,
            account.opened_date,
        )
        invalid.append(
            InvalidAccountWindow(
                account_id=account.id,
                opened_date=_as_date(account.opened_date),
                closed_date=_as_date(account.closed_date),
            )
        )
    return valid, invalid


def is_date_in_window(day: date, account: HSAAccount) -> bool:
    """Check whether a date falls on or between an account's open and close dates."""
    day = _as_date(day)
    if day < _as_date(account.opened_date):
        return False
    if account.closed_date is None:
        return True
    return day <= _as_date(account.closed_date)


def eligible_accounts(day: date, accounts: Iterable[HSAAccount]) -> list[HSAAccount]:
    """Return every well-formed account whose window covers the date."""
    return [
        account
        for account in accounts
        if has_valid_window(account) and is_date_in_window(day, account)
    ]


def is_date_eligible(day: date, accounts: Iterable[HSAAccount]) -> bool:
    """Check whether an expense date is covered by any qualifying account.

    No accounts means no eligibility.
    """
    return bool(eligible_accounts(day, accounts))


def active_account(accounts: Iterable[HSAAccount]) -> Optional[HSAAccount]:
    """Return the most recently opened account that is active and not closed."""
    open_accounts = [
        account
        for account in accounts
        if account.is_active and account.closed_date is None
    ]
    if not open_accounts:
        return None
    return max(open_accounts, key=lambda account: _as_date(account.opened_date))


def format_account_date_range(account: HSAAccount) -> str:
    """Format an account's window for display, e.g. ``2020-01-01 - Present``."""
    opened = _as_date(account.opened_date).isoformat()
    if account.closed_date is None:
        return f"{opened} - Present"
    return f"{opened} - {_as_date(account.closed_date).isoformat()}"
