"""Utility functions for hsarecon."""

from hsarecon.utils.date_parser import parse_date, parse_optional_date
from hsarecon.utils.amount_parser import parse_amount
from hsarecon.utils.money import format_money, from_cents, round_money, to_cents

__all__ = [
    "parse_date",
    "parse_optional_date",
    "parse_amount",
    "format_money",
    "from_cents",
    "round_money",
    "to_cents",
]
