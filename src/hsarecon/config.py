"""Runtime settings resolved from environment variables."""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

from hsarecon.domain.entities import EligibilityMode
from hsarecon.domain.vault import validate_return_rate
from hsarecon.errors import ValidationError


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    return_rate: float = 0.08
    eligibility_mode: EligibilityMode = EligibilityMode.WINDOW_WHEN_ACCOUNTS
    rewards_rate: float = 0.02
    tax_rate: float = 0.30
    growth_rate: float = 0.07
    growth_years: int = 30


def _float(environ: Mapping[str, str], name: str, default: str) -> float:
    raw = environ.get(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number, got {raw!r}")


def _int(environ: Mapping[str, str], name: str, default: str) -> int:
    raw = environ.get(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {raw!r}")


def default_data_dir() -> Path:
    return Path.home() / ".hsarecon"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from an environment mapping (defaults to os.environ)."""
    environ = os.environ if environ is None else environ

    data_dir = environ.get("HSARECON_DATA_DIR")
    rates = {
        "return_rate": _float(environ, "HSARECON_RETURN_RATE", "0.08"),
        "rewards_rate": _float(environ, "HSARECON_REWARDS_RATE", "0.02"),
        "tax_rate": _float(environ, "HSARECON_TAX_RATE", "0.30"),
        "growth_rate": _float(environ, "HSARECON_GROWTH_RATE", "0.07"),
    }
    validate_return_rate(rates["return_rate"])
    validate_return_rate(rates["growth_rate"])
    for name in ("rewards_rate", "tax_rate"):
        if not 0 <= rates[name] <= 1:
            raise ValidationError(f"{name} must be between 0 and 1, got {rates[name]}")

    growth_years = _int(environ, "HSARECON_GROWTH_YEARS", "30")
    if growth_years < 0:
        raise ValidationError(f"HSARECON_GROWTH_YEARS cannot be negative, got {growth_years}")

    return Settings(
        data_dir=Path(data_dir).expanduser() if data_dir else default_data_dir(),
        eligibility_mode=EligibilityMode.parse(
            environ.get("HSARECON_ELIGIBILITY_MODE", "window_when_accounts")
        ),
        growth_years=growth_years,
        **rates,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
