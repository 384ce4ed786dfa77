"""Money and percentage arithmetic for the shop.

All amounts are whole currency units (tenge). Every discount or fee in the
system goes through :func:`apply_percent` / :func:`percent_of`, which round
half-up on exact decimal values, so a preview and the stored order can never
differ by a rounding unit.

Display formatting (:func:`format_amount`) rounds *up* and is presentation
only; its output must never be stored or summed.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from libs.common.config import get_settings

Number = Union[int, Decimal]

_HUNDRED = Decimal(100)
_ONE = Decimal(1)


def _check_percent(percent: Number) -> Decimal:
    value = Decimal(percent)
    if value < 0 or value > _HUNDRED:
        raise ValueError(f"percent must be between 0 and 100, got {percent}")
    return value


def round_half_up(value: Decimal) -> int:
    """Round to the nearest whole unit, halves away from zero."""
    return int(value.quantize(_ONE, rounding=ROUND_HALF_UP))


def apply_percent(amount: Number, percent: Number) -> int:
    """Take ``percent`` off ``amount``: ``round(amount * (1 - percent/100))``."""
    pct = _check_percent(percent)
    return round_half_up(Decimal(amount) * (_ONE - pct / _HUNDRED))


def percent_of(amount: Number, percent: Number) -> int:
    """Return ``round(amount * percent / 100)``."""
    pct = _check_percent(percent)
    return round_half_up(Decimal(amount) * pct / _HUNDRED)


def format_amount(value: Number | float, symbol: Optional[str] = None) -> str:
    """Format an amount for display, e.g. ``24840 -> "24 840 ₸"``.

    Fractions are rounded up to the next whole unit. ``symbol`` defaults to
    ``CURRENCY_SYMBOL``; pass ``""`` for a bare number.
    """
    if symbol is None:
        symbol = get_settings().CURRENCY_SYMBOL
    whole = math.ceil(value)
    grouped = f"{whole:,}".replace(",", " ")
    return f"{grouped} {symbol}" if symbol else grouped
