"""
Currency helpers for gateway payloads.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

__all__ = ["ZERO_DECIMAL_CURRENCIES", "amount_by_currency", "currency_code"]

# Currencies the card processors expect in whole units.
ZERO_DECIMAL_CURRENCIES = frozenset(
    {
        "BIF",
        "CLP",
        "DJF",
        "GNF",
        "JPY",
        "KMF",
        "KRW",
        "MGA",
        "PYG",
        "RWF",
        "UGX",
        "VND",
        "VUV",
        "XAF",
        "XOF",
        "XPF",
    }
)


def amount_by_currency(currency: Optional[str], amount: Any) -> int:
    """
    Convert ``amount`` to the smallest unit of ``currency``.

    >>> amount_by_currency("EUR", 10.5)
    1050
    >>> amount_by_currency("JPY", 1200)
    1200
    """
    try:
        value = Decimal(str(amount if amount is not None else 0))
    except InvalidOperation as exc:
        raise ValueError(f"Amount {amount!r} is not a number") from exc

    code = (currency or "").upper()
    multiplier = 1 if code in ZERO_DECIMAL_CURRENCIES else 100
    return int((value * multiplier).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def currency_code(currency: Optional[str], default: str) -> str:
    """Lower-cased currency code as the card processors expect it."""
    return (currency or default).lower()
