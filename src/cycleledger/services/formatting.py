"""Display formatting for money and percentages."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
DEFAULT_SYMBOL = "₱"


def quantize_money(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal | int | float, symbol: str = DEFAULT_SYMBOL) -> str:
    """Absolute amount with symbol, thousands separators and two decimals.

    The sign is dropped; callers add "-" or an "Over"/"Left" label themselves.
    """
    value = abs(quantize_money(Decimal(str(amount))))
    return f"{symbol}{value:,.2f}"


def format_signed(amount: Decimal | int | float, symbol: str = DEFAULT_SYMBOL) -> str:
    sign = "-" if Decimal(str(amount)) < 0 else ""
    return f"{sign}{format_currency(amount, symbol)}"


def format_variance(amount: Decimal, *, income: bool = False, symbol: str = DEFAULT_SYMBOL) -> str:
    """Variance with a direction word, e.g. ``+₱50.00 Saved`` or ``-₱10.00 Below Forecast``."""
    positive = amount >= 0
    if income:
        word = "Above Forecast" if positive else "Below Forecast"
    else:
        word = "Saved" if positive else "Over"
    return f"{'+' if positive else '-'}{format_currency(amount, symbol)} {word}"


def format_percentage(value: Decimal) -> str:
    return f"{Decimal(value).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}%"
