from __future__ import annotations

from decimal import Decimal

from ..money import round_money, to_decimal


def format_currency(value: Decimal) -> str:
    """Format a BRL amount the pt-BR way: ``R$ 1.234.567,89``."""
    amount = round_money(value)
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,.2f}"
    # swap en-US separators for pt-BR ones
    grouped = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {grouped}"


def format_percentage(rate: Decimal, decimals: int = 2) -> str:
    percent = to_decimal(rate) * 100
    return f"{percent:.{decimals}f}".replace(".", ",") + "%"
