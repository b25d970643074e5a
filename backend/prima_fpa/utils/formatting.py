from __future__ import annotations

from decimal import Decimal
from typing import Literal

from prima_fpa.models.enums import KpiFormat
from prima_fpa.utils.decimal_math import quantize, to_decimal


Favorability = Literal["success", "danger", "neutral"]

NEUTRAL_BAND = Decimal("0.01")

# Measures where a larger actual is good; everything else is treated as a cost.
REVENUE_MEASURES = frozenset({"gwp", "nep", "revenue", "gm", "ebitda", "contracts", "conversion", "retention"})

CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£"}


def is_revenue_measure(measure: str) -> bool:
    return measure.strip().lower() in REVENUE_MEASURES


def favorability(variance: Decimal | int | float, *, revenue_type: bool = True) -> Favorability:
    value = to_decimal(variance)
    if abs(value) < NEUTRAL_BAND:
        return "neutral"
    positive = value > 0
    if revenue_type:
        return "success" if positive else "danger"
    return "danger" if positive else "success"


def variance_icon(variance: Decimal | int | float) -> str:
    value = to_decimal(variance)
    if abs(value) < NEUTRAL_BAND:
        return "→"
    return "↑" if value > 0 else "↓"


def _signed(text: str, value: Decimal, show_sign: bool) -> str:
    if not show_sign or value == 0:
        return text
    return f"+{text}" if value > 0 else f"-{text}"


def format_number(value: Decimal | int | float, *, show_sign: bool = False) -> str:
    amount = to_decimal(value)
    text = f"{quantize(abs(amount), Decimal('1')):,}"
    if not show_sign and amount < 0:
        return f"-{text}"
    return _signed(text, amount, show_sign)


def format_currency(
    value: Decimal | int | float,
    currency: str = "EUR",
    *,
    show_sign: bool = False,
) -> str:
    amount = to_decimal(value)
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    text = f"{symbol}{quantize(abs(amount), Decimal('1')):,}"
    if not show_sign and amount < 0:
        return f"-{text}"
    return _signed(text, amount, show_sign)


def format_percentage(value: Decimal | int | float, *, show_sign: bool = False) -> str:
    """Render a fraction (0.0417) as a one-decimal percentage (4.2%)."""
    amount = to_decimal(value) * Decimal("100")
    text = f"{quantize(abs(amount), Decimal('0.1'))}%"
    if not show_sign and amount < 0:
        return f"-{text}"
    return _signed(text, amount, show_sign)


def format_ratio(value: Decimal | int | float) -> str:
    return f"{quantize(to_decimal(value), Decimal('0.01'))}x"


def format_value(
    value: Decimal | int | float,
    display: KpiFormat,
    *,
    currency: str = "EUR",
    show_sign: bool = False,
) -> str:
    if display == KpiFormat.percentage:
        return format_percentage(value, show_sign=show_sign)
    if display == KpiFormat.currency:
        return format_currency(value, currency, show_sign=show_sign)
    if display == KpiFormat.ratio:
        return format_ratio(value)
    return format_number(value, show_sign=show_sign)
