from decimal import Decimal

import pytest

from prima_fpa.models.enums import KpiFormat
from prima_fpa.utils.decimal_math import money, ratio, safe_divide, to_decimal
from prima_fpa.utils.formatting import (
    favorability,
    format_currency,
    format_percentage,
    format_ratio,
    format_value,
    is_revenue_measure,
    variance_icon,
)
from prima_fpa.utils.periods import month_range, next_periods, parse_period, quarter_of, quarter_periods


def test_to_decimal_coercion() -> None:
    assert to_decimal("12.50") == Decimal("12.50")
    assert to_decimal(3) == Decimal("3")
    assert to_decimal(None) == Decimal("0")
    assert to_decimal("nope") == Decimal("0")
    assert to_decimal(float("inf")) == Decimal("0")
    assert to_decimal(True) == Decimal("0")
    assert to_decimal("x", default=Decimal("-1")) == Decimal("-1")


def test_safe_divide_guard() -> None:
    assert safe_divide(Decimal("10"), Decimal("4")) == Decimal("2.5")
    assert safe_divide(Decimal("10"), Decimal("0")) == Decimal("0")


def test_currency_and_number_formatting() -> None:
    assert format_currency(Decimal("1234567.4")) == "€1,234,567"
    assert format_currency(Decimal("-5000")) == "-€5,000"
    assert format_currency(Decimal("5000"), show_sign=True) == "+€5,000"
    assert format_currency(Decimal("10"), "USD") == "$10"
    assert format_currency(Decimal("10"), "CHF") == "CHF 10"
    assert format_value(Decimal("9876.5"), KpiFormat.number) == "9,877"


def test_percentage_and_ratio_formatting() -> None:
    assert format_percentage(Decimal("0.041667")) == "4.2%"
    assert format_percentage(Decimal("0.041667"), show_sign=True) == "+4.2%"
    assert format_percentage(Decimal("-0.375")) == "-37.5%"
    assert format_ratio(Decimal("1.25")) == "1.25x"
    assert format_value(Decimal("0.786802"), KpiFormat.percentage) == "78.7%"
    assert format_value(Decimal("3"), KpiFormat.ratio) == "3.00x"


def test_favorability_depends_on_measure_type() -> None:
    assert is_revenue_measure("GWP")
    assert not is_revenue_measure("Opex")
    assert favorability(Decimal("5")) == "success"
    assert favorability(Decimal("-5")) == "danger"
    assert favorability(Decimal("5"), revenue_type=False) == "danger"
    assert favorability(Decimal("-5"), revenue_type=False) == "success"
    assert favorability(Decimal("0.001")) == "neutral"
    assert variance_icon(Decimal("2")) == "↑"
    assert variance_icon(Decimal("-2")) == "↓"
    assert variance_icon(Decimal("0")) == "→"


def test_parse_period_variants() -> None:
    assert parse_period("2026-03").key == "2026-03"
    assert parse_period("2026-3").month == 3
    assert parse_period("2025-q4").quarter == 4
    assert parse_period("2025-W07").key == "2025-W07"


@pytest.mark.parametrize("value", ["", "2026", "2026-13", "2026-Q5", "2026-W54", "March 2026"])
def test_parse_period_rejects_invalid(value: str) -> None:
    with pytest.raises(ValueError):
        parse_period(value)


def test_quarter_helpers() -> None:
    assert quarter_periods(2025, 4) == ["2025-10", "2025-11", "2025-12"]
    assert quarter_of("2026-05").key == "2026-Q2"
    with pytest.raises(ValueError):
        quarter_periods(2025, 0)


def test_next_periods() -> None:
    assert next_periods("2025-12", 2) == ["2026-01", "2026-02"]
    assert next_periods("2025-12", 0) == []


def test_rounding_helpers_handle_wide_values() -> None:
    assert money(Decimal("123456789012345678901234567.895")) == Decimal("123456789012345678901234567.90")
    assert ratio(Decimal("1e30")).as_tuple().exponent == -6
    assert money(Decimal("0.005")) == Decimal("0.01")
    assert format_percentage(Decimal("1e24")) == "100000000000000000000000000.0%"
    assert format_currency(Decimal("1e30")).startswith("€1,000,000,000")


def test_month_range_is_contiguous() -> None:
    assert month_range("2025-11", "2026-02") == ["2025-11", "2025-12", "2026-01", "2026-02"]
    assert month_range("2026-03", "2026-03") == ["2026-03"]
    assert month_range("2026-04", "2026-03") == []
    with pytest.raises(ValueError):
        month_range("2026-Q1", "2026-03")
