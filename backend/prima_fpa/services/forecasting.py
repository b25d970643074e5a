from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
import logging

from prima_fpa.models.enums import ForecastMethod
from prima_fpa.utils.decimal_math import ZERO, money, to_decimal
from prima_fpa.utils.periods import next_periods


logger = logging.getLogger("prima_fpa.forecasting")

MOVING_AVERAGE_WINDOW = 3
SEASON_LENGTH = 12


@dataclass(frozen=True)
class ForecastPoint:
    period: int
    projected_value: Decimal
    confidence_low: Decimal | None = None
    confidence_high: Decimal | None = None
    period_key: str | None = None


def _compound(base: Decimal, rate: Decimal, periods_ahead: int) -> Decimal:
    return money(base * (Decimal("1") + rate) ** periods_ahead)


def project(
    base_value: Decimal | int | float | str,
    growth_rate: Decimal | int | float | str,
    periods: int,
    confidence_spread: Decimal | int | float | str | None = None,
    *,
    start_period: str | None = None,
) -> list[ForecastPoint]:
    if periods <= 0:
        return []
    base = to_decimal(base_value)
    rate = to_decimal(growth_rate)
    spread = abs(to_decimal(confidence_spread)) if confidence_spread is not None else None
    labels = next_periods(start_period, periods) if start_period else [None] * periods

    points: list[ForecastPoint] = []
    for index in range(1, periods + 1):
        points.append(
            ForecastPoint(
                period=index,
                projected_value=_compound(base, rate, index),
                confidence_low=_compound(base, rate - spread, index) if spread is not None else None,
                confidence_high=_compound(base, rate + spread, index) if spread is not None else None,
                period_key=labels[index - 1],
            )
        )
    return points


def _flat(value: Decimal, periods: int) -> list[Decimal]:
    return [money(value)] * periods


def _compound_series(last_value: Decimal, rate: Decimal, periods: int) -> list[Decimal]:
    rows: list[Decimal] = []
    current = last_value
    for _ in range(periods):
        current = current * (Decimal("1") + rate)
        rows.append(money(current))
    return rows


def average_yoy_growth(series: Sequence[Decimal]) -> Decimal | None:
    if len(series) < SEASON_LENGTH * 2:
        return None
    current_year = series[-SEASON_LENGTH:]
    previous_year = series[-SEASON_LENGTH * 2 : -SEASON_LENGTH]
    rates = [
        (current - previous) / previous
        for current, previous in zip(current_year, previous_year)
        if previous != 0
    ]
    if not rates:
        return None
    return sum(rates, ZERO) / Decimal(len(rates))


def compound_growth_rate(series: Sequence[Decimal]) -> Decimal | None:
    if len(series) < 2:
        return None
    first, last = series[0], series[-1]
    if first <= 0 or last <= 0:
        return None
    return (last / first) ** (Decimal("1") / Decimal(len(series) - 1)) - Decimal("1")


def forecast_from_history(
    history: Sequence[Decimal | int | float | str | None],
    method: ForecastMethod | str,
    periods: int = 12,
) -> list[Decimal]:
    """Extend a historical series by ``periods`` values using one of the dashboard methods."""
    method = ForecastMethod(method)
    series = [to_decimal(value) for value in history]
    if not series or periods <= 0:
        return []
    last_value = series[-1]

    if method == ForecastMethod.moving_average:
        window = series[-MOVING_AVERAGE_WINDOW:]
        return _flat(sum(window, ZERO) / Decimal(len(window)), periods)

    if method == ForecastMethod.yoy_growth:
        growth = average_yoy_growth(series)
        if growth is None:
            logger.info("YoY forecast needs %s usable points, got %s; holding last value.", SEASON_LENGTH * 2, len(series))
            return _flat(last_value, periods)
        return _compound_series(last_value, growth, periods)

    growth = compound_growth_rate(series)
    if growth is None:
        logger.info("CAGR forecast needs two positive endpoints; holding last value.")
        return _flat(last_value, periods)
    return _compound_series(last_value, growth, periods)
