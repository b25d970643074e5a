from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

from prima_fpa.models.enums import Dimension, Scenario
from prima_fpa.services.aggregation import LedgerFact, resolve_dimensions, scenario_totals
from prima_fpa.utils.decimal_math import ZERO, ratio, safe_divide, to_decimal
from prima_fpa.utils.formatting import Favorability, favorability, is_revenue_measure


DEFAULT_SIGNIFICANCE = Decimal("0.10")

Trend = Literal["up", "down", "flat"]


@dataclass(frozen=True)
class VarianceResult:
    actual: Decimal
    comparison: Decimal
    absolute_variance: Decimal
    percent_variance: Decimal


@dataclass(frozen=True)
class VarianceRow:
    key: tuple[str, ...]
    variance: VarianceResult
    forecast: Decimal
    significant: bool
    favorability: Favorability


@dataclass(frozen=True)
class VarianceSummary:
    favorable_count: int
    unfavorable_count: int
    net_variance: Decimal


@dataclass(frozen=True)
class MeasureKpi:
    name: str
    actual: Decimal
    budget: Decimal
    variance: VarianceResult
    trend: Trend


def calculate_variance(
    actual: Decimal | int | float | str | None,
    comparison: Decimal | int | float | str | None,
) -> VarianceResult:
    """Actual minus comparison; percent is a fraction of comparison, 0 when comparison is 0."""
    actual_value = to_decimal(actual)
    comparison_value = to_decimal(comparison)
    absolute = actual_value - comparison_value
    return VarianceResult(
        actual=actual_value,
        comparison=comparison_value,
        absolute_variance=absolute,
        percent_variance=ratio(safe_divide(absolute, comparison_value)),
    )


def _trend(absolute: Decimal) -> Trend:
    if absolute > 0:
        return "up"
    if absolute < 0:
        return "down"
    return "flat"


def variance_dimensions(
    group_by: Dimension | str | Sequence[Dimension | str],
    measure: str | None = None,
) -> list[Dimension]:
    """Grouping used for a variance table; without a single measure, rows are split per measure."""
    dimensions = resolve_dimensions(group_by)
    if measure is None and Dimension.measure not in dimensions:
        dimensions.append(Dimension.measure)
    return dimensions


def variance_table(
    facts: Iterable[LedgerFact],
    group_by: Dimension | str | Sequence[Dimension | str],
    *,
    base: Scenario = Scenario.actual,
    comparison: Scenario = Scenario.budget,
    measure: str | None = None,
    significance_pct: Decimal = DEFAULT_SIGNIFICANCE,
) -> list[VarianceRow]:
    if base == comparison:
        raise ValueError("base and comparison scenarios must differ.")
    selected = [fact for fact in facts if measure is None or fact.measure == measure]
    dimensions = variance_dimensions(group_by, measure)
    measure_index = dimensions.index(Dimension.measure) if measure is None else None
    threshold = abs(to_decimal(significance_pct))

    rows: list[VarianceRow] = []
    for key, totals in scenario_totals(selected, dimensions).items():
        result = calculate_variance(totals.get(base), totals.get(comparison))
        revenue_type = is_revenue_measure(measure if measure_index is None else key[measure_index])
        rows.append(
            VarianceRow(
                key=key,
                variance=result,
                forecast=totals.forecast,
                significant=abs(result.percent_variance) > threshold,
                favorability=favorability(result.absolute_variance, revenue_type=revenue_type),
            )
        )
    return sorted(rows, key=lambda row: abs(row.variance.absolute_variance), reverse=True)


def summarize_variances(rows: Iterable[VarianceRow]) -> VarianceSummary:
    favorable = 0
    unfavorable = 0
    net = ZERO
    for row in rows:
        net += row.variance.absolute_variance
        if row.favorability == "success":
            favorable += 1
        elif row.favorability == "danger":
            unfavorable += 1
    return VarianceSummary(favorable_count=favorable, unfavorable_count=unfavorable, net_variance=net)


def measure_kpis(facts: Iterable[LedgerFact]) -> list[MeasureKpi]:
    rows: list[MeasureKpi] = []
    for (name,), totals in scenario_totals(facts, Dimension.measure).items():
        result = calculate_variance(totals.actual, totals.budget)
        rows.append(
            MeasureKpi(
                name=name,
                actual=totals.actual,
                budget=totals.budget,
                variance=result,
                trend=_trend(result.absolute_variance),
            )
        )
    return rows
