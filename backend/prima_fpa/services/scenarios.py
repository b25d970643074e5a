from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from prima_fpa.services.variance import VarianceResult, calculate_variance
from prima_fpa.utils.decimal_math import money, to_decimal


PRICE_VOLUME_MEASURES = frozenset({"revenue", "gwp", "nep"})
LOSS_MEASURES = frozenset({"lr", "loss_ratio", "claims"})


@dataclass(frozen=True)
class ScenarioParams:
    """Percentage levers, e.g. ``price_change=5`` means +5%."""

    price_change: Decimal = Decimal("0")
    volume_change: Decimal = Decimal("0")
    conversion_change: Decimal = Decimal("0")
    retention_change: Decimal = Decimal("0")
    opex_change: Decimal = Decimal("0")
    loss_ratio_change: Decimal = Decimal("0")


@dataclass(frozen=True)
class SimulatedMeasure:
    measure: str
    base: Decimal
    adjusted: Decimal
    impact: VarianceResult


def _factor(change_pct: Decimal) -> Decimal:
    return Decimal("1") + to_decimal(change_pct) / Decimal("100")


def apply_scenario_changes(
    base_value: Decimal | int | float | str,
    measure: str,
    params: ScenarioParams,
) -> Decimal:
    value = to_decimal(base_value)
    key = measure.strip().lower()
    if key in PRICE_VOLUME_MEASURES:
        return value * _factor(params.price_change) * _factor(params.volume_change)
    if key == "conversion":
        return value * _factor(params.conversion_change)
    if key == "retention":
        return value * _factor(params.retention_change)
    if key == "opex":
        return value * _factor(params.opex_change)
    if key in LOSS_MEASURES:
        return value * _factor(params.loss_ratio_change)
    return value


def simulate(totals: Mapping[str, Decimal], params: ScenarioParams) -> list[SimulatedMeasure]:
    rows: list[SimulatedMeasure] = []
    for measure in sorted(totals):
        base = money(to_decimal(totals[measure]))
        adjusted = money(apply_scenario_changes(base, measure, params))
        rows.append(
            SimulatedMeasure(
                measure=measure,
                base=base,
                adjusted=adjusted,
                impact=calculate_variance(adjusted, base),
            )
        )
    return rows
