from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from prima_fpa.models.enums import Dimension, Scenario
from prima_fpa.utils.decimal_math import ZERO, to_decimal
from prima_fpa.utils.periods import quarter_periods


MISSING_KEY = "N/A"


@dataclass(frozen=True)
class LedgerFact:
    scenario: Scenario
    measure: str
    value: Decimal | None
    period: str
    market: str | None = None
    department: str | None = None
    product: str | None = None
    channel: str | None = None


@dataclass(frozen=True)
class ScenarioTotals:
    actual: Decimal = ZERO
    budget: Decimal = ZERO
    forecast: Decimal = ZERO

    def get(self, scenario: Scenario) -> Decimal:
        return getattr(self, scenario.name)


GroupKey = tuple[str, ...]


def resolve_dimensions(group_by: Dimension | str | Sequence[Dimension | str]) -> list[Dimension]:
    if isinstance(group_by, (str, Dimension)):
        group_by = [group_by]
    try:
        return [Dimension(item) for item in group_by]
    except ValueError as exc:
        raise ValueError(f"Unknown group_by dimension: {exc}") from exc


def _scenario(value: Any) -> Scenario | None:
    if isinstance(value, Scenario):
        return value
    try:
        return Scenario(str(value).upper())
    except ValueError:
        return None


def group_key(fact: LedgerFact, dimensions: Sequence[Dimension]) -> GroupKey:
    parts: list[str] = []
    for dimension in dimensions:
        value = getattr(fact, dimension.value, None)
        parts.append(str(value) if value not in (None, "") else MISSING_KEY)
    return tuple(parts)


def aggregate_facts(
    facts: Iterable[LedgerFact],
    group_by: Dimension | str | Sequence[Dimension | str],
    scenarios: Iterable[Scenario | str] | None = None,
) -> dict[GroupKey, Decimal]:
    dimensions = resolve_dimensions(group_by)
    allowed = None if scenarios is None else {_scenario(item) for item in scenarios} - {None}

    totals: dict[GroupKey, Decimal] = {}
    for fact in facts:
        scenario = _scenario(fact.scenario)
        if scenario is None or (allowed is not None and scenario not in allowed):
            continue
        key = group_key(fact, dimensions)
        totals[key] = totals.get(key, ZERO) + to_decimal(fact.value)
    return totals


def scenario_totals(
    facts: Iterable[LedgerFact],
    group_by: Dimension | str | Sequence[Dimension | str],
) -> dict[GroupKey, ScenarioTotals]:
    dimensions = resolve_dimensions(group_by)
    buckets: dict[GroupKey, dict[Scenario, Decimal]] = {}
    for fact in facts:
        scenario = _scenario(fact.scenario)
        if scenario is None:
            continue
        bucket = buckets.setdefault(group_key(fact, dimensions), {})
        bucket[scenario] = bucket.get(scenario, ZERO) + to_decimal(fact.value)

    return {
        key: ScenarioTotals(
            actual=bucket.get(Scenario.actual, ZERO),
            budget=bucket.get(Scenario.budget, ZERO),
            forecast=bucket.get(Scenario.forecast, ZERO),
        )
        for key, bucket in buckets.items()
    }


def measure_totals(facts: Iterable[LedgerFact], scenario: Scenario | str) -> dict[str, Decimal]:
    grouped = aggregate_facts(facts, Dimension.measure, [scenario])
    return {key[0]: value for key, value in grouped.items()}


def aggregate_quarter(
    facts: Iterable[LedgerFact],
    *,
    year: int,
    quarter: int,
    measure: str | None = None,
) -> ScenarioTotals:
    months = set(quarter_periods(year, quarter))
    selected = [
        fact
        for fact in facts
        if fact.period in months and (measure is None or fact.measure == measure)
    ]
    grouped = scenario_totals(selected, [])
    return grouped.get((), ScenarioTotals())
