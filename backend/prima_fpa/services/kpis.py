"""Insurance KPI ratios derived from per-measure totals.

The three underwriting ratios are fixed formulas over net earned premium.
Additional ratios are declared as ``RatioDefinition`` rows on the
``KpiConfig`` passed in by the caller, so nothing here depends on stored
user preferences.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal

from prima_fpa.models.enums import KpiFormat, RatioCategory, Scenario
from prima_fpa.services.aggregation import LedgerFact, measure_totals
from prima_fpa.services.variance import VarianceResult, calculate_variance
from prima_fpa.utils.decimal_math import ZERO, ratio, safe_divide, to_decimal


@dataclass(frozen=True)
class RatioDefinition:
    code: str
    name: str
    numerator: tuple[str, ...]
    denominator: str
    format: KpiFormat = KpiFormat.percentage
    category: RatioCategory = RatioCategory.custom
    active: bool = True
    description: str = ""


@dataclass(frozen=True)
class KpiConfig:
    claims_measure: str = "Claims"
    net_earned_premium_measure: str = "NEP"
    operating_expenses_measure: str = "Opex"
    extra_ratios: tuple[RatioDefinition, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class KpiResult:
    code: str
    name: str
    value: Decimal
    format: KpiFormat
    delta: VarianceResult | None = None


DEFAULT_EXTRA_RATIOS: tuple[RatioDefinition, ...] = (
    RatioDefinition(
        code="roe",
        name="ROE",
        numerator=("Net_Income",),
        denominator="Shareholders_Equity",
        category=RatioCategory.profitability,
        description="Return on equity: net income relative to shareholders' equity.",
    ),
    RatioDefinition(
        code="premium_to_surplus",
        name="Premium to Surplus",
        numerator=("GWP",),
        denominator="Surplus",
        format=KpiFormat.ratio,
        category=RatioCategory.leverage,
        active=False,
        description="Premium volume relative to surplus.",
    ),
)

DEFAULT_KPI_CONFIG = KpiConfig(extra_ratios=DEFAULT_EXTRA_RATIOS)


def _total(totals: Mapping[str, Decimal], measure: str) -> Decimal:
    return to_decimal(totals.get(measure))


def evaluate_ratio(definition: RatioDefinition, totals: Mapping[str, Decimal]) -> Decimal:
    numerator = sum((_total(totals, name) for name in definition.numerator), ZERO)
    return ratio(safe_divide(numerator, _total(totals, definition.denominator)))


def derive_ratios(
    totals: Mapping[str, Decimal],
    definitions: Iterable[RatioDefinition],
) -> list[KpiResult]:
    rows: list[KpiResult] = []
    for definition in definitions:
        if not definition.active or definition.denominator not in totals:
            continue
        rows.append(
            KpiResult(
                code=definition.code,
                name=definition.name,
                value=evaluate_ratio(definition, totals),
                format=definition.format,
            )
        )
    return rows


def derive_kpis(
    totals: Mapping[str, Decimal],
    config: KpiConfig = DEFAULT_KPI_CONFIG,
    *,
    prior_totals: Mapping[str, Decimal] | None = None,
) -> list[KpiResult]:
    nep = _total(totals, config.net_earned_premium_measure)
    loss_ratio = ratio(safe_divide(_total(totals, config.claims_measure), nep))
    expense_ratio = ratio(safe_divide(_total(totals, config.operating_expenses_measure), nep))

    rows = [
        KpiResult(code="loss_ratio", name="Loss Ratio", value=loss_ratio, format=KpiFormat.percentage),
        KpiResult(code="expense_ratio", name="Expense Ratio", value=expense_ratio, format=KpiFormat.percentage),
        KpiResult(
            code="combined_ratio",
            name="Combined Ratio",
            value=loss_ratio + expense_ratio,
            format=KpiFormat.percentage,
        ),
    ]
    rows.extend(derive_ratios(totals, config.extra_ratios))

    if prior_totals is None:
        return rows
    prior = {row.code: row.value for row in derive_kpis(prior_totals, config)}
    return [
        replace(row, delta=calculate_variance(row.value, prior[row.code])) if row.code in prior else row
        for row in rows
    ]


def kpis_for_period(
    facts: Iterable[LedgerFact],
    *,
    period: str,
    scenario: Scenario = Scenario.actual,
    prior_period: str | None = None,
    config: KpiConfig = DEFAULT_KPI_CONFIG,
) -> list[KpiResult]:
    rows = list(facts)
    current = measure_totals([fact for fact in rows if fact.period == period], scenario)
    prior = None
    if prior_period is not None:
        prior = measure_totals([fact for fact in rows if fact.period == prior_period], scenario)
    return derive_kpis(current, config, prior_totals=prior)
