from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from prima_fpa.models.enums import ForecastMethod, KpiFormat, Scenario
from prima_fpa.schemas.common import ORMModel


Favorability = Literal["success", "danger", "neutral"]


class AggregateRowOut(BaseModel):
    key: list[str]
    value: Decimal


class AggregateResponse(BaseModel):
    group_by: list[str]
    scenarios: list[Scenario]
    total: Decimal
    rows: list[AggregateRowOut]


class VarianceOut(ORMModel):
    actual: Decimal
    comparison: Decimal
    absolute_variance: Decimal
    percent_variance: Decimal


class VarianceRowOut(BaseModel):
    key: list[str]
    variance: VarianceOut
    forecast: Decimal
    significant: bool
    favorability: Favorability


class VarianceSummaryOut(ORMModel):
    favorable_count: int
    unfavorable_count: int
    net_variance: Decimal


class VarianceResponse(BaseModel):
    group_by: list[str]
    base: Scenario
    comparison: Scenario
    measure: str | None = None
    rows: list[VarianceRowOut]
    summary: VarianceSummaryOut


class KpiOut(ORMModel):
    code: str
    name: str
    value: Decimal
    format: KpiFormat
    display: str
    delta: VarianceOut | None = None


class KpiResponse(BaseModel):
    period: str
    prior_period: str | None = None
    scenario: Scenario
    kpis: list[KpiOut]


class MeasureKpiOut(ORMModel):
    name: str
    actual: Decimal
    budget: Decimal
    variance: VarianceOut
    trend: Literal["up", "down", "flat"]


class ForecastPointOut(ORMModel):
    period: int
    period_key: str | None = None
    projected_value: Decimal
    confidence_low: Decimal | None = None
    confidence_high: Decimal | None = None


class ProjectionResponse(BaseModel):
    base_value: Decimal
    growth_rate: Decimal
    confidence_spread: Decimal | None = None
    points: list[ForecastPointOut]


class HistoryForecastResponse(BaseModel):
    measure: str
    method: ForecastMethod
    history: list[Decimal]
    history_periods: list[str]
    forecast: list[Decimal]
    forecast_periods: list[str]


class ScenarioRequest(BaseModel):
    price_change: Decimal = Field(default=Decimal("0"), ge=Decimal("-50"), le=Decimal("50"))
    volume_change: Decimal = Field(default=Decimal("0"), ge=Decimal("-40"), le=Decimal("40"))
    conversion_change: Decimal = Field(default=Decimal("0"), ge=Decimal("-30"), le=Decimal("30"))
    retention_change: Decimal = Field(default=Decimal("0"), ge=Decimal("-30"), le=Decimal("30"))
    opex_change: Decimal = Field(default=Decimal("0"), ge=Decimal("-25"), le=Decimal("25"))
    loss_ratio_change: Decimal = Field(default=Decimal("0"), ge=Decimal("-25"), le=Decimal("25"))
    scenario: Scenario = Scenario.actual
    period_from: str | None = None
    period_to: str | None = None


class SimulatedMeasureOut(ORMModel):
    measure: str
    base: Decimal
    adjusted: Decimal
    impact: VarianceOut


class ScenarioResponse(BaseModel):
    assumptions: dict[str, Decimal]
    measures: list[SimulatedMeasureOut]
