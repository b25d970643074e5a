from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from prima_fpa.api.deps import get_db, group_by_param, scenario_param
from prima_fpa.core.config import get_settings
from prima_fpa.models.enums import Dimension, ForecastMethod, Scenario
from prima_fpa.schemas.analytics import (
    AggregateResponse,
    AggregateRowOut,
    ForecastPointOut,
    HistoryForecastResponse,
    KpiOut,
    KpiResponse,
    MeasureKpiOut,
    ProjectionResponse,
    ScenarioRequest,
    ScenarioResponse,
    SimulatedMeasureOut,
    VarianceOut,
    VarianceResponse,
    VarianceRowOut,
    VarianceSummaryOut,
)
from prima_fpa.services.aggregation import aggregate_facts, measure_totals
from prima_fpa.services.facts import get_period_or_404, load_facts
from prima_fpa.services.forecasting import forecast_from_history, project
from prima_fpa.services.kpis import kpis_for_period
from prima_fpa.services.scenarios import ScenarioParams, simulate
from prima_fpa.services.variance import measure_kpis, summarize_variances, variance_dimensions, variance_table
from prima_fpa.utils.decimal_math import ZERO
from prima_fpa.utils.formatting import format_value
from prima_fpa.utils.periods import month_range, next_periods


router = APIRouter(prefix="/analytics", tags=["analytics"])


def _bad_request(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/aggregate", response_model=AggregateResponse)
def get_aggregate(
    group_by: list[Dimension] = Depends(group_by_param),
    scenarios: list[Scenario] = Depends(scenario_param),
    measure: list[str] | None = Query(default=None),
    period_from: str | None = Query(default=None),
    period_to: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> AggregateResponse:
    facts = load_facts(db, scenarios=scenarios, measures=measure, period_from=period_from, period_to=period_to)
    grouped = aggregate_facts(facts, group_by, scenarios)
    return AggregateResponse(
        group_by=[item.value for item in group_by],
        scenarios=scenarios,
        total=sum(grouped.values(), ZERO),
        rows=[AggregateRowOut(key=list(key), value=value) for key, value in sorted(grouped.items())],
    )


@router.get("/variance", response_model=VarianceResponse)
def get_variance(
    group_by: list[Dimension] = Depends(group_by_param),
    measure: str | None = Query(default=None),
    base: Scenario = Query(default=Scenario.actual),
    comparison: Scenario = Query(default=Scenario.budget),
    period_from: str | None = Query(default=None),
    period_to: str | None = Query(default=None),
    significance_pct: Decimal | None = Query(default=None, ge=Decimal("0")),
    db: Session = Depends(get_db),
) -> VarianceResponse:
    settings = get_settings()
    facts = load_facts(
        db,
        scenarios=[base, comparison, Scenario.forecast],
        measures=[measure] if measure else None,
        period_from=period_from,
        period_to=period_to,
    )
    try:
        rows = variance_table(
            facts,
            group_by,
            base=base,
            comparison=comparison,
            measure=measure,
            significance_pct=significance_pct if significance_pct is not None else settings.variance_significance_pct,
        )
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return VarianceResponse(
        group_by=[item.value for item in variance_dimensions(group_by, measure)],
        base=base,
        comparison=comparison,
        measure=measure,
        rows=[
            VarianceRowOut(
                key=list(row.key),
                variance=VarianceOut.model_validate(row.variance),
                forecast=row.forecast,
                significant=row.significant,
                favorability=row.favorability,
            )
            for row in rows
        ],
        summary=VarianceSummaryOut.model_validate(summarize_variances(rows)),
    )


@router.get("/kpis", response_model=KpiResponse)
def get_kpis(
    period: str = Query(...),
    prior_period: str | None = Query(default=None),
    scenario: Scenario = Query(default=Scenario.actual),
    db: Session = Depends(get_db),
) -> KpiResponse:
    settings = get_settings()
    period = get_period_or_404(db, period).period_key
    keys = [period]
    if prior_period is not None:
        prior_period = get_period_or_404(db, prior_period).period_key
        keys.append(prior_period)
    facts = load_facts(db, scenarios=[scenario], period_from=min(keys), period_to=max(keys))
    results = kpis_for_period(facts, period=period, scenario=scenario, prior_period=prior_period)
    return KpiResponse(
        period=period,
        prior_period=prior_period,
        scenario=scenario,
        kpis=[
            KpiOut(
                code=row.code,
                name=row.name,
                value=row.value,
                format=row.format,
                display=format_value(row.value, row.format, currency=settings.reports_currency),
                delta=VarianceOut.model_validate(row.delta) if row.delta is not None else None,
            )
            for row in results
        ],
    )


@router.get("/measures", response_model=list[MeasureKpiOut])
def get_measure_cards(
    period_from: str | None = Query(default=None),
    period_to: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[MeasureKpiOut]:
    facts = load_facts(
        db,
        scenarios=[Scenario.actual, Scenario.budget],
        period_from=period_from,
        period_to=period_to,
    )
    return [MeasureKpiOut.model_validate(row) for row in measure_kpis(facts)]


@router.get("/projection", response_model=ProjectionResponse)
def get_projection(
    base_value: Decimal = Query(...),
    growth_rate: Decimal = Query(...),
    periods: int = Query(default=12, ge=0),
    spread: Decimal | None = Query(default=None, ge=Decimal("0")),
    start_period: str | None = Query(default=None),
) -> ProjectionResponse:
    settings = get_settings()
    if periods > settings.forecast_max_periods:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"periods must be <= {settings.forecast_max_periods}.",
        )
    if spread is None:
        spread = settings.default_confidence_spread
    try:
        points = project(base_value, growth_rate, periods, spread, start_period=start_period)
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return ProjectionResponse(
        base_value=base_value,
        growth_rate=growth_rate,
        confidence_spread=spread,
        points=[ForecastPointOut.model_validate(point) for point in points],
    )


@router.get("/forecast", response_model=HistoryForecastResponse)
def get_history_forecast(
    measure: str = Query(...),
    method: ForecastMethod = Query(default=ForecastMethod.moving_average),
    periods: int = Query(default=12, ge=1),
    scenario: Scenario = Query(default=Scenario.actual),
    period_from: str | None = Query(default=None),
    period_to: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> HistoryForecastResponse:
    settings = get_settings()
    if periods > settings.forecast_max_periods:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"periods must be <= {settings.forecast_max_periods}.",
        )
    facts = load_facts(
        db,
        scenarios=[scenario],
        measures=[measure],
        period_from=period_from,
        period_to=period_to,
    )
    by_period = {key[0]: value for key, value in aggregate_facts(facts, Dimension.period, [scenario]).items()}
    if not by_period:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {scenario.value} history found for {measure}.",
        )
    # Months without facts count as zero so positional YoY comparisons stay aligned.
    history_periods = month_range(min(by_period), max(by_period))
    history = [by_period.get(period, ZERO) for period in history_periods]
    forecast = forecast_from_history(history, method, periods)
    return HistoryForecastResponse(
        measure=measure,
        method=method,
        history=history,
        history_periods=history_periods,
        forecast=forecast,
        forecast_periods=next_periods(history_periods[-1], len(forecast)),
    )


@router.post("/scenario", response_model=ScenarioResponse)
def run_scenario(payload: ScenarioRequest, db: Session = Depends(get_db)) -> ScenarioResponse:
    params = ScenarioParams(
        price_change=payload.price_change,
        volume_change=payload.volume_change,
        conversion_change=payload.conversion_change,
        retention_change=payload.retention_change,
        opex_change=payload.opex_change,
        loss_ratio_change=payload.loss_ratio_change,
    )
    facts = load_facts(
        db,
        scenarios=[payload.scenario],
        period_from=payload.period_from,
        period_to=payload.period_to,
    )
    rows = simulate(measure_totals(facts, payload.scenario), params)
    return ScenarioResponse(
        assumptions={
            "price_change": params.price_change,
            "volume_change": params.volume_change,
            "conversion_change": params.conversion_change,
            "retention_change": params.retention_change,
            "opex_change": params.opex_change,
            "loss_ratio_change": params.loss_ratio_change,
        },
        measures=[
            SimulatedMeasureOut(
                measure=row.measure,
                base=row.base,
                adjusted=row.adjusted,
                impact=VarianceOut.model_validate(row.impact),
            )
            for row in rows
        ],
    )
