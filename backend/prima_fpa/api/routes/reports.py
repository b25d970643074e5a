import io
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from prima_fpa.api.deps import get_db, group_by_param
from prima_fpa.core.config import get_settings
from prima_fpa.models.enums import Dimension, Scenario
from prima_fpa.services.facts import get_period_or_404, load_facts
from prima_fpa.services.kpis import kpis_for_period
from prima_fpa.services.reports import build_kpi_pack
from prima_fpa.services.variance import summarize_variances, variance_table


router = APIRouter(prefix="/reports", tags=["reports"])
logger = logging.getLogger("prima_fpa.reports")


@router.get("/kpi-pack")
def download_kpi_pack(
    period: str = Query(...),
    prior_period: str | None = Query(default=None),
    group_by: list[Dimension] = Depends(group_by_param),
    db: Session = Depends(get_db),
):
    settings = get_settings()
    period = get_period_or_404(db, period).period_key
    keys = [period]
    if prior_period is not None:
        prior_period = get_period_or_404(db, prior_period).period_key
        keys.append(prior_period)

    facts = load_facts(db, period_from=min(keys), period_to=max(keys))
    current = [fact for fact in facts if fact.period == period]
    kpis = kpis_for_period(facts, period=period, prior_period=prior_period)
    rows = variance_table(
        current,
        group_by,
        base=Scenario.actual,
        comparison=Scenario.budget,
        significance_pct=settings.variance_significance_pct,
    )
    content = build_kpi_pack(
        period=period,
        kpis=kpis,
        variance_rows=rows,
        summary=summarize_variances(rows),
        currency=settings.reports_currency,
    )
    logger.info("Rendered KPI pack for %s (%s variance rows, %s bytes).", period, len(rows), len(content))
    return StreamingResponse(
        io.BytesIO(content),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="kpi-pack-{period}.pdf"'},
    )
