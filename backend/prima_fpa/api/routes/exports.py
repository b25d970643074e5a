import csv
from datetime import datetime, timezone
import io

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from sqlalchemy.orm import Session

from prima_fpa.api.deps import get_db, group_by_param
from prima_fpa.core.config import get_settings
from prima_fpa.models.enums import Dimension, Scenario
from prima_fpa.services.facts import load_facts
from prima_fpa.services.variance import variance_table


router = APIRouter(prefix="/exports", tags=["exports"])

HEADERS = [
    "entity",
    "actual",
    "comparison",
    "forecast",
    "absolute_variance",
    "percent_variance",
    "significant",
    "favorability",
]


def _build_rows(
    db: Session,
    *,
    group_by: list[Dimension],
    measure: str | None,
    base: Scenario,
    comparison: Scenario,
    period_from: str | None,
    period_to: str | None,
) -> list[dict]:
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
            significance_pct=get_settings().variance_significance_pct,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return [
        {
            "entity": " / ".join(row.key),
            "actual": row.variance.actual,
            "comparison": row.variance.comparison,
            "forecast": row.forecast,
            "absolute_variance": row.variance.absolute_variance,
            "percent_variance": row.variance.percent_variance,
            "significant": row.significant,
            "favorability": row.favorability,
        }
        for row in rows
    ]


def _filename(extension: str) -> str:
    return f"variance-{datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S')}.{extension}"


@router.get("/variance/csv")
def export_variance_csv(
    group_by: list[Dimension] = Depends(group_by_param),
    measure: str | None = Query(default=None),
    base: Scenario = Query(default=Scenario.actual),
    comparison: Scenario = Query(default=Scenario.budget),
    period_from: str | None = Query(default=None),
    period_to: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    rows = _build_rows(
        db,
        group_by=group_by,
        measure=measure,
        base=base,
        comparison=comparison,
        period_from=period_from,
        period_to=period_to,
    )
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=HEADERS)
    writer.writeheader()
    writer.writerows(rows)
    output.seek(0)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{_filename("csv")}"'},
    )


@router.get("/variance/excel")
def export_variance_excel(
    group_by: list[Dimension] = Depends(group_by_param),
    measure: str | None = Query(default=None),
    base: Scenario = Query(default=Scenario.actual),
    comparison: Scenario = Query(default=Scenario.budget),
    period_from: str | None = Query(default=None),
    period_to: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    rows = _build_rows(
        db,
        group_by=group_by,
        measure=measure,
        base=base,
        comparison=comparison,
        period_from=period_from,
        period_to=period_to,
    )
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Variance"
    sheet.append(HEADERS)
    for row in rows:
        sheet.append([row[key] for key in HEADERS])

    stream = io.BytesIO()
    workbook.save(stream)
    stream.seek(0)
    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{_filename("xlsx")}"'},
    )
