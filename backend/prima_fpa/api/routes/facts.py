from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from prima_fpa.api.deps import get_db
from prima_fpa.models.enums import Scenario
from prima_fpa.schemas.facts import FactBulkRequest, FactBulkResponse, FactOut, PeriodOut
from prima_fpa.services.aggregation import LedgerFact
from prima_fpa.services.facts import list_periods, load_facts, record_facts


router = APIRouter(tags=["facts"])


@router.get("/facts", response_model=list[FactOut])
def get_facts(
    scenario: list[Scenario] | None = Query(default=None),
    measure: list[str] | None = Query(default=None),
    market: list[str] | None = Query(default=None),
    period_from: str | None = Query(default=None),
    period_to: str | None = Query(default=None),
    limit: int = Query(default=1000, ge=1, le=10000),
    db: Session = Depends(get_db),
) -> list[FactOut]:
    facts = load_facts(
        db,
        scenarios=scenario,
        measures=measure,
        markets=market,
        period_from=period_from,
        period_to=period_to,
    )
    return [FactOut.model_validate(fact) for fact in facts[:limit]]


@router.post("/facts", response_model=FactBulkResponse, status_code=status.HTTP_201_CREATED)
def post_facts(payload: FactBulkRequest, db: Session = Depends(get_db)) -> FactBulkResponse:
    rows = record_facts(
        db,
        (
            LedgerFact(
                scenario=item.scenario,
                measure=item.measure,
                value=item.value,
                period=item.period,
                market=item.market,
                department=item.department,
                product=item.product,
                channel=item.channel,
            )
            for item in payload.facts
        ),
    )
    db.commit()
    return FactBulkResponse(created=len(rows))


@router.get("/periods", response_model=list[PeriodOut])
def get_periods(db: Session = Depends(get_db)) -> list[PeriodOut]:
    return [PeriodOut.model_validate(row) for row in list_periods(db)]
