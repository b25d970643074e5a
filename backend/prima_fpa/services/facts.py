from __future__ import annotations

from collections.abc import Iterable
import logging

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from prima_fpa.models.dimensions import CalendarPeriod, Channel, Department, Market, Product
from prima_fpa.models.enums import Scenario
from prima_fpa.models.fact import FactLedger
from prima_fpa.services.aggregation import LedgerFact
from prima_fpa.utils.decimal_math import money, to_decimal
from prima_fpa.utils.periods import parse_period


logger = logging.getLogger("prima_fpa.facts")

_DIMENSION_MODELS = {
    "market": Market,
    "department": Department,
    "product": Product,
    "channel": Channel,
}


def fact_from_row(row: FactLedger) -> LedgerFact:
    return LedgerFact(
        scenario=row.scenario,
        measure=row.measure,
        value=row.value,
        period=row.period.period_key,
        market=row.market.code if row.market else None,
        department=row.department.code if row.department else None,
        product=row.product.code if row.product else None,
        channel=row.channel.code if row.channel else None,
    )


def month_key(value: str) -> str:
    """Canonical ``YYYY-MM`` for a query bound; 400 for anything that is not a month."""
    try:
        parsed = parse_period(value)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if parsed.month is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Facts are stored monthly; {value!r} is not YYYY-MM.",
        )
    return parsed.key


def get_period_or_404(db: Session, period_key: str) -> CalendarPeriod:
    period_key = month_key(period_key)
    period = db.scalar(select(CalendarPeriod).where(CalendarPeriod.period_key == period_key))
    if period is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Period {period_key} not found.")
    return period


def list_periods(db: Session) -> list[CalendarPeriod]:
    return list(
        db.scalars(
            select(CalendarPeriod).order_by(CalendarPeriod.year.asc(), CalendarPeriod.month.asc())
        ).all()
    )


def load_facts(
    db: Session,
    *,
    scenarios: Iterable[Scenario] | None = None,
    measures: Iterable[str] | None = None,
    period_from: str | None = None,
    period_to: str | None = None,
    markets: Iterable[str] | None = None,
) -> list[LedgerFact]:
    period_from = month_key(period_from) if period_from else None
    period_to = month_key(period_to) if period_to else None
    if period_from and period_to and period_from > period_to:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="period_from must be <= period_to.")

    query = (
        select(FactLedger)
        .join(FactLedger.period)
        .options(
            joinedload(FactLedger.period),
            joinedload(FactLedger.market),
            joinedload(FactLedger.department),
            joinedload(FactLedger.product),
            joinedload(FactLedger.channel),
        )
    )
    if scenarios:
        query = query.where(FactLedger.scenario.in_(list(scenarios)))
    if measures:
        query = query.where(FactLedger.measure.in_(list(measures)))
    if period_from:
        query = query.where(CalendarPeriod.period_key >= period_from)
    if period_to:
        query = query.where(CalendarPeriod.period_key <= period_to)
    if markets:
        query = query.join(FactLedger.market).where(Market.code.in_(list(markets)))

    rows = db.scalars(query.order_by(CalendarPeriod.period_key.asc(), FactLedger.id.asc())).all()
    facts = [fact_from_row(row) for row in rows]
    logger.debug("Loaded %s facts (period %s..%s).", len(facts), period_from or "*", period_to or "*")
    return facts


def _get_or_create_period(db: Session, cache: dict[str, CalendarPeriod], period_key: str) -> CalendarPeriod:
    key = month_key(period_key)
    if key in cache:
        return cache[key]
    period = db.scalar(select(CalendarPeriod).where(CalendarPeriod.period_key == key))
    if period is None:
        year, month = key.split("-")
        period = CalendarPeriod(year=int(year), month=int(month), period_key=key)
        db.add(period)
        db.flush()
    cache[key] = period
    return period


def _get_or_create_dimension(
    db: Session,
    cache: dict[tuple[str, str], object],
    dimension: str,
    code: str | None,
):
    if code in (None, ""):
        return None
    cache_key = (dimension, code)
    if cache_key in cache:
        return cache[cache_key]
    model = _DIMENSION_MODELS[dimension]
    row = db.scalar(select(model).where(model.code == code))
    if row is None:
        row = model(code=code, country=code) if model is Market else model(code=code, name=code)
        db.add(row)
        db.flush()
    cache[cache_key] = row
    return row


def record_facts(db: Session, facts: Iterable[LedgerFact]) -> list[FactLedger]:
    period_cache: dict[str, CalendarPeriod] = {}
    dimension_cache: dict[tuple[str, str], object] = {}
    rows: list[FactLedger] = []
    for fact in facts:
        period = _get_or_create_period(db, period_cache, fact.period)
        value = to_decimal(fact.value, default=None) if fact.value is not None else None
        row = FactLedger(
            period_id=period.id,
            scenario=Scenario(fact.scenario),
            measure=fact.measure,
            value=money(value) if value is not None else None,
        )
        for dimension in _DIMENSION_MODELS:
            target = _get_or_create_dimension(db, dimension_cache, dimension, getattr(fact, dimension))
            setattr(row, f"{dimension}_id", target.id if target is not None else None)
        db.add(row)
        rows.append(row)
    db.flush()
    logger.info("Recorded %s ledger facts.", len(rows))
    return rows
