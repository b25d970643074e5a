from collections.abc import Generator

from fastapi import HTTPException, Query, status
from sqlalchemy.orm import Session

from prima_fpa.db.session import SessionLocal
from prima_fpa.models.enums import Dimension, Scenario


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def group_by_param(
    group_by: list[Dimension] = Query(default=[Dimension.market]),
) -> list[Dimension]:
    if len(set(group_by)) != len(group_by):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="group_by dimensions must be unique.")
    return group_by


def scenario_param(
    scenario: list[Scenario] = Query(default=[Scenario.actual]),
) -> list[Scenario]:
    return scenario
