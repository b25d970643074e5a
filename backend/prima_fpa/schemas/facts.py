from decimal import Decimal

from pydantic import BaseModel, Field

from prima_fpa.models.enums import Scenario
from prima_fpa.schemas.common import ORMModel


class FactIn(BaseModel):
    scenario: Scenario
    measure: str = Field(min_length=1, max_length=100)
    value: Decimal | None = None
    period: str = Field(pattern=r"^\d{4}-\d{2}$", description="Calendar month, YYYY-MM.")
    market: str | None = Field(default=None, max_length=50)
    department: str | None = Field(default=None, max_length=50)
    product: str | None = Field(default=None, max_length=50)
    channel: str | None = Field(default=None, max_length=50)


class FactBulkRequest(BaseModel):
    facts: list[FactIn] = Field(min_length=1)


class FactOut(ORMModel):
    scenario: Scenario
    measure: str
    value: Decimal | None = None
    period: str
    market: str | None = None
    department: str | None = None
    product: str | None = None
    channel: str | None = None


class FactBulkResponse(BaseModel):
    created: int


class PeriodOut(ORMModel):
    id: int
    year: int
    month: int
    period_key: str
