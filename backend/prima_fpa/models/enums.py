import enum


class Scenario(str, enum.Enum):
    actual = "ACTUAL"
    budget = "BUDGET"
    forecast = "FORECAST"


class KpiFormat(str, enum.Enum):
    percentage = "percentage"
    currency = "currency"
    ratio = "ratio"
    number = "number"


class RatioCategory(str, enum.Enum):
    profitability = "profitability"
    efficiency = "efficiency"
    liquidity = "liquidity"
    leverage = "leverage"
    growth = "growth"
    custom = "custom"


class ForecastMethod(str, enum.Enum):
    moving_average = "moving_average"
    yoy_growth = "yoy_growth"
    cagr = "cagr"


class Dimension(str, enum.Enum):
    period = "period"
    market = "market"
    department = "department"
    product = "product"
    channel = "channel"
    measure = "measure"
