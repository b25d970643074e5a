from prima_fpa.models.dimensions import CalendarPeriod, Channel, Department, Market, Product
from prima_fpa.models.enums import Dimension, ForecastMethod, KpiFormat, RatioCategory, Scenario
from prima_fpa.models.fact import FactLedger

__all__ = [
    "CalendarPeriod",
    "Channel",
    "Department",
    "Market",
    "Product",
    "Dimension",
    "ForecastMethod",
    "KpiFormat",
    "RatioCategory",
    "Scenario",
    "FactLedger",
]
