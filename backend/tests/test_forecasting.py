from decimal import Decimal

import pytest

from prima_fpa.models.enums import ForecastMethod
from prima_fpa.services.forecasting import (
    average_yoy_growth,
    compound_growth_rate,
    forecast_from_history,
    project,
)


def test_compound_projection_values() -> None:
    points = project(Decimal("1000000"), Decimal("0.08"), 3)
    assert [point.period for point in points] == [1, 2, 3]
    assert [point.projected_value for point in points] == [
        Decimal("1080000.00"),
        Decimal("1166400.00"),
        Decimal("1259712.00"),
    ]
    assert points[0].confidence_low is None
    assert points[0].confidence_high is None


def test_zero_periods_returns_empty() -> None:
    assert project(100, Decimal("0.05"), 0) == []
    assert project(100, Decimal("0.05"), -3) == []


def test_single_period_and_float_inputs() -> None:
    points = project(100, 0.05, 1)
    assert len(points) == 1
    assert points[0].projected_value == Decimal("105.00")


def test_zero_growth_is_flat() -> None:
    points = project(Decimal("250.40"), 0, 12)
    assert len(points) == 12
    assert {point.projected_value for point in points} == {Decimal("250.40")}


def test_negative_growth_declines() -> None:
    points = project(100, Decimal("-0.1"), 2)
    assert [point.projected_value for point in points] == [Decimal("90.00"), Decimal("81.00")]


def test_confidence_band() -> None:
    points = project(100, Decimal("0.05"), 2, Decimal("0.1"))
    assert points[0].confidence_low == Decimal("95.00")
    assert points[0].confidence_high == Decimal("115.00")
    assert points[1].confidence_low == Decimal("90.25")
    assert points[1].confidence_high == Decimal("132.25")
    for point in points:
        assert point.confidence_low <= point.projected_value <= point.confidence_high


def test_negative_spread_is_treated_as_magnitude() -> None:
    assert project(100, 0, 1, Decimal("-0.2")) == project(100, 0, 1, Decimal("0.2"))


def test_projection_is_deterministic() -> None:
    assert project(1000, Decimal("0.03"), 6, Decimal("0.05")) == project(1000, Decimal("0.03"), 6, Decimal("0.05"))


def test_projection_period_labels_roll_over_year() -> None:
    points = project(100, 0, 3, start_period="2025-11")
    assert [point.period_key for point in points] == ["2025-12", "2026-01", "2026-02"]


def test_projection_rejects_non_monthly_start() -> None:
    with pytest.raises(ValueError):
        project(100, 0, 3, start_period="2025-Q4")


def test_moving_average_forecast() -> None:
    assert forecast_from_history([10, 20, 30, 40], ForecastMethod.moving_average, 3) == [
        Decimal("30.00"),
        Decimal("30.00"),
        Decimal("30.00"),
    ]
    assert forecast_from_history([7], "moving_average", 2) == [Decimal("7.00"), Decimal("7.00")]


def test_cagr_forecast() -> None:
    assert compound_growth_rate([Decimal("100"), Decimal("121")]) == Decimal("0.21")
    assert forecast_from_history([100, 121], ForecastMethod.cagr, 2) == [Decimal("146.41"), Decimal("177.16")]


def test_cagr_with_non_positive_endpoint_holds_last_value() -> None:
    assert compound_growth_rate([Decimal("0"), Decimal("50")]) is None
    assert forecast_from_history([0, 50], ForecastMethod.cagr, 2) == [Decimal("50.00"), Decimal("50.00")]


def test_yoy_growth_forecast() -> None:
    history = [Decimal("100")] * 12 + [Decimal("110")] * 12
    assert average_yoy_growth(history) == Decimal("0.1")
    assert forecast_from_history(history, ForecastMethod.yoy_growth, 2) == [Decimal("121.00"), Decimal("133.10")]


def test_yoy_growth_with_short_history_holds_last_value() -> None:
    history = [Decimal(value) for value in range(1, 19)]
    assert average_yoy_growth(history) is None
    assert forecast_from_history(history, ForecastMethod.yoy_growth, 1) == [Decimal("18.00")]


def test_history_forecast_edge_cases() -> None:
    assert forecast_from_history([], ForecastMethod.cagr, 5) == []
    assert forecast_from_history([1, 2, 3], ForecastMethod.moving_average, 0) == []
    assert forecast_from_history([None, "bad", 9], ForecastMethod.moving_average, 1) == [Decimal("3.00")]
    with pytest.raises(ValueError):
        forecast_from_history([1, 2], "holt_winters", 1)


def test_projection_keeps_cents_on_very_large_growth() -> None:
    points = project(100, 10, 30, Decimal("0.1"))
    assert len(points) == 30
    last = points[-1]
    assert last.projected_value > Decimal("1e33")
    assert last.projected_value.as_tuple().exponent == -2
    assert last.confidence_low < last.projected_value < last.confidence_high
