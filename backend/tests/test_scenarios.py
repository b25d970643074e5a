from decimal import Decimal

from prima_fpa.services.scenarios import ScenarioParams, apply_scenario_changes, simulate


def test_price_and_volume_compound_on_premium() -> None:
    params = ScenarioParams(price_change=Decimal("10"), volume_change=Decimal("10"))
    assert apply_scenario_changes(Decimal("100"), "GWP", params) == Decimal("121.00")
    assert apply_scenario_changes(Decimal("100"), "nep", params) == Decimal("121.00")
    assert apply_scenario_changes(Decimal("100"), "Opex", params) == Decimal("100")


def test_measure_specific_levers() -> None:
    params = ScenarioParams(
        conversion_change=Decimal("2"),
        retention_change=Decimal("-3"),
        opex_change=Decimal("-10"),
        loss_ratio_change=Decimal("5"),
    )
    assert apply_scenario_changes(100, "Conversion", params) == Decimal("102")
    assert apply_scenario_changes(100, "Retention", params) == Decimal("97")
    assert apply_scenario_changes(100, "Opex", params) == Decimal("90")
    assert apply_scenario_changes(100, "Claims", params) == Decimal("105")
    assert apply_scenario_changes(100, "LR", params) == Decimal("105")


def test_unknown_measures_are_unchanged() -> None:
    params = ScenarioParams(price_change=Decimal("50"), opex_change=Decimal("50"))
    assert apply_scenario_changes(Decimal("42"), "Contracts", params) == Decimal("42")
    assert apply_scenario_changes(None, "GWP", params) == Decimal("0")


def test_simulate_reports_impact_sorted_by_measure() -> None:
    rows = simulate(
        {"Opex": Decimal("200"), "GWP": Decimal("1000")},
        ScenarioParams(price_change=Decimal("5")),
    )
    assert [row.measure for row in rows] == ["GWP", "Opex"]
    gwp, opex = rows
    assert gwp.base == Decimal("1000.00")
    assert gwp.adjusted == Decimal("1050.00")
    assert gwp.impact.absolute_variance == Decimal("50.00")
    assert gwp.impact.percent_variance == Decimal("0.050000")
    assert opex.impact.absolute_variance == Decimal("0")


def test_default_params_are_identity() -> None:
    rows = simulate({"GWP": Decimal("10.005")}, ScenarioParams())
    assert rows[0].base == rows[0].adjusted == Decimal("10.01")
