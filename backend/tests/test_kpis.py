from decimal import Decimal

from prima_fpa.models.enums import KpiFormat, Scenario
from prima_fpa.services.aggregation import LedgerFact
from prima_fpa.services.kpis import (
    DEFAULT_EXTRA_RATIOS,
    KpiConfig,
    RatioDefinition,
    derive_kpis,
    derive_ratios,
    kpis_for_period,
)


def _by_code(rows) -> dict:
    return {row.code: row for row in rows}


def test_underwriting_ratios() -> None:
    totals = {
        "Claims": Decimal("77500000"),
        "NEP": Decimal("98500000"),
        "Opex": Decimal("20000000"),
    }
    kpis = _by_code(derive_kpis(totals))

    assert abs(kpis["loss_ratio"].value - Decimal("0.7868")) < Decimal("0.0001")
    assert kpis["loss_ratio"].value == Decimal("0.786802")
    assert kpis["expense_ratio"].value == Decimal("0.203046")
    assert kpis["combined_ratio"].value == kpis["loss_ratio"].value + kpis["expense_ratio"].value
    assert kpis["loss_ratio"].format == KpiFormat.percentage
    assert kpis["loss_ratio"].delta is None


def test_zero_premium_yields_zero_ratios() -> None:
    kpis = _by_code(derive_kpis({"Claims": Decimal("500"), "Opex": Decimal("100"), "NEP": Decimal("0")}))
    assert kpis["loss_ratio"].value == Decimal("0")
    assert kpis["expense_ratio"].value == Decimal("0")
    assert kpis["combined_ratio"].value == Decimal("0")


def test_missing_measures_yield_zero_ratios() -> None:
    kpis = _by_code(derive_kpis({}))
    assert [code for code in kpis] == ["loss_ratio", "expense_ratio", "combined_ratio"]
    assert all(row.value == Decimal("0") for row in kpis.values())


def test_prior_period_delta() -> None:
    current = {"Claims": Decimal("77500000"), "NEP": Decimal("98500000"), "Opex": Decimal("20000000")}
    prior = {"Claims": Decimal("70000000"), "NEP": Decimal("100000000"), "Opex": Decimal("20000000")}
    kpis = _by_code(derive_kpis(current, prior_totals=prior))

    delta = kpis["loss_ratio"].delta
    assert delta is not None
    assert delta.comparison == Decimal("0.700000")
    assert delta.absolute_variance == Decimal("0.086802")


def test_extra_ratios_need_their_denominator() -> None:
    totals = {
        "NEP": Decimal("100"),
        "Net_Income": Decimal("12"),
        "GWP": Decimal("300"),
        "Surplus": Decimal("100"),
    }
    assert "roe" not in _by_code(derive_ratios(totals, DEFAULT_EXTRA_RATIOS))

    totals["Shareholders_Equity"] = Decimal("80")
    ratios = _by_code(derive_ratios(totals, DEFAULT_EXTRA_RATIOS))
    assert ratios["roe"].value == Decimal("0.150000")
    assert "premium_to_surplus" not in ratios


def test_custom_config_measure_names_and_ratio() -> None:
    config = KpiConfig(
        claims_measure="ClaimsIncurred",
        net_earned_premium_measure="EarnedPremium",
        operating_expenses_measure="Expenses",
        extra_ratios=(
            RatioDefinition(
                code="acquisition",
                name="Acquisition Ratio",
                numerator=("Commission", "Marketing"),
                denominator="EarnedPremium",
            ),
        ),
    )
    totals = {
        "ClaimsIncurred": Decimal("60"),
        "EarnedPremium": Decimal("200"),
        "Expenses": Decimal("40"),
        "Commission": Decimal("10"),
        "Marketing": Decimal("5"),
    }
    kpis = _by_code(derive_kpis(totals, config))
    assert kpis["loss_ratio"].value == Decimal("0.300000")
    assert kpis["expense_ratio"].value == Decimal("0.200000")
    assert kpis["combined_ratio"].value == Decimal("0.500000")
    assert kpis["acquisition"].value == Decimal("0.075000")


def test_kpis_for_period_filters_period_and_scenario() -> None:
    facts = [
        LedgerFact(Scenario.actual, "Claims", Decimal("60"), "2026-03"),
        LedgerFact(Scenario.actual, "NEP", Decimal("100"), "2026-03"),
        LedgerFact(Scenario.budget, "Claims", Decimal("1000"), "2026-03"),
        LedgerFact(Scenario.actual, "Claims", Decimal("50"), "2026-02"),
        LedgerFact(Scenario.actual, "NEP", Decimal("100"), "2026-02"),
    ]
    kpis = _by_code(kpis_for_period(facts, period="2026-03", prior_period="2026-02"))
    assert kpis["loss_ratio"].value == Decimal("0.600000")
    assert kpis["loss_ratio"].delta.absolute_variance == Decimal("0.100000")

    budget = _by_code(kpis_for_period(facts, period="2026-03", scenario=Scenario.budget))
    assert budget["loss_ratio"].value == Decimal("0")


def test_tiny_premium_produces_large_finite_ratio() -> None:
    kpis = _by_code(derive_kpis({"Claims": 1e22, "NEP": 0.01, "Opex": 0}))
    assert kpis["loss_ratio"].value == Decimal("1e24")
    assert kpis["expense_ratio"].value == Decimal("0")
    assert kpis["combined_ratio"].value == Decimal("1e24")
