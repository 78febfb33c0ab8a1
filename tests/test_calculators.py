from __future__ import annotations

from decimal import Decimal

import pytest

from tax_simulator.errors import MissingInputError
from tax_simulator.models.common import ActivityType, Annex, TaxComponent, TaxRegime
from tax_simulator.reference_data import load_tables
from tax_simulator.sample_data import build_mei_profile, build_sample_profile
from tax_simulator.services.calculators import RegimeCalculator


def _calculator() -> RegimeCalculator:
    return RegimeCalculator(load_tables())


def test_simples_progressive_formula_for_annex_iii():
    breakdown = _calculator().calculate(TaxRegime.SIMPLES_NACIONAL, build_sample_profile())

    assert breakdown.annex is Annex.III
    assert breakdown.bracket_index == 4
    assert breakdown.nominal_rate == Decimal("0.16")
    assert breakdown.total == Decimal("124360.00")
    assert breakdown.effective_rate == Decimal("0.124360")


def test_simples_total_is_split_by_annex_distribution():
    breakdown = _calculator().calculate(TaxRegime.SIMPLES_NACIONAL, build_sample_profile())

    assert breakdown.amount(TaxComponent.IRPJ) == Decimal("4974.40")
    assert breakdown.amount(TaxComponent.CSLL) == Decimal("4352.60")
    assert breakdown.amount(TaxComponent.COFINS) == Decimal("15942.95")
    assert breakdown.amount(TaxComponent.PIS) == Decimal("3457.21")
    assert breakdown.amount(TaxComponent.CPP) == Decimal("53972.24")
    assert breakdown.amount(TaxComponent.ISS) == Decimal("41660.60")
    assert breakdown.amount(TaxComponent.ICMS) == Decimal("0")
    assert sum(breakdown.components.values()) == breakdown.total


def test_simples_first_bracket_has_no_deduction():
    profile = build_sample_profile().model_copy(
        update={"activity": ActivityType.COMERCIO_VAREJO, "annual_revenue": Decimal("100000")}
    )

    breakdown = _calculator().calculate(TaxRegime.SIMPLES_NACIONAL, profile)

    assert breakdown.total == Decimal("4000.00")
    assert breakdown.effective_rate == Decimal("0.040000")


def test_simples_zero_revenue_has_zero_total_and_rate():
    profile = build_sample_profile().model_copy(update={"annual_revenue": Decimal("0")})

    breakdown = _calculator().calculate(TaxRegime.SIMPLES_NACIONAL, profile)

    assert breakdown.total == Decimal("0")
    assert breakdown.effective_rate == Decimal("0")


def test_mei_is_twelve_monthly_fees_regardless_of_revenue():
    calculator = _calculator()
    low = build_mei_profile().model_copy(update={"annual_revenue": Decimal("10000")})
    high = build_mei_profile().model_copy(update={"annual_revenue": Decimal("80000")})

    low_breakdown = calculator.calculate(TaxRegime.MEI, low)
    high_breakdown = calculator.calculate(TaxRegime.MEI, high)

    assert low_breakdown.total == Decimal("71.60") * 12
    assert high_breakdown.total == low_breakdown.total
    assert low_breakdown.amount(TaxComponent.CPP) == Decimal("799.20")
    assert low_breakdown.amount(TaxComponent.ISS) == Decimal("60.00")
    assert low_breakdown.effective_rate == Decimal("0.085920")


def test_presumido_applies_presumption_and_irpj_surcharge():
    breakdown = _calculator().calculate(TaxRegime.LUCRO_PRESUMIDO, build_sample_profile())

    # 32% of 1,000,000 presumed; surcharge on the 80,000 above 240,000
    assert breakdown.taxable_profit == Decimal("320000.00")
    assert breakdown.amount(TaxComponent.IRPJ) == Decimal("56000.00")
    assert breakdown.amount(TaxComponent.CSLL) == Decimal("28800.00")
    assert breakdown.amount(TaxComponent.PIS) == Decimal("6500.00")
    assert breakdown.amount(TaxComponent.COFINS) == Decimal("30000.00")
    assert breakdown.amount(TaxComponent.ISS) == Decimal("50000.00")
    assert breakdown.total == Decimal("171300.00")


def test_presumido_commerce_pays_icms_without_surcharge():
    profile = build_sample_profile().model_copy(
        update={"activity": ActivityType.COMERCIO_VAREJO, "annual_revenue": Decimal("500000")}
    )

    breakdown = _calculator().calculate(TaxRegime.LUCRO_PRESUMIDO, profile)

    assert breakdown.amount(TaxComponent.IRPJ) == Decimal("6000.00")
    assert breakdown.amount(TaxComponent.CSLL) == Decimal("5400.00")
    assert breakdown.amount(TaxComponent.ICMS) == Decimal("90000.00")
    assert breakdown.amount(TaxComponent.ISS) == Decimal("0")
    assert breakdown.total == Decimal("119650.00")


def test_real_taxes_declared_margin():
    breakdown = _calculator().calculate(TaxRegime.LUCRO_REAL, build_sample_profile())

    assert breakdown.taxable_profit == Decimal("200000.00")
    assert breakdown.amount(TaxComponent.IRPJ) == Decimal("30000.00")
    assert breakdown.amount(TaxComponent.CSLL) == Decimal("18000.00")
    assert breakdown.amount(TaxComponent.PIS) == Decimal("14025.00")
    assert breakdown.amount(TaxComponent.COFINS) == Decimal("64600.00")
    assert breakdown.amount(TaxComponent.ISS) == Decimal("35000.00")
    assert breakdown.total == Decimal("161625.00")


def test_real_refuses_to_guess_a_margin():
    profile = build_sample_profile().model_copy(update={"profit_margin": None, "net_profit": None})

    with pytest.raises(MissingInputError):
        _calculator().calculate(TaxRegime.LUCRO_REAL, profile)


def test_real_prefers_declared_net_profit_over_margin():
    profile = build_sample_profile().model_copy(update={"net_profit": Decimal("500000")})

    breakdown = _calculator().calculate(TaxRegime.LUCRO_REAL, profile)

    assert breakdown.taxable_profit == Decimal("500000.00")
    # 15% of 500,000 plus 10% of the 260,000 above the threshold
    assert breakdown.amount(TaxComponent.IRPJ) == Decimal("101000.00")


def test_real_loss_has_no_income_taxes():
    profile = build_sample_profile().model_copy(update={"net_profit": Decimal("-50000")})

    breakdown = _calculator().calculate(TaxRegime.LUCRO_REAL, profile)

    assert breakdown.amount(TaxComponent.IRPJ) == Decimal("0")
    assert breakdown.amount(TaxComponent.CSLL) == Decimal("0")
    assert breakdown.total > 0


def test_real_financial_activity_uses_higher_csll():
    profile = build_sample_profile().model_copy(update={"activity": ActivityType.FINANCEIRO})

    breakdown = _calculator().calculate(TaxRegime.LUCRO_REAL, profile)

    assert breakdown.amount(TaxComponent.CSLL) == Decimal("40000.00")


def test_breakdowns_share_the_same_component_keys():
    calculator = _calculator()
    profile = build_sample_profile()
    keys = set(TaxComponent)

    for regime in (TaxRegime.SIMPLES_NACIONAL, TaxRegime.LUCRO_PRESUMIDO, TaxRegime.LUCRO_REAL):
        assert set(calculator.calculate(regime, profile).components) == keys
    assert set(calculator.calculate(TaxRegime.MEI, build_mei_profile()).components) == keys


def test_breakdown_components_cannot_be_edited():
    breakdown = _calculator().calculate(TaxRegime.SIMPLES_NACIONAL, build_sample_profile())

    with pytest.raises(TypeError):
        breakdown.components[TaxComponent.ISS] = Decimal("0")
    assert breakdown.model_dump(mode="json")["components"]["iss"] == "41660.60"
