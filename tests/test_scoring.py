from __future__ import annotations

from decimal import Decimal

from tax_simulator.models.common import ActivityType, TaxRegime
from tax_simulator.models.results import TaxCalculationResult
from tax_simulator.reference_data import load_tables
from tax_simulator.sample_data import build_large_profile, build_mei_profile, build_sample_profile
from tax_simulator.services.calculators import RegimeCalculator
from tax_simulator.services.scoring import REGIME_NOTES, RegimeScorer, economy_score


def _scorer() -> RegimeScorer:
    return RegimeScorer(load_tables())


def test_recommendation_scores_for_sample_profile():
    scorer = _scorer()
    profile = build_sample_profile()

    assert scorer.recommendation_score(TaxRegime.SIMPLES_NACIONAL, profile) == 75
    # 32% presumption and a small company both count against Presumido
    assert scorer.recommendation_score(TaxRegime.LUCRO_PRESUMIDO, profile) == 40
    assert scorer.recommendation_score(TaxRegime.LUCRO_REAL, profile) == 50


def test_recommendation_score_depends_on_sector_and_size():
    scorer = _scorer()
    small_shop = build_sample_profile().model_copy(
        update={"activity": ActivityType.COMERCIO_VAREJO, "annual_revenue": Decimal("200000")}
    )
    consultancy = build_sample_profile().model_copy(update={"activity": ActivityType.CONSULTORIA})

    assert scorer.recommendation_score(TaxRegime.SIMPLES_NACIONAL, small_shop) == 95
    assert scorer.recommendation_score(TaxRegime.LUCRO_PRESUMIDO, small_shop) == 75
    assert scorer.recommendation_score(TaxRegime.SIMPLES_NACIONAL, consultancy) == 60
    assert scorer.recommendation_score(TaxRegime.MEI, build_mei_profile()) == 85


def test_recommendation_score_is_clamped():
    assert _scorer().recommendation_score(TaxRegime.LUCRO_REAL, build_large_profile()) == 100


def test_headroom_shrinks_towards_the_ceiling():
    scorer = _scorer()

    assert scorer.headroom_score(TaxRegime.SIMPLES_NACIONAL, Decimal("1000000")) == 100
    assert scorer.headroom_score(TaxRegime.SIMPLES_NACIONAL, Decimal("2400000")) == 80
    assert scorer.headroom_score(TaxRegime.MEI, Decimal("60000")) == 60
    assert scorer.headroom_score(TaxRegime.SIMPLES_NACIONAL, Decimal("4500000")) == 40
    assert scorer.headroom_score(TaxRegime.LUCRO_REAL, Decimal("900000000")) == 100


def test_economy_score_spans_cheapest_to_dearest():
    cheapest, dearest = Decimal("100"), Decimal("300")

    assert economy_score(cheapest, cheapest, dearest) == Decimal("100")
    assert economy_score(dearest, cheapest, dearest) == Decimal("0")
    assert economy_score(Decimal("200"), cheapest, dearest) == Decimal("50")
    assert economy_score(cheapest, cheapest, cheapest) == Decimal("100")


def test_score_attaches_notes_everywhere_and_scores_only_eligible_rows():
    tables = load_tables()
    calculator = RegimeCalculator(tables)
    profile = build_sample_profile()
    results = [TaxCalculationResult(regime=TaxRegime.MEI, eligible=False, ineligibility_reason="limite MEI")]
    for regime in (TaxRegime.SIMPLES_NACIONAL, TaxRegime.LUCRO_PRESUMIDO, TaxRegime.LUCRO_REAL):
        results.append(TaxCalculationResult(regime=regime, eligible=True, breakdown=calculator.calculate(regime, profile)))

    scored = {result.regime: result for result in RegimeScorer(tables).score(profile, results)}

    mei = scored[TaxRegime.MEI]
    assert mei.advantages == REGIME_NOTES[TaxRegime.MEI].advantages
    assert mei.recommendation_score == 0
    assert not mei.recommended

    assert scored[TaxRegime.SIMPLES_NACIONAL].overall_score == Decimal("91.50")
    assert scored[TaxRegime.SIMPLES_NACIONAL].recommended
    assert scored[TaxRegime.LUCRO_PRESUMIDO].overall_score == Decimal("40.50")
    assert not scored[TaxRegime.LUCRO_PRESUMIDO].recommended
    assert scored[TaxRegime.LUCRO_REAL].overall_score == Decimal("48.24")
