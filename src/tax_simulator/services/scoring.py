"""Qualitative ranking of the computed regimes.

The cheapest regime stays the answer to "which costs least". The overall score
weighs that cost against how well the regime fits the profile, how much room
the revenue has before the regime ceiling, and the bookkeeping effort.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, NamedTuple, Optional, Tuple

from ..models.common import BusinessSector, TaxRegime
from ..models.company import CompanyProfile
from ..models.results import TaxCalculationResult
from ..models.tables import TaxTables
from ..money import ZERO, safe_ratio, to_decimal

RECOMMENDED_THRESHOLD = 70

ECONOMY_WEIGHT = Decimal("0.40")
FIT_WEIGHT = Decimal("0.25")
HEADROOM_WEIGHT = Decimal("0.20")
SIMPLICITY_WEIGHT = Decimal("0.15")

SIMPLICITY = {
    TaxRegime.MEI: 100,
    TaxRegime.SIMPLES_NACIONAL: 85,
    TaxRegime.LUCRO_PRESUMIDO: 70,
    TaxRegime.LUCRO_REAL: 50,
}

SCORE_PLACES = Decimal("0.01")


class RegimeNotes(NamedTuple):
    advantages: Tuple[str, ...]
    disadvantages: Tuple[str, ...]
    limitations: Tuple[str, ...]


REGIME_NOTES: Dict[TaxRegime, RegimeNotes] = {
    TaxRegime.MEI: RegimeNotes(
        advantages=(
            "Valor fixo mensal",
            "Tributação mínima",
            "Burocracia reduzida",
            "Cobertura previdenciária",
        ),
        disadvantages=(
            "Limite baixo de faturamento",
            "Máximo de 1 funcionário",
            "Atividades limitadas",
            "Não permite dedução de despesas",
        ),
        limitations=(
            "Lista restrita de atividades permitidas",
            "Não pode ter participação em outras empresas",
        ),
    ),
    TaxRegime.SIMPLES_NACIONAL: RegimeNotes(
        advantages=(
            "Regime tributário unificado em uma guia (DAS)",
            "Menos obrigações acessórias",
            "Alíquotas progressivas",
            "Facilidade na apuração",
        ),
        disadvantages=(
            "Restrições para algumas atividades",
            "Vedação a alguns benefícios fiscais",
            "Limitações para participação societária",
        ),
        limitations=(
            "Atividades financeiras vedadas",
            "Não pode ter participação em outras empresas",
        ),
    ),
    TaxRegime.LUCRO_PRESUMIDO: RegimeNotes(
        advantages=(
            "Margem de lucro presumida fixa por atividade",
            "Previsibilidade da carga tributária",
            "Menores custos de compliance que o Lucro Real",
            "Adequado para margens iguais ou superiores à presumida",
        ),
        disadvantages=(
            "Tributação independe do lucro efetivo",
            "PIS/COFINS cumulativos, sem créditos",
            "Não permite compensação de prejuízos fiscais",
        ),
        limitations=(
            "Margem presumida fixa conforme a atividade",
            "Vedado para algumas atividades específicas",
        ),
    ),
    TaxRegime.LUCRO_REAL: RegimeNotes(
        advantages=(
            "Tributação sobre o lucro efetivamente apurado",
            "Compensação de prejuízos fiscais (limitada a 30%)",
            "PIS/COFINS não cumulativos com direito a créditos",
            "Indicado para margens de lucro baixas",
        ),
        disadvantages=(
            "Maior complexidade na apuração e controle",
            "Múltiplas obrigações acessórias (ECF, ECD)",
            "Custos mais elevados de compliance contábil",
        ),
        limitations=(
            "Escrituração contábil completa e LALUR obrigatórios",
            "Apuração trimestral ou anual com estimativas mensais",
        ),
    ),
}

MEI_LATE_REVENUE = Decimal("60000")
SIMPLES_EARLY_REVENUE = Decimal("360000")
SIMPLES_LATE_REVENUE = Decimal("3600000")
PRESUMIDO_SMALL_REVENUE = Decimal("1000000")
PRESUMIDO_LARGE_REVENUE = Decimal("10000000")
REAL_LARGE_REVENUE = Decimal("50000000")


def _clamp(score: int) -> int:
    return min(100, max(0, score))


class RegimeScorer:
    def __init__(self, tables: TaxTables) -> None:
        self.tables = tables

    def score(self, profile: CompanyProfile, results: List[TaxCalculationResult]) -> List[TaxCalculationResult]:
        """Attach notes to every row and scores to the eligible ones."""
        totals = [result.breakdown.total for result in results if result.eligible]
        cheapest = min(totals) if totals else ZERO
        dearest = max(totals) if totals else ZERO

        scored = []
        for result in results:
            notes = REGIME_NOTES[result.regime]
            update = {
                "advantages": notes.advantages,
                "disadvantages": notes.disadvantages,
                "limitations": notes.limitations,
            }
            if result.eligible:
                fit = self.recommendation_score(result.regime, profile)
                update["recommendation_score"] = fit
                update["recommended"] = fit >= RECOMMENDED_THRESHOLD
                update["overall_score"] = self.overall_score(result, profile, fit, cheapest, dearest)
            scored.append(result.model_copy(update=update))
        return scored

    def recommendation_score(self, regime: TaxRegime, profile: CompanyProfile) -> int:
        revenue = profile.annual_revenue
        rule = self.tables.rule_for_activity(profile.activity)

        if regime is TaxRegime.MEI:
            score = 95
            if revenue >= MEI_LATE_REVENUE:
                score -= 10
        elif regime is TaxRegime.SIMPLES_NACIONAL:
            score = 75
            if revenue <= SIMPLES_EARLY_REVENUE:
                score += 15
            if revenue >= SIMPLES_LATE_REVENUE:
                score -= 10
            if rule.sector is BusinessSector.COMERCIO:
                score += 5
            if rule.sector is BusinessSector.SERVICOS_ANEXO_V:
                score -= 15
        elif regime is TaxRegime.LUCRO_PRESUMIDO:
            score = 60
            if rule.presumption_irpj <= Decimal("0.08"):
                score += 20
            if rule.presumption_irpj >= Decimal("0.32"):
                score -= 15
            if revenue >= PRESUMIDO_LARGE_REVENUE:
                score += 10
            if revenue <= PRESUMIDO_SMALL_REVENUE:
                score -= 5
        else:
            score = 50
            margin = safe_ratio(profile.actual_profit() or ZERO, revenue)
            # thin margins favour taxing the actual profit
            if margin <= Decimal("0.05"):
                score += 25
            if margin <= Decimal("0.10"):
                score += 15
            if margin >= Decimal("0.30"):
                score -= 20
            if revenue >= REAL_LARGE_REVENUE:
                score += 15
            if revenue > self.tables.limits.presumido_max_revenue:
                score += 25
        return _clamp(score)

    def headroom_score(self, regime: TaxRegime, revenue: Decimal) -> int:
        ceiling = self._ceiling(regime)
        if ceiling is None:
            return 100
        usage = safe_ratio(revenue, ceiling)
        if usage < Decimal("0.5"):
            return 100
        if usage < Decimal("0.7"):
            return 80
        if usage < Decimal("0.9"):
            return 60
        return 40

    def overall_score(
        self,
        result: TaxCalculationResult,
        profile: CompanyProfile,
        fit: int,
        cheapest: Decimal,
        dearest: Decimal,
    ) -> Decimal:
        economy = economy_score(result.breakdown.total, cheapest, dearest)
        weighted = (
            economy * ECONOMY_WEIGHT
            + to_decimal(fit) * FIT_WEIGHT
            + to_decimal(self.headroom_score(result.regime, profile.annual_revenue)) * HEADROOM_WEIGHT
            + to_decimal(SIMPLICITY[result.regime]) * SIMPLICITY_WEIGHT
        )
        return weighted.quantize(SCORE_PLACES, rounding=ROUND_HALF_UP)

    def _ceiling(self, regime: TaxRegime) -> Optional[Decimal]:
        limits = self.tables.limits
        return {
            TaxRegime.MEI: limits.mei_max_revenue,
            TaxRegime.SIMPLES_NACIONAL: limits.simples_max_revenue,
            TaxRegime.LUCRO_PRESUMIDO: limits.presumido_max_revenue,
        }.get(regime)


def economy_score(total: Decimal, cheapest: Decimal, dearest: Decimal) -> Decimal:
    """100 for the cheapest eligible regime, 0 for the most expensive."""
    if dearest == cheapest:
        return Decimal("100")
    return Decimal("100") - (total - cheapest) / (dearest - cheapest) * 100
