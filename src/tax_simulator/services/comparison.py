from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from dateutil.relativedelta import relativedelta

from ..errors import CalculationError, InvalidInputError, NoEligibleRegimeError
from ..models.common import REGIME_NAMES, BusinessSector, TaxRegime
from ..models.company import CompanyProfile
from ..models.results import RegimeEligibility, TaxCalculationResult, TaxComparison
from ..models.tables import TaxTables
from ..money import ZERO, round_money, round_rate, safe_ratio, to_decimal
from .calculators import RegimeCalculator
from .cnae import find_cnae
from .eligibility import EligibilityRules
from .formatting import format_currency, format_percentage
from .scoring import RegimeScorer

logger = logging.getLogger(__name__)

LOW_MARGIN = Decimal("0.02")
HIGH_MARGIN = Decimal("0.50")
LOW_REVENUE_PER_EMPLOYEE = Decimal("50000")
HIGH_REVENUE_PER_EMPLOYEE = Decimal("1000000")
LARGE_PROFESSIONAL_TEAM = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaxComparator:
    """Runs every regime for a profile and ranks the outcome.

    Per-regime failures become ineligible rows. ``compare`` raises only for
    invalid input or when no regime at all can be computed.
    """

    def __init__(
        self,
        tables: TaxTables,
        rules: Optional[EligibilityRules] = None,
        calculator: Optional[RegimeCalculator] = None,
        scorer: Optional[RegimeScorer] = None,
        retention_days: int = 30,
        bracket_warning_margin: Decimal = Decimal("0.05"),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.tables = tables
        self.rules = rules or EligibilityRules(tables)
        self.calculator = calculator or RegimeCalculator(tables)
        self.scorer = scorer or RegimeScorer(tables)
        self.retention_days = retention_days
        self.bracket_warning_margin = to_decimal(bracket_warning_margin)
        self.clock = clock

    def compare(self, profile: CompanyProfile) -> TaxComparison:
        self._validate(profile)
        if profile.sector is None:
            profile = profile.model_copy(update={"sector": self.tables.rule_for_activity(profile.activity).sector})

        eligibilities = self.rules.check_all(profile)
        computed = [self._evaluate(profile, eligibility) for eligibility in eligibilities]

        eligible = [result for result in computed if result.eligible]
        if not eligible:
            reasons = {result.regime: result.ineligibility_reason or "" for result in computed}
            logger.warning("No eligible regime for activity=%s revenue=%s", profile.activity.value, profile.annual_revenue)
            raise NoEligibleRegimeError(reasons)

        # min() keeps the first of equal totals, i.e. declaration order
        best = min(eligible, key=lambda result: result.breakdown.total)
        results = self.scorer.score(profile, [self._with_savings(result, best) for result in computed])
        # max() keeps the first of equal scores as well
        recommended = max(
            (result for result in results if result.eligible), key=lambda result: result.overall_score
        )

        current = next(result for result in results if result.regime == profile.current_regime)
        current_total = current.total if current.eligible else None
        max_savings = ZERO
        if current_total is not None:
            max_savings = max(current_total - best.breakdown.total, ZERO)
        max_savings = round_money(max_savings)

        created_at = self.clock()
        comparison = TaxComparison(
            id=uuid.uuid4().hex,
            company_profile=profile,
            results=results,
            best_regime=best.regime,
            recommended_regime=recommended.regime,
            max_savings=max_savings,
            current_regime_total=current_total,
            insights=self._build_insights(profile, results, best, current, recommended),
            warnings=self._build_warnings(profile, eligibilities, results, current),
            next_actions=self._build_next_actions(profile, best.regime),
            fiscal_year=self.tables.fiscal_year,
            created_at=created_at,
            expires_at=created_at + relativedelta(days=self.retention_days),
        )
        logger.info(
            "Compared regimes activity=%s revenue=%s best=%s eligible=%d savings=%s",
            profile.activity.value,
            profile.annual_revenue,
            best.regime.value,
            len(eligible),
            max_savings,
        )
        return comparison

    def _validate(self, profile: CompanyProfile) -> None:
        if profile.annual_revenue < 0:
            raise InvalidInputError("Faturamento anual não pode ser negativo", field="annual_revenue")
        if profile.employee_count < 0:
            raise InvalidInputError("Número de funcionários não pode ser negativo", field="employee_count")
        if profile.profit_margin is not None and profile.profit_margin > 1:
            raise InvalidInputError("Margem de lucro deve ser informada como fração da receita (até 1)", field="profit_margin")
        if profile.activity not in self.tables.activities:
            raise InvalidInputError(f"Atividade '{profile.activity.value}' sem anexo mapeado", field="activity")

    def _evaluate(self, profile: CompanyProfile, eligibility: RegimeEligibility) -> TaxCalculationResult:
        if not eligibility.eligible:
            return TaxCalculationResult(
                regime=eligibility.regime, eligible=False, ineligibility_reason=eligibility.reason
            )
        try:
            breakdown = self.calculator.calculate(eligibility.regime, profile)
        except CalculationError as exc:
            logger.debug("Regime %s downgraded to ineligible: %s", eligibility.regime.value, exc)
            return TaxCalculationResult(regime=eligibility.regime, eligible=False, ineligibility_reason=str(exc))
        return TaxCalculationResult(regime=eligibility.regime, eligible=True, breakdown=breakdown)

    def _with_savings(self, result: TaxCalculationResult, best: TaxCalculationResult) -> TaxCalculationResult:
        if not result.eligible or result.regime == best.regime:
            return result
        savings = round_money(result.breakdown.total - best.breakdown.total)
        percentage = round_rate(safe_ratio(savings, result.breakdown.total))
        return result.model_copy(update={"savings_vs_best": savings, "savings_percentage": percentage})

    def _build_insights(
        self,
        profile: CompanyProfile,
        results: List[TaxCalculationResult],
        best: TaxCalculationResult,
        current: TaxCalculationResult,
        recommended: TaxCalculationResult,
    ) -> List[str]:
        best_name = REGIME_NAMES[best.regime]
        insights = [
            f"{best_name} é o regime de menor carga: {format_currency(best.breakdown.total)} por ano "
            f"({format_percentage(best.breakdown.effective_rate)} do faturamento)"
        ]
        if current.eligible and current.regime != best.regime:
            insights.append(
                f"Migrar de {REGIME_NAMES[current.regime]} para {best_name} economiza "
                f"{format_currency(current.savings_vs_best)} por ano "
                f"({format_percentage(current.savings_percentage)} do custo atual)"
            )
            delta = current.breakdown.effective_rate - best.breakdown.effective_rate
            insights.append(f"A alíquota efetiva cai {format_percentage(delta)} com a mudança")
        elif current.regime == best.regime:
            insights.append(f"O regime atual ({best_name}) já é o mais econômico")
        if recommended.regime != best.regime:
            insights.append(
                f"Pesando custo, adequação ao perfil, folga de crescimento e simplicidade, "
                f"{REGIME_NAMES[recommended.regime]} tem a melhor pontuação ({recommended.overall_score}/100)"
            )

        for result in results:
            if result.eligible:
                insights.append(
                    f"{REGIME_NAMES[result.regime]}: {format_currency(result.breakdown.total)} "
                    f"(alíquota efetiva {format_percentage(result.breakdown.effective_rate)})"
                )
        others = [result for result in results if result.eligible and result.regime is not TaxRegime.MEI]
        if profile.annual_revenue == 0 and all(result.breakdown.total == 0 for result in others):
            insights.append("Sem faturamento declarado: só o MEI gera custo fixo")
        return insights

    def _build_warnings(
        self,
        profile: CompanyProfile,
        eligibilities: List[RegimeEligibility],
        results: List[TaxCalculationResult],
        current: TaxCalculationResult,
    ) -> List[str]:
        warnings: List[str] = []
        for eligibility in eligibilities:
            warnings.extend(eligibility.warnings)

        simples = next(result for result in results if result.regime is TaxRegime.SIMPLES_NACIONAL)
        if simples.eligible and simples.breakdown.annex is not None:
            warning = self._bracket_warning(simples, profile.annual_revenue)
            if warning:
                warnings.append(warning)

        if not current.eligible:
            warnings.append(
                f"Regime atual ({REGIME_NAMES[current.regime]}) não é elegível com os dados informados: "
                f"{current.ineligibility_reason}"
            )
        if self.rules.is_real_mandatory(profile) and profile.current_regime is not TaxRegime.LUCRO_REAL:
            warnings.append(
                f"Lucro Real é obrigatório para faturamento acima de "
                f"{format_currency(self.tables.limits.presumido_max_revenue)}"
            )

        rule = self.tables.rule_for_activity(profile.activity)
        if profile.sector is not None and profile.sector != rule.sector:
            warnings.append(
                f"Setor '{profile.sector.value}' não corresponde à atividade '{profile.activity.value}' "
                f"(esperado '{rule.sector.value}')"
            )
        if profile.cnae:
            entry = find_cnae(profile.cnae)
            if entry is None:
                warnings.append(f"CNAE {profile.cnae} não consta do catálogo; confirme a atividade informada")
            elif entry.activity != profile.activity:
                warnings.append(
                    f"CNAE {entry.code} ({entry.description}) corresponde à atividade '{entry.activity.value}', "
                    f"não a '{profile.activity.value}'"
                )
        warnings.extend(self._profile_advisories(profile))
        return warnings

    def _profile_advisories(self, profile: CompanyProfile) -> List[str]:
        """Flag figures that look inconsistent for a going concern."""
        advisories: List[str] = []
        revenue = profile.annual_revenue
        profit = profile.actual_profit()
        if profit is not None and revenue > 0:
            margin = profit / revenue
            if margin < 0:
                advisories.append("Empresa com prejuízo: considere estratégias de recuperação")
            elif margin < LOW_MARGIN:
                advisories.append(f"Margem muito baixa ({format_percentage(margin)}): empresa em situação delicada")
            elif margin > HIGH_MARGIN:
                advisories.append(
                    f"Margem excepcionalmente alta ({format_percentage(margin)}): verifique se os dados estão corretos"
                )
        if profile.employee_count > 0:
            per_employee = revenue / profile.employee_count
            if per_employee < LOW_REVENUE_PER_EMPLOYEE:
                advisories.append(
                    f"Faturamento por funcionário muito baixo ({format_currency(per_employee)})"
                )
            elif per_employee > HIGH_REVENUE_PER_EMPLOYEE:
                advisories.append(
                    f"Faturamento por funcionário excepcionalmente alto ({format_currency(per_employee)})"
                )
        return advisories

    def _bracket_warning(self, simples: TaxCalculationResult, revenue: Decimal) -> Optional[str]:
        breakdown = simples.breakdown
        table = self.tables.annexes[breakdown.annex]
        row = self.tables.bracket_for_revenue(breakdown.annex, revenue)
        threshold = row.revenue_ceiling * (1 - self.bracket_warning_margin)
        if revenue < threshold or revenue <= 0:
            return None
        if row.bracket_index == table.brackets[-1].bracket_index:
            return (
                f"Faturamento a menos de {format_percentage(self.bracket_warning_margin, 0)} do teto do "
                f"Simples Nacional ({format_currency(row.revenue_ceiling)})"
            )
        return (
            f"Faturamento próximo da próxima faixa do Anexo {breakdown.annex.value}: a faixa "
            f"{row.bracket_index} vai até {format_currency(row.revenue_ceiling)}"
        )

    def _build_next_actions(self, profile: CompanyProfile, best: TaxRegime) -> List[str]:
        actions: List[str] = []
        if profile.current_regime != best:
            actions.append(f"Considerar a mudança para {REGIME_NAMES[best]}")
            actions.append("Consultar o contador para analisar a transição em detalhe")
        else:
            actions.append("Manter o regime atual e acompanhar mudanças na legislação")

        follow_ups: Dict[TaxRegime, List[str]] = {
            TaxRegime.MEI: [
                f"Monitorar o faturamento para não ultrapassar {format_currency(self.tables.limits.mei_max_revenue)} por ano",
            ],
            TaxRegime.SIMPLES_NACIONAL: [
                "Acompanhar o faturamento acumulado de 12 meses para antecipar a troca de faixa",
                "Revisar o enquadramento no anexo anualmente",
            ],
            TaxRegime.LUCRO_PRESUMIDO: [
                "Comparar a margem real com a margem presumida da atividade",
            ],
            TaxRegime.LUCRO_REAL: [
                "Manter escrituração contábil completa (ECD/ECF e LALUR)",
                "Mapear créditos de PIS/COFINS não cumulativos",
            ],
        }
        actions.extend(follow_ups[best])
        actions.extend(self._profile_suggestions(profile))
        return actions

    def _profile_suggestions(self, profile: CompanyProfile) -> List[str]:
        suggestions: List[str] = []
        revenue = profile.annual_revenue
        rule = self.tables.rule_for_activity(profile.activity)
        profit = profile.actual_profit()
        if profit is not None and revenue > 0:
            margin = profit / revenue
            typical = rule.presumption_irpj
            if margin < typical * Decimal("0.5"):
                suggestions.append(
                    f"Margem abaixo da presumida para a atividade ({format_percentage(typical)})"
                )
            elif margin > typical * 2:
                suggestions.append("Margem bem acima da presumida para a atividade: avaliar o Lucro Presumido")
        limits = self.tables.limits
        if revenue <= limits.mei_max_revenue and profile.employee_count > limits.mei_max_employees:
            suggestions.append(
                f"Com esse faturamento o MEI seria possível com no máximo {limits.mei_max_employees} funcionário(s)"
            )
        if rule.sector is BusinessSector.SERVICOS_ANEXO_V and profile.employee_count > LARGE_PROFESSIONAL_TEAM:
            suggestions.append("Serviços profissionais com equipe grande devem avaliar com cuidado o Simples Nacional")
        return suggestions
