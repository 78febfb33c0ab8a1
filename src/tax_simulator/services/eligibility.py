from __future__ import annotations

from decimal import Decimal
from typing import List

from ..models.common import REGIME_ORDER, Annex, TaxRegime
from ..models.company import CompanyProfile
from ..models.results import RegimeEligibility
from ..models.tables import TaxTables
from .formatting import format_currency, format_percentage

MEI_NEAR_LIMIT = Decimal("0.8")
SIMPLES_NEAR_LIMIT = Decimal("0.9")


class EligibilityRules:
    """Decides whether a profile may adopt each regime.

    Rules only read the profile and the limits in the tables; they never
    calculate taxes. Lucro Real is the regime of last resort and is always
    admissible.
    """

    def __init__(self, tables: TaxTables) -> None:
        self.tables = tables

    def check(self, profile: CompanyProfile, regime: TaxRegime) -> RegimeEligibility:
        if regime is TaxRegime.MEI:
            return self._check_mei(profile)
        if regime is TaxRegime.SIMPLES_NACIONAL:
            return self._check_simples(profile)
        if regime is TaxRegime.LUCRO_PRESUMIDO:
            return self._check_presumido(profile)
        return self._check_real(profile)

    def check_all(self, profile: CompanyProfile) -> List[RegimeEligibility]:
        return [self.check(profile, regime) for regime in REGIME_ORDER]

    def _check_mei(self, profile: CompanyProfile) -> RegimeEligibility:
        limits = self.tables.limits
        revenue = profile.annual_revenue
        if revenue > limits.mei_max_revenue:
            return _ineligible(
                TaxRegime.MEI,
                f"Faturamento {format_currency(revenue)} excede o limite MEI de {format_currency(limits.mei_max_revenue)}",
            )
        if profile.employee_count > limits.mei_max_employees:
            return _ineligible(
                TaxRegime.MEI,
                f"MEI permite no máximo {limits.mei_max_employees} funcionário(s). Atual: {profile.employee_count}",
            )
        if profile.activity not in limits.mei_activities:
            return _ineligible(TaxRegime.MEI, f"Atividade '{profile.activity.value}' não permitida no MEI")

        warnings = []
        if revenue > limits.mei_max_revenue * MEI_NEAR_LIMIT:
            usage = revenue / limits.mei_max_revenue
            warnings.append(f"Faturamento próximo do limite MEI ({format_percentage(usage)} do teto)")
        return RegimeEligibility(
            regime=TaxRegime.MEI,
            eligible=True,
            reason="Faturamento, funcionários e atividade compatíveis com o MEI",
            warnings=warnings,
        )

    def _check_simples(self, profile: CompanyProfile) -> RegimeEligibility:
        limits = self.tables.limits
        revenue = profile.annual_revenue
        if revenue > limits.simples_max_revenue:
            return _ineligible(
                TaxRegime.SIMPLES_NACIONAL,
                f"Faturamento {format_currency(revenue)} excede o limite do Simples de "
                f"{format_currency(limits.simples_max_revenue)}",
            )
        if profile.activity in limits.simples_excluded_activities:
            return _ineligible(
                TaxRegime.SIMPLES_NACIONAL,
                f"Atividade '{profile.activity.value}' vedada no Simples Nacional",
            )

        annex = self.tables.annex_for_activity(profile.activity)
        warnings = []
        if revenue > limits.simples_max_revenue * SIMPLES_NEAR_LIMIT:
            warnings.append("Faturamento próximo do limite do Simples Nacional - planeje o crescimento")
        if annex is Annex.V:
            warnings.append("Anexo V do Simples tem alíquotas mais altas - compare com o Lucro Presumido")
        return RegimeEligibility(
            regime=TaxRegime.SIMPLES_NACIONAL,
            eligible=True,
            reason=f"Faturamento dentro do teto do Simples; tributação pelo Anexo {annex.value}",
            warnings=warnings,
        )

    def _check_presumido(self, profile: CompanyProfile) -> RegimeEligibility:
        ceiling = self.tables.limits.presumido_max_revenue
        if profile.annual_revenue > ceiling:
            return _ineligible(
                TaxRegime.LUCRO_PRESUMIDO,
                f"Faturamento {format_currency(profile.annual_revenue)} excede o limite do Lucro Presumido de "
                f"{format_currency(ceiling)}",
            )
        return RegimeEligibility(
            regime=TaxRegime.LUCRO_PRESUMIDO,
            eligible=True,
            reason="Faturamento dentro do teto do Lucro Presumido",
        )

    def _check_real(self, profile: CompanyProfile) -> RegimeEligibility:
        if self.is_real_mandatory(profile):
            reason = (
                f"Lucro Real obrigatório para faturamento acima de "
                f"{format_currency(self.tables.limits.presumido_max_revenue)}"
            )
        else:
            reason = "Lucro Real é opcional para este faturamento"
        return RegimeEligibility(regime=TaxRegime.LUCRO_REAL, eligible=True, reason=reason)

    def is_real_mandatory(self, profile: CompanyProfile) -> bool:
        return profile.annual_revenue > self.tables.limits.presumido_max_revenue


def _ineligible(regime: TaxRegime, reason: str) -> RegimeEligibility:
    return RegimeEligibility(regime=regime, eligible=False, reason=reason)
