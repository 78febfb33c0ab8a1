from __future__ import annotations

from decimal import Decimal
from typing import Dict, Optional

from ..errors import CalculationError, MissingInputError
from ..models.common import ActivityType, Annex, LocalTax, TaxComponent, TaxRegime
from ..models.company import CompanyProfile
from ..models.results import TaxBreakdown
from ..models.tables import TaxTables
from ..money import ZERO, round_money, round_rate, safe_ratio

MONTHS_PER_YEAR = 12

LOCAL_TAX_COMPONENT = {
    LocalTax.ICMS: TaxComponent.ICMS,
    LocalTax.ISS: TaxComponent.ISS,
}


class RegimeCalculator:
    def __init__(self, tables: TaxTables) -> None:
        self.tables = tables

    def calculate(self, regime: TaxRegime, profile: CompanyProfile) -> TaxBreakdown:
        if regime is TaxRegime.MEI:
            return self._compute_mei(profile)
        if regime is TaxRegime.SIMPLES_NACIONAL:
            return self._compute_simples(profile)
        if regime is TaxRegime.LUCRO_PRESUMIDO:
            return self._compute_presumido(profile)
        return self._compute_real(profile)

    def _compute_mei(self, profile: CompanyProfile) -> TaxBreakdown:
        rule = self.tables.rule_for_activity(profile.activity)
        fee = self.tables.mei_fees.get(rule.mei_category) if rule.mei_category is not None else None
        if fee is None:
            raise CalculationError(f"Sem valor de DAS-MEI para a atividade '{profile.activity.value}'")
        components = {component: amount * MONTHS_PER_YEAR for component, amount in fee.monthly_components.items()}
        return _build_breakdown(components, profile.annual_revenue)

    def _compute_simples(self, profile: CompanyProfile) -> TaxBreakdown:
        revenue = profile.annual_revenue
        annex = self.tables.annex_for_activity(profile.activity)
        table = self.tables.annexes[annex]
        row = self.tables.bracket_for_revenue(annex, revenue)

        if revenue > 0:
            aliquot = max((revenue * row.nominal_rate - row.deduction) / revenue, ZERO)
            total = round_money(revenue * aliquot)
        else:
            total = round_money(ZERO)

        components: Dict[TaxComponent, Decimal] = {}
        allocated = ZERO
        shares = [(component, share) for component, share in table.distribution.items() if share > 0]
        for position, (component, share) in enumerate(shares):
            if position == len(shares) - 1:
                # last share takes the rounding remainder so parts add up to the DAS
                components[component] = total - allocated
            else:
                components[component] = round_money(total * share)
                allocated += components[component]

        return _build_breakdown(
            components,
            revenue,
            annex=annex,
            bracket_index=row.bracket_index,
            nominal_rate=row.nominal_rate,
        )

    def _compute_presumido(self, profile: CompanyProfile) -> TaxBreakdown:
        revenue = profile.annual_revenue
        rule = self.tables.rule_for_activity(profile.activity)
        rates = self.tables.presumido

        irpj_base = revenue * rule.presumption_irpj
        csll_base = revenue * rule.presumption_csll
        irpj = _irpj(irpj_base, rates.irpj_rate, rates.irpj_surcharge_rate, rates.irpj_surcharge_threshold)

        components = {
            TaxComponent.IRPJ: irpj,
            TaxComponent.CSLL: csll_base * rates.csll_rate,
            TaxComponent.PIS: revenue * rates.pis_rate,
            TaxComponent.COFINS: revenue * rates.cofins_rate,
            LOCAL_TAX_COMPONENT[rule.local_tax]: revenue * rates.local_rates[rule.local_tax],
        }
        return _build_breakdown(components, revenue, taxable_profit=round_money(irpj_base))

    def _compute_real(self, profile: CompanyProfile) -> TaxBreakdown:
        profit = profile.actual_profit()
        if profit is None:
            raise MissingInputError(
                "Lucro Real exige o lucro líquido ou a margem de lucro da empresa", field="profit_margin"
            )
        revenue = profile.annual_revenue
        rule = self.tables.rule_for_activity(profile.activity)
        rates = self.tables.real

        taxable = max(profit, ZERO)
        csll_rate = rates.csll_rate_financial if profile.activity is ActivityType.FINANCEIRO else rates.csll_rate
        credit_factor = 1 - rates.credit_share[rule.sector]

        components = {
            TaxComponent.IRPJ: _irpj(taxable, rates.irpj_rate, rates.irpj_surcharge_rate, rates.irpj_surcharge_threshold),
            TaxComponent.CSLL: taxable * csll_rate,
            TaxComponent.PIS: revenue * rates.pis_rate * credit_factor,
            TaxComponent.COFINS: revenue * rates.cofins_rate * credit_factor,
            LOCAL_TAX_COMPONENT[rule.local_tax]: revenue * rates.local_rates[rule.sector],
        }
        return _build_breakdown(components, revenue, taxable_profit=round_money(profit))


def _irpj(base: Decimal, rate: Decimal, surcharge_rate: Decimal, threshold: Decimal) -> Decimal:
    # full-year period only: the monthly exemption is already annualised in the threshold
    surcharge = max(base - threshold, ZERO) * surcharge_rate
    return base * rate + surcharge


def _build_breakdown(
    components: Dict[TaxComponent, Decimal],
    revenue: Decimal,
    annex: Optional[Annex] = None,
    bracket_index: Optional[int] = None,
    nominal_rate: Optional[Decimal] = None,
    taxable_profit: Optional[Decimal] = None,
) -> TaxBreakdown:
    rounded = {component: round_money(components.get(component, ZERO)) for component in TaxComponent}
    total = sum(rounded.values(), round_money(ZERO))
    return TaxBreakdown(
        components=rounded,
        total=total,
        effective_rate=round_rate(safe_ratio(total, revenue)),
        annex=annex,
        bracket_index=bracket_index,
        nominal_rate=nominal_rate,
        taxable_profit=taxable_profit,
    )
