from __future__ import annotations

from decimal import Decimal
from typing import FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..errors import RangeExceededError, TableConfigurationError
from .common import ActivityType, Annex, BusinessSector, FrozenDict, LocalTax, MeiCategory, TaxComponent

ONE = Decimal("1")


class TaxBracketRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    bracket_index: int
    revenue_ceiling: Decimal
    nominal_rate: Decimal = Field(..., description="Nominal aliquot as decimal (0.16 for 16%)")
    deduction: Decimal = Field(..., description="Parcela a deduzir (BRL)")


class SimplesAnnexTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    annex: Annex
    brackets: Tuple[TaxBracketRow, ...]
    distribution: FrozenDict[TaxComponent, Decimal] = Field(
        ..., description="Static share of the DAS owed to each component; sums to 1"
    )

    @property
    def max_revenue(self) -> Decimal:
        return self.brackets[-1].revenue_ceiling


class ActivityRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    activity: ActivityType
    sector: BusinessSector
    annex: Annex
    mei_category: Optional[MeiCategory] = None
    presumption_irpj: Decimal
    presumption_csll: Decimal
    local_tax: LocalTax


class MeiFee(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: MeiCategory
    monthly_fee: Decimal
    monthly_components: FrozenDict[TaxComponent, Decimal]


class PresumedProfitRates(BaseModel):
    model_config = ConfigDict(frozen=True)

    irpj_rate: Decimal
    irpj_surcharge_rate: Decimal
    irpj_surcharge_threshold: Decimal = Field(..., description="Annual presumed profit exempt from the surcharge")
    csll_rate: Decimal
    pis_rate: Decimal
    cofins_rate: Decimal
    local_rates: FrozenDict[LocalTax, Decimal]


class RealProfitRates(BaseModel):
    model_config = ConfigDict(frozen=True)

    irpj_rate: Decimal
    irpj_surcharge_rate: Decimal
    irpj_surcharge_threshold: Decimal
    csll_rate: Decimal
    csll_rate_financial: Decimal
    pis_rate: Decimal
    cofins_rate: Decimal
    credit_share: FrozenDict[BusinessSector, Decimal] = Field(
        ..., description="Estimated share of PIS/COFINS recovered as non-cumulative credits"
    )
    local_rates: FrozenDict[BusinessSector, Decimal]


class RegimeLimits(BaseModel):
    model_config = ConfigDict(frozen=True)

    mei_max_revenue: Decimal
    mei_max_employees: int
    mei_activities: FrozenSet[ActivityType]
    simples_max_revenue: Decimal
    simples_excluded_activities: FrozenSet[ActivityType]
    presumido_max_revenue: Decimal


class TaxTables(BaseModel):
    """Reference data for one fiscal year.

    Built once and passed into the comparator. Construction validates the
    tables, so a broken table set never reaches a calculation.
    """

    model_config = ConfigDict(frozen=True)

    fiscal_year: int
    annexes: FrozenDict[Annex, SimplesAnnexTable]
    activities: FrozenDict[ActivityType, ActivityRule]
    mei_fees: FrozenDict[MeiCategory, MeiFee]
    presumido: PresumedProfitRates
    real: RealProfitRates
    limits: RegimeLimits

    @model_validator(mode="after")
    def _check_consistency(self) -> "TaxTables":
        for annex in Annex:
            table = self.annexes.get(annex)
            if table is None:
                raise TableConfigurationError(f"Anexo {annex.value} sem tabela de faixas")
            _check_brackets(table)
            if sum(table.distribution.values(), Decimal("0")) != ONE:
                raise TableConfigurationError(f"Repartição do Anexo {annex.value} não soma 100%")
        for activity in ActivityType:
            rule = self.activities.get(activity)
            if rule is None:
                raise TableConfigurationError(f"Atividade '{activity.value}' sem anexo mapeado")
            if rule.activity != activity:
                raise TableConfigurationError(f"Regra da atividade '{activity.value}' registrada sob outra chave")
        for activity in self.limits.mei_activities:
            category = self.activities[activity].mei_category
            if category is None or category not in self.mei_fees:
                raise TableConfigurationError(f"Atividade MEI '{activity.value}' sem valor de DAS-MEI")
        for fee in self.mei_fees.values():
            if sum(fee.monthly_components.values(), Decimal("0")) != fee.monthly_fee:
                raise TableConfigurationError(f"DAS-MEI de {fee.category.value} não confere com seus componentes")
        if self.limits.simples_max_revenue <= self.limits.mei_max_revenue:
            raise TableConfigurationError("Teto do Simples deve ser maior que o teto do MEI")
        for annex, table in self.annexes.items():
            if table.max_revenue != self.limits.simples_max_revenue:
                raise TableConfigurationError(f"Última faixa do Anexo {annex.value} difere do teto do Simples")
        return self

    def bracket_for_revenue(self, annex: Annex, revenue: Decimal) -> TaxBracketRow:
        table = self.annexes[annex]
        for row in table.brackets:
            if revenue <= row.revenue_ceiling:
                return row
        raise RangeExceededError(
            f"Receita de {revenue} excede a última faixa do Anexo {annex.value} ({table.max_revenue})"
        )

    def annex_for_activity(self, activity: ActivityType) -> Annex:
        return self.activities[activity].annex

    def rule_for_activity(self, activity: ActivityType) -> ActivityRule:
        return self.activities[activity]


def _check_brackets(table: SimplesAnnexTable) -> None:
    if not table.brackets:
        raise TableConfigurationError(f"Anexo {table.annex.value} sem faixas")
    previous: Optional[TaxBracketRow] = None
    for row in table.brackets:
        if previous is not None:
            if row.bracket_index <= previous.bracket_index:
                raise TableConfigurationError(f"Anexo {table.annex.value}: índices de faixa fora de ordem")
            if row.revenue_ceiling <= previous.revenue_ceiling:
                raise TableConfigurationError(f"Anexo {table.annex.value}: tetos de faixa fora de ordem")
        previous = row
