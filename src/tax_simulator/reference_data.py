"""Fiscal-year reference tables.

Simples Nacional annexes follow LC 123/2006 as amended by LC 155/2016. The
DAS distribution per annex is the legal split of the first bracket, applied
to every bracket of that annex.
"""
from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Callable, Dict, List, Tuple

from .errors import UnsupportedFiscalYearError
from .models.common import ActivityType, Annex, BusinessSector, LocalTax, MeiCategory, TaxComponent
from .models.tables import (
    ActivityRule,
    MeiFee,
    PresumedProfitRates,
    RealProfitRates,
    RegimeLimits,
    SimplesAnnexTable,
    TaxBracketRow,
    TaxTables,
)


def D(value: str) -> Decimal:
    return Decimal(value)


def _brackets(rows: List[Tuple[str, str, str]]) -> Tuple[TaxBracketRow, ...]:
    return tuple(
        TaxBracketRow(bracket_index=index, revenue_ceiling=D(ceiling), nominal_rate=D(rate), deduction=D(deduction))
        for index, (ceiling, rate, deduction) in enumerate(rows, start=1)
    )


def _annexes_2024() -> Dict[Annex, SimplesAnnexTable]:
    return {
        Annex.I: SimplesAnnexTable(
            annex=Annex.I,
            brackets=_brackets(
                [
                    ("180000", "0.04", "0"),
                    ("360000", "0.073", "5940"),
                    ("720000", "0.095", "13860"),
                    ("1800000", "0.107", "22500"),
                    ("3600000", "0.143", "87300"),
                    ("4800000", "0.19", "378000"),
                ]
            ),
            distribution={
                TaxComponent.IRPJ: D("0.055"),
                TaxComponent.CSLL: D("0.035"),
                TaxComponent.COFINS: D("0.1274"),
                TaxComponent.PIS: D("0.0276"),
                TaxComponent.CPP: D("0.415"),
                TaxComponent.ICMS: D("0.34"),
            },
        ),
        Annex.II: SimplesAnnexTable(
            annex=Annex.II,
            brackets=_brackets(
                [
                    ("180000", "0.045", "0"),
                    ("360000", "0.078", "5940"),
                    ("720000", "0.10", "13860"),
                    ("1800000", "0.112", "22500"),
                    ("3600000", "0.147", "85500"),
                    ("4800000", "0.30", "720000"),
                ]
            ),
            distribution={
                TaxComponent.IRPJ: D("0.055"),
                TaxComponent.CSLL: D("0.035"),
                TaxComponent.COFINS: D("0.1151"),
                TaxComponent.PIS: D("0.0249"),
                TaxComponent.CPP: D("0.375"),
                TaxComponent.IPI: D("0.075"),
                TaxComponent.ICMS: D("0.32"),
            },
        ),
        Annex.III: SimplesAnnexTable(
            annex=Annex.III,
            brackets=_brackets(
                [
                    ("180000", "0.06", "0"),
                    ("360000", "0.112", "9360"),
                    ("720000", "0.135", "17640"),
                    ("1800000", "0.16", "35640"),
                    ("3600000", "0.21", "125640"),
                    ("4800000", "0.33", "648000"),
                ]
            ),
            distribution={
                TaxComponent.IRPJ: D("0.04"),
                TaxComponent.CSLL: D("0.035"),
                TaxComponent.COFINS: D("0.1282"),
                TaxComponent.PIS: D("0.0278"),
                TaxComponent.CPP: D("0.434"),
                TaxComponent.ISS: D("0.335"),
            },
        ),
        # CPP is collected outside the DAS for Annex IV
        Annex.IV: SimplesAnnexTable(
            annex=Annex.IV,
            brackets=_brackets(
                [
                    ("180000", "0.045", "0"),
                    ("360000", "0.09", "8100"),
                    ("720000", "0.102", "12420"),
                    ("1800000", "0.14", "39780"),
                    ("3600000", "0.22", "183780"),
                    ("4800000", "0.33", "828000"),
                ]
            ),
            distribution={
                TaxComponent.IRPJ: D("0.188"),
                TaxComponent.CSLL: D("0.152"),
                TaxComponent.COFINS: D("0.1767"),
                TaxComponent.PIS: D("0.0383"),
                TaxComponent.ISS: D("0.445"),
            },
        ),
        Annex.V: SimplesAnnexTable(
            annex=Annex.V,
            brackets=_brackets(
                [
                    ("180000", "0.155", "0"),
                    ("360000", "0.18", "4500"),
                    ("720000", "0.195", "9900"),
                    ("1800000", "0.205", "17100"),
                    ("3600000", "0.23", "62100"),
                    ("4800000", "0.305", "540000"),
                ]
            ),
            distribution={
                TaxComponent.IRPJ: D("0.25"),
                TaxComponent.CSLL: D("0.15"),
                TaxComponent.COFINS: D("0.141"),
                TaxComponent.PIS: D("0.0305"),
                TaxComponent.CPP: D("0.2885"),
                TaxComponent.ISS: D("0.14"),
            },
        ),
    }


def _activity(
    activity: ActivityType,
    sector: BusinessSector,
    annex: Annex,
    irpj: str,
    csll: str,
    local_tax: LocalTax,
    mei_category: MeiCategory | None = None,
) -> ActivityRule:
    return ActivityRule(
        activity=activity,
        sector=sector,
        annex=annex,
        mei_category=mei_category,
        presumption_irpj=D(irpj),
        presumption_csll=D(csll),
        local_tax=local_tax,
    )


def _activities_2024() -> Dict[ActivityType, ActivityRule]:
    rules = [
        _activity(ActivityType.COMERCIO_VAREJO, BusinessSector.COMERCIO, Annex.I, "0.08", "0.12", LocalTax.ICMS, MeiCategory.COMERCIO),
        _activity(ActivityType.COMERCIO_ATACADO, BusinessSector.COMERCIO, Annex.I, "0.08", "0.12", LocalTax.ICMS),
        _activity(ActivityType.INDUSTRIA_GERAL, BusinessSector.INDUSTRIA, Annex.II, "0.08", "0.12", LocalTax.ICMS, MeiCategory.INDUSTRIA),
        _activity(ActivityType.SERVICOS_GERAIS, BusinessSector.SERVICOS, Annex.III, "0.32", "0.32", LocalTax.ISS, MeiCategory.SERVICOS),
        _activity(ActivityType.TECNOLOGIA, BusinessSector.SERVICOS, Annex.III, "0.32", "0.32", LocalTax.ISS),
        _activity(ActivityType.CONSULTORIA, BusinessSector.SERVICOS_ANEXO_V, Annex.V, "0.32", "0.32", LocalTax.ISS),
        _activity(ActivityType.SAUDE, BusinessSector.SERVICOS_ANEXO_V, Annex.V, "0.32", "0.32", LocalTax.ISS),
        _activity(ActivityType.EDUCACAO, BusinessSector.SERVICOS, Annex.III, "0.32", "0.32", LocalTax.ISS),
        # barred from the Simples; the annex only anchors the mapping
        _activity(ActivityType.FINANCEIRO, BusinessSector.SERVICOS, Annex.III, "0.16", "0.20", LocalTax.ISS),
        _activity(ActivityType.CONSTRUCAO_CIVIL, BusinessSector.SERVICOS_ANEXO_IV, Annex.IV, "0.32", "0.32", LocalTax.ISS),
        _activity(ActivityType.OUTROS, BusinessSector.SERVICOS, Annex.III, "0.32", "0.32", LocalTax.ISS),
    ]
    return {rule.activity: rule for rule in rules}


def _mei_fees_2024() -> Dict[MeiCategory, MeiFee]:
    return {
        MeiCategory.COMERCIO: MeiFee(
            category=MeiCategory.COMERCIO,
            monthly_fee=D("67.60"),
            monthly_components={TaxComponent.CPP: D("66.60"), TaxComponent.ICMS: D("1.00")},
        ),
        MeiCategory.INDUSTRIA: MeiFee(
            category=MeiCategory.INDUSTRIA,
            monthly_fee=D("72.60"),
            monthly_components={TaxComponent.CPP: D("66.60"), TaxComponent.ICMS: D("1.00"), TaxComponent.ISS: D("5.00")},
        ),
        MeiCategory.SERVICOS: MeiFee(
            category=MeiCategory.SERVICOS,
            monthly_fee=D("71.60"),
            monthly_components={TaxComponent.CPP: D("66.60"), TaxComponent.ISS: D("5.00")},
        ),
    }


def build_tables_2024() -> TaxTables:
    presumido = PresumedProfitRates(
        irpj_rate=D("0.15"),
        irpj_surcharge_rate=D("0.10"),
        irpj_surcharge_threshold=D("240000"),
        csll_rate=D("0.09"),
        pis_rate=D("0.0065"),
        cofins_rate=D("0.03"),
        local_rates={LocalTax.ICMS: D("0.18"), LocalTax.ISS: D("0.05")},
    )
    real = RealProfitRates(
        irpj_rate=D("0.15"),
        irpj_surcharge_rate=D("0.10"),
        irpj_surcharge_threshold=D("240000"),
        csll_rate=D("0.09"),
        csll_rate_financial=D("0.20"),
        pis_rate=D("0.0165"),
        cofins_rate=D("0.076"),
        credit_share={
            BusinessSector.COMERCIO: D("0.15"),
            BusinessSector.INDUSTRIA: D("0.30"),
            BusinessSector.SERVICOS: D("0.15"),
            BusinessSector.SERVICOS_ANEXO_IV: D("0.15"),
            BusinessSector.SERVICOS_ANEXO_V: D("0.15"),
        },
        local_rates={
            BusinessSector.COMERCIO: D("0.18"),
            BusinessSector.INDUSTRIA: D("0.12"),
            BusinessSector.SERVICOS: D("0.035"),
            BusinessSector.SERVICOS_ANEXO_IV: D("0.035"),
            BusinessSector.SERVICOS_ANEXO_V: D("0.035"),
        },
    )
    limits = RegimeLimits(
        mei_max_revenue=D("81000"),
        mei_max_employees=1,
        mei_activities=frozenset(
            {ActivityType.COMERCIO_VAREJO, ActivityType.SERVICOS_GERAIS, ActivityType.INDUSTRIA_GERAL}
        ),
        simples_max_revenue=D("4800000"),
        simples_excluded_activities=frozenset({ActivityType.FINANCEIRO}),
        presumido_max_revenue=D("78000000"),
    )
    return TaxTables(
        fiscal_year=2024,
        annexes=_annexes_2024(),
        activities=_activities_2024(),
        mei_fees=_mei_fees_2024(),
        presumido=presumido,
        real=real,
        limits=limits,
    )


TABLE_BUILDERS: Dict[int, Callable[[], TaxTables]] = {
    2024: build_tables_2024,
}


def supported_fiscal_years() -> List[int]:
    return sorted(TABLE_BUILDERS)


@lru_cache(maxsize=None)
def load_tables(fiscal_year: int = 2024) -> TaxTables:
    builder = TABLE_BUILDERS.get(fiscal_year)
    if builder is None:
        raise UnsupportedFiscalYearError(
            f"Tabelas do ano-calendário {fiscal_year} indisponíveis (suportados: {supported_fiscal_years()})"
        )
    return builder()
