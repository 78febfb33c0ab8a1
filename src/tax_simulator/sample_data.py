from __future__ import annotations

from decimal import Decimal

from .models.common import ActivityType, BrazilianState, TaxRegime
from .models.company import CompanyProfile


def build_sample_profile() -> CompanyProfile:
    """Software house in Anexo III paying Lucro Presumido today."""
    return CompanyProfile(
        annual_revenue=Decimal("1000000"),
        activity=ActivityType.TECNOLOGIA,
        current_regime=TaxRegime.LUCRO_PRESUMIDO,
        operating_state=BrazilianState.SP,
        employee_count=8,
        profit_margin=Decimal("0.20"),
        cnae="62.01-5-01",
    )


def build_mei_profile() -> CompanyProfile:
    return CompanyProfile(
        annual_revenue=Decimal("60000"),
        activity=ActivityType.SERVICOS_GERAIS,
        current_regime=TaxRegime.MEI,
        operating_state=BrazilianState.MG,
        employee_count=0,
    )


def build_large_profile() -> CompanyProfile:
    """Wholesaler above every ceiling except Lucro Real."""
    return CompanyProfile(
        annual_revenue=Decimal("90000000"),
        activity=ActivityType.COMERCIO_ATACADO,
        current_regime=TaxRegime.LUCRO_PRESUMIDO,
        operating_state=BrazilianState.RJ,
        employee_count=250,
        profit_margin=Decimal("0.04"),
    )
