from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import ActivityType, BrazilianState, BusinessSector, TaxRegime


class CompanyProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    annual_revenue: Decimal = Field(..., description="Gross revenue over the last 12 months (BRL)")
    activity: ActivityType
    sector: Optional[BusinessSector] = Field(
        default=None, description="Coarse sector; derived from the activity when omitted"
    )
    current_regime: TaxRegime
    operating_state: BrazilianState
    employee_count: int = 0
    net_profit: Optional[Decimal] = Field(
        default=None, description="Declared annual accounting profit, used by Lucro Real"
    )
    profit_margin: Optional[Decimal] = Field(
        default=None, description="Declared or estimated profit margin as decimal (e.g. 0.12)"
    )
    cnae: Optional[str] = None

    def actual_profit(self) -> Optional[Decimal]:
        if self.net_profit is not None:
            return self.net_profit
        if self.profit_margin is not None:
            return self.annual_revenue * self.profit_margin
        return None
