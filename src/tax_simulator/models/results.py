from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .common import Annex, FrozenDict, TaxComponent, TaxRegime
from .company import CompanyProfile


class RegimeEligibility(BaseModel):
    model_config = ConfigDict(frozen=True)

    regime: TaxRegime
    eligible: bool
    reason: str
    warnings: List[str] = Field(default_factory=list)


class TaxBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    components: FrozenDict[TaxComponent, Decimal]
    total: Decimal
    effective_rate: Decimal = Field(..., description="total / annual revenue, 0 when revenue is 0")
    annex: Optional[Annex] = None
    bracket_index: Optional[int] = None
    nominal_rate: Optional[Decimal] = None
    taxable_profit: Optional[Decimal] = None

    def amount(self, component: TaxComponent) -> Decimal:
        return self.components.get(component, Decimal("0"))


class TaxCalculationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    regime: TaxRegime
    eligible: bool
    breakdown: Optional[TaxBreakdown] = None
    ineligibility_reason: Optional[str] = None
    savings_vs_best: Decimal = Decimal("0")
    savings_percentage: Decimal = Decimal("0")
    recommendation_score: int = Field(default=0, ge=0, le=100, description="Regime-specific fit for the profile")
    recommended: bool = False
    overall_score: Decimal = Field(
        default=Decimal("0"), description="Weighted cost, fit, headroom and simplicity score (0-100)"
    )
    advantages: Tuple[str, ...] = ()
    disadvantages: Tuple[str, ...] = ()
    limitations: Tuple[str, ...] = ()

    @property
    def total(self) -> Optional[Decimal]:
        return self.breakdown.total if self.breakdown is not None else None


class TaxComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    company_profile: CompanyProfile
    results: List[TaxCalculationResult]
    best_regime: TaxRegime
    recommended_regime: Optional[TaxRegime] = None
    max_savings: Decimal
    current_regime_total: Optional[Decimal] = None
    insights: List[str]
    warnings: List[str]
    next_actions: List[str] = Field(default_factory=list)
    fiscal_year: int
    created_at: datetime
    expires_at: datetime

    def result_for(self, regime: TaxRegime) -> TaxCalculationResult:
        for result in self.results:
            if result.regime == regime:
                return result
        raise KeyError(regime)

    def eligible_results(self) -> List[TaxCalculationResult]:
        return [result for result in self.results if result.eligible]
