from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from .models.common import ActivityType, Annex, BusinessSector, TaxRegime
from .models.company import CompanyProfile
from .models.results import TaxComparison


class CompareRequest(BaseModel):
    profile: CompanyProfile


class CompareResponse(BaseModel):
    comparison: TaxComparison


class RegimeInfo(BaseModel):
    regime: TaxRegime
    name: str
    max_revenue: Optional[Decimal] = None


class RegimeListResponse(BaseModel):
    fiscal_year: int
    regimes: List[RegimeInfo]


class ActivityInfo(BaseModel):
    activity: ActivityType
    sector: BusinessSector
    annex: Annex
    mei_allowed: bool
    simples_allowed: bool


class ActivityListResponse(BaseModel):
    activities: List[ActivityInfo]


class CnaeResponse(BaseModel):
    code: str
    description: str
    activity: ActivityType
    annex: Optional[Annex] = None
    prohibited_in_simples: bool
