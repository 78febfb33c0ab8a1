from __future__ import annotations

import logging
from typing import Dict

from fastapi import FastAPI, HTTPException

from .config import get_settings
from .errors import InvalidInputError, NoEligibleRegimeError
from .logs import configure_logging
from .models.common import REGIME_NAMES, REGIME_ORDER, TaxRegime
from .reference_data import load_tables
from .schemas import (
    ActivityInfo,
    ActivityListResponse,
    CnaeResponse,
    CompareRequest,
    CompareResponse,
    RegimeInfo,
    RegimeListResponse,
)
from .services.cnae import find_cnae
from .services.comparison import TaxComparator


settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

tables = load_tables(settings.fiscal_year)
comparator = TaxComparator(
    tables,
    retention_days=settings.retention_days,
    bracket_warning_margin=settings.bracket_warning_margin,
)

app = FastAPI(title=settings.app_title, version="0.1.0")


@app.post("/compare", response_model=CompareResponse)
def compare_regimes(payload: CompareRequest) -> CompareResponse:
    try:
        comparison = comparator.compare(payload.profile)
    except (InvalidInputError, NoEligibleRegimeError) as exc:
        logger.info("Comparison rejected: %s", exc.message)
        raise HTTPException(status_code=422, detail=exc.to_detail()) from exc
    return CompareResponse(comparison=comparison)


@app.get("/regimes", response_model=RegimeListResponse)
def list_regimes() -> RegimeListResponse:
    ceilings = {
        TaxRegime.MEI: tables.limits.mei_max_revenue,
        TaxRegime.SIMPLES_NACIONAL: tables.limits.simples_max_revenue,
        TaxRegime.LUCRO_PRESUMIDO: tables.limits.presumido_max_revenue,
    }
    regimes = [
        RegimeInfo(regime=regime, name=REGIME_NAMES[regime], max_revenue=ceilings.get(regime))
        for regime in REGIME_ORDER
    ]
    return RegimeListResponse(fiscal_year=tables.fiscal_year, regimes=regimes)


@app.get("/activities", response_model=ActivityListResponse)
def list_activities() -> ActivityListResponse:
    limits = tables.limits
    activities = [
        ActivityInfo(
            activity=rule.activity,
            sector=rule.sector,
            annex=rule.annex,
            mei_allowed=rule.activity in limits.mei_activities,
            simples_allowed=rule.activity not in limits.simples_excluded_activities,
        )
        for rule in tables.activities.values()
    ]
    return ActivityListResponse(activities=activities)


@app.get("/cnae/{code}", response_model=CnaeResponse)
def get_cnae(code: str) -> CnaeResponse:
    entry = find_cnae(code)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"CNAE {code} not found")
    return CnaeResponse(**entry.model_dump())


@app.get("/health")
def healthcheck() -> Dict[str, str]:
    return {"status": "ok", "fiscal_year": str(tables.fiscal_year)}
