"""Error taxonomy for the regime comparison.

Per-regime failures (``CalculationError`` subclasses) are downgraded by the
comparator into ineligible rows. Only ``InvalidInputError`` and
``NoEligibleRegimeError`` reach the caller of ``TaxComparator.compare``.
"""
from __future__ import annotations

from typing import Dict, Optional

from .models.common import TaxRegime


class TaxSimulatorError(Exception):
    code = "tax_simulator_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_detail(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}


class InvalidInputError(TaxSimulatorError, ValueError):
    code = "invalid_input"

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class CalculationError(TaxSimulatorError):
    code = "calculation_error"


class RangeExceededError(CalculationError):
    code = "range_exceeded"


class MissingInputError(CalculationError):
    code = "missing_input"

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field


class NoEligibleRegimeError(TaxSimulatorError):
    code = "no_eligible_regime"

    def __init__(self, reasons: Dict[TaxRegime, str]) -> None:
        summary = "; ".join(f"{regime.value}: {reason}" for regime, reason in reasons.items())
        super().__init__(f"Nenhum regime tributário é elegível para esta empresa ({summary})")
        self.reasons = dict(reasons)


class TableConfigurationError(TaxSimulatorError):
    code = "table_configuration"


class UnsupportedFiscalYearError(TaxSimulatorError):
    code = "unsupported_fiscal_year"
