"""Application settings.

Read once when the HTTP app is assembled. The comparison core receives plain
values through its constructor and never looks at the environment.
"""
from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SimulatorSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TAXSIM_", extra="ignore")

    app_title: str = Field(default="Simulador Tributário", description="Title shown in the OpenAPI docs")
    fiscal_year: int = Field(default=2024, description="Ano-calendário of the tax tables")
    retention_days: int = Field(default=30, ge=1, description="Days until a comparison is considered expired")
    bracket_warning_margin: Decimal = Field(
        default=Decimal("0.05"), description="Distance to a bracket ceiling that triggers a warning"
    )
    log_level: str = Field(default="INFO")

    @field_validator("bracket_warning_margin")
    @classmethod
    def _check_margin(cls, value: Decimal) -> Decimal:
        if not Decimal("0") <= value < Decimal("1"):
            raise ValueError("bracket_warning_margin must be in [0, 1)")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        return value.upper()


@lru_cache()
def get_settings() -> SimulatorSettings:
    return SimulatorSettings()
