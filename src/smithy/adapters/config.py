# src/smithy/adapters/config.py
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # -----------------------------
    # Calculation defaults
    # -----------------------------
    # Annual percent, applied when the caller leaves the HELOC rate empty / 0
    DEFAULT_HELOC_RATE: float = Field(default=7.2)

    # Basic personal amounts subtracted before bracket lookup
    FEDERAL_BASIC_PERSONAL_AMOUNT: float = Field(default=15000.0)
    BC_BASIC_PERSONAL_AMOUNT: float = Field(default=15000.0)

    # Combined rate for province codes outside the supported set
    UNKNOWN_PROVINCE_RATE: float = Field(default=0.25)

    # -----------------------------
    # Diagnostics
    # -----------------------------
    DIAGNOSTICS_SINK: Literal["log", "file", "null"] = Field(default="log")
    DIAGNOSTICS_PATH: str = Field(default="smithy-debug.log")

    model_config = SettingsConfigDict(
        env_prefix="SMITHY_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("DEFAULT_HELOC_RATE", mode="before")
    @classmethod
    def _to_annual_percent(cls, v: Any) -> Any:
        if v is None:
            return v
        if isinstance(v, str):
            v = v.strip().replace("%", "")
        try:
            f = float(v)
        except Exception as err:
            raise ValueError("rate must be numeric or percent-like") from err
        if f <= 0:
            raise ValueError("DEFAULT_HELOC_RATE must be > 0")
        return f

    @field_validator("UNKNOWN_PROVINCE_RATE", mode="before")
    @classmethod
    def _to_fraction(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().replace("%", "")
        f = float(v)
        if f > 1.0:
            f = f / 100.0
        if f < 0:
            raise ValueError("rate must be non-negative")
        return f

    @field_validator("FEDERAL_BASIC_PERSONAL_AMOUNT", "BC_BASIC_PERSONAL_AMOUNT", mode="before")
    @classmethod
    def _non_negative_amount(cls, v: Any) -> Any:
        f = float(v)
        if f < 0:
            raise ValueError("basic personal amount must be non-negative")
        return f


config = AppConfig()
