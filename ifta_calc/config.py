"""Runtime settings read from ``IFTA_*`` environment variables."""

from typing import Literal, Optional

from pydantic import Field, PositiveFloat, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ifta_calc.rates import DEFAULT_QUARTER

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """
    Settings for the calculator and CLI

    IFTA_RATES_URL        live rate endpoint; unset uses the bundled table
    IFTA_RATES_TIMEOUT    request timeout in seconds (default 5)
    IFTA_DEFAULT_QUARTER  quarter used when none is given
    IFTA_LOG_LEVEL        CLI log level (default WARNING)
    """

    model_config = SettingsConfigDict(
        env_prefix="IFTA_", extra="ignore", case_sensitive=False
    )

    rates_url: Optional[str] = None
    rates_timeout: PositiveFloat = Field(default=5.0, allow_inf_nan=False)
    default_quarter: str = DEFAULT_QUARTER
    log_level: LogLevel = "WARNING"

    @field_validator("rates_url", mode="before")
    @classmethod
    def blank_url_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("default_quarter", mode="before")
    @classmethod
    def blank_quarter_is_default(cls, value):
        if isinstance(value, str) and not value.strip():
            return DEFAULT_QUARTER
        return value.strip() if isinstance(value, str) else value

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_case_level(cls, value):
        return value.strip().upper() if isinstance(value, str) else value
