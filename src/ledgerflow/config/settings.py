"""Configuration settings for Ledgerflow."""

from datetime import timezone, tzinfo
from decimal import Decimal
from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Calendar
    business_timezone: str = Field(
        default="UTC",
        validation_alias="LEDGERFLOW_BUSINESS_TIMEZONE",
        description="IANA zone whose local midnight splits business days",
    )

    # Projection
    projection_months: int = Field(
        default=3, ge=1, validation_alias="LEDGERFLOW_PROJECTION_MONTHS"
    )
    dedup_epsilon: Decimal = Field(
        default=Decimal("0.01"), validation_alias="LEDGERFLOW_DEDUP_EPSILON"
    )

    # Service cache
    cache_size: int = Field(default=32, ge=0, validation_alias="LEDGERFLOW_CACHE_SIZE")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )

    @field_validator("business_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value.upper() == "UTC":
            return "UTC"
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value

    @property
    def tzinfo(self) -> tzinfo:
        """Business timezone as a tzinfo object."""
        if self.business_timezone == "UTC":
            return timezone.utc
        return ZoneInfo(self.business_timezone)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
