"""Application configuration via pydantic settings."""

from decimal import Decimal, InvalidOperation
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_tax_rate(value: Decimal | int | str) -> Decimal:
    """Coerce a tax percentage and require it to lie in [0, 100)."""
    try:
        rate = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"Tax rate {value!r} is not a number") from exc
    if not rate.is_finite() or rate < 0 or rate >= 100:
        raise ValueError(f"Tax rate {value} must be a percentage in [0, 100)")
    return rate


class Settings(BaseSettings):
    """Typed application configuration."""

    database_url: str = Field(
        "sqlite+aiosqlite:///./bungalow_pricing.db", alias="DATABASE_URL"
    )
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")

    tax_rate: Decimal = Field(Decimal("20"), alias="TAX_RATE")
    quote_cache_ttl_seconds: int = Field(60, alias="QUOTE_CACHE_TTL_SECONDS")
    quote_cache_max_entries: int = Field(512, alias="QUOTE_CACHE_MAX_ENTRIES")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("tax_rate")
    @classmethod
    def _check_tax_rate(cls, value: Decimal) -> Decimal:
        return parse_tax_rate(value)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
