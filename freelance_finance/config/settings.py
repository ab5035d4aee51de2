"""
Configuration Management for Freelance Finance

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: The engine itself takes an explicit EngineConfig and never
reads the environment. Settings exist for the host application: they load
the user's defaults once and turn them into an EngineConfig.
"""

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from freelance_finance.models.records import Currency, EngineConfig


class FinanceSettings(BaseSettings):
    """
    User defaults for the financial engine.

    Loads configuration from FINANCE_* environment variables and .env file.
    Exchange rates are given as JSON, e.g. FINANCE_EXCHANGE_RATES='{"USD": 5.2}'.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    main_currency: Currency = Field(
        default=Currency.BRL,
        description="Currency every total is reported in"
    )
    exchange_rates: dict[Currency, float] = Field(
        default_factory=dict,
        description="Rates against the common base; merged over the defaults"
    )
    monthly_goal: float = Field(
        default=10000.0,
        ge=0.0,
        description="Monthly income goal in the main currency"
    )
    tax_reserve_percent: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Share of income to set aside for taxes"
    )

    # Dashboard defaults
    reminder_days_ahead: int = Field(
        default=7,
        ge=0,
        le=60,
        description="How far ahead expense reminders look"
    )
    activity_limit: int = Field(
        default=15,
        ge=1,
        description="Maximum items in the recent activity feed"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level for the freelance_finance logger"
    )

    @field_validator("exchange_rates")
    @classmethod
    def validate_rates(cls, v: dict[Currency, float]) -> dict[Currency, float]:
        """A rate of zero or less would make every conversion meaningless."""
        for currency, rate in v.items():
            if rate <= 0:
                raise ValueError(f"Exchange rate for {currency.value} must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    def to_engine_config(self) -> EngineConfig:
        """Build the engine's config, filling rates not given from the defaults."""
        rates = {**EngineConfig().exchange_rates, **self.exchange_rates}
        return EngineConfig(
            main_currency=self.main_currency,
            exchange_rates=rates,
            monthly_goal=self.monthly_goal,
            tax_reserve_percent=self.tax_reserve_percent,
        )


@lru_cache()
def get_settings() -> FinanceSettings:
    """
    Get settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return FinanceSettings()


def validate_settings() -> dict[str, object]:
    """
    Check the environment holds a usable configuration.

    Returns {"finance": True} or {"finance": False, "finance_error": ...}.
    Useful for startup checks.
    """
    try:
        FinanceSettings()
    except ValidationError as e:
        return {"finance": False, "finance_error": str(e)}
    return {"finance": True}
