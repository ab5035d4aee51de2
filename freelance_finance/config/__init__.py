"""Configuration package."""

from freelance_finance.config.settings import (
    FinanceSettings,
    get_settings,
    validate_settings,
)

__all__ = [
    "FinanceSettings",
    "get_settings",
    "validate_settings",
]
