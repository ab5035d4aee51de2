"""Tests for environment configuration."""

import logging
from datetime import datetime

import pytest
from pydantic import ValidationError

from freelance_finance.audit import configure_logging
from freelance_finance.config import FinanceSettings, get_settings, validate_settings
from freelance_finance.engine import create_financial_engine
from freelance_finance.models import Currency, Expense, Payment, Project


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "FINANCE_MAIN_CURRENCY",
        "FINANCE_EXCHANGE_RATES",
        "FINANCE_MONTHLY_GOAL",
        "FINANCE_TAX_RESERVE_PERCENT",
        "FINANCE_LOG_LEVEL",
        "FINANCE_REMINDER_DAYS_AHEAD",
        "FINANCE_ACTIVITY_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestFinanceSettings:
    """Tests for FinanceSettings."""

    def test_defaults(self):
        """Test defaults without any environment."""
        settings = FinanceSettings(_env_file=None)
        assert settings.main_currency == Currency.BRL
        assert settings.reminder_days_ahead == 7
        assert settings.activity_limit == 15
        assert settings.log_level == "INFO"

    def test_reads_prefixed_environment(self, monkeypatch):
        """Test FINANCE_* variables, with rates as JSON."""
        monkeypatch.setenv("FINANCE_MAIN_CURRENCY", "USD")
        monkeypatch.setenv("FINANCE_EXCHANGE_RATES", '{"USD": 5.2}')
        monkeypatch.setenv("FINANCE_MONTHLY_GOAL", "2500")
        monkeypatch.setenv("FINANCE_LOG_LEVEL", "debug")
        settings = FinanceSettings(_env_file=None)
        assert settings.main_currency == Currency.USD
        assert settings.exchange_rates == {Currency.USD: 5.2}
        assert settings.monthly_goal == 2500.0
        assert settings.log_level == "DEBUG"

    def test_rejects_out_of_range_tax_reserve(self):
        """Test that tax reserve must be 0-100."""
        with pytest.raises(ValidationError):
            FinanceSettings(_env_file=None, tax_reserve_percent=150)

    def test_rejects_non_positive_rate(self):
        """Test that rates must be positive."""
        with pytest.raises(ValidationError):
            FinanceSettings(_env_file=None, exchange_rates={"USD": 0})

    def test_rejects_unknown_log_level(self):
        """Test that the log level must be a stdlib level name."""
        with pytest.raises(ValidationError):
            FinanceSettings(_env_file=None, log_level="verbose")

    def test_to_engine_config_merges_rates(self):
        """Test that given rates override defaults and the rest are kept."""
        settings = FinanceSettings(
            _env_file=None,
            exchange_rates={"USD": 5.2},
            monthly_goal=8000,
            tax_reserve_percent=6,
        )
        config = settings.to_engine_config()
        assert config.exchange_rates[Currency.USD] == 5.2
        assert config.exchange_rates[Currency.EUR] == 5.5
        assert config.monthly_goal == 8000.0
        assert config.tax_reserve_percent == 6.0


class TestGetSettings:
    """Tests for the cached accessor."""

    def test_cached(self):
        """Test that settings load once."""
        assert get_settings() is get_settings()

    def test_validate_settings(self, monkeypatch):
        """Test the startup check."""
        assert validate_settings() == {"finance": True}
        monkeypatch.setenv("FINANCE_MONTHLY_GOAL", "-1")
        result = validate_settings()
        assert result["finance"] is False
        assert "monthly_goal" in result["finance_error"]


class TestEngineFromSettings:
    """Tests for building an engine from the environment."""

    def test_factory_uses_settings(self, monkeypatch):
        """Test that create_financial_engine falls back to FINANCE_* settings."""
        monkeypatch.setenv("FINANCE_MAIN_CURRENCY", "USD")
        monkeypatch.setenv("FINANCE_MONTHLY_GOAL", "3000")
        engine = create_financial_engine([], [], now=datetime(2024, 3, 15))
        assert engine.get_config().main_currency == Currency.USD
        assert engine.get_config().monthly_goal == 3000.0

    def test_factory_uses_dashboard_defaults(self, monkeypatch):
        """Test that reminder window and feed size follow FINANCE_* settings."""
        monkeypatch.setenv("FINANCE_REMINDER_DAYS_AHEAD", "3")
        monkeypatch.setenv("FINANCE_ACTIVITY_LIMIT", "1")
        expenses = [Expense(id="x", amount=10, is_recurring=True, due_day=20)]
        projects = [Project(id="p", payments=[
            Payment(id="a", amount=1, date=datetime(2024, 3, 1)),
            Payment(id="b", amount=1, date=datetime(2024, 3, 2)),
        ])]
        engine = create_financial_engine(projects, expenses, now=datetime(2024, 3, 15))
        assert engine.get_expense_reminders() == []
        groups = engine.get_recent_activity()
        assert [item.id for group in groups for item in group.items] == ["b"]

    def test_explicit_config_keeps_builtin_defaults(self, monkeypatch, config):
        """Test that an explicit config ignores the dashboard settings."""
        monkeypatch.setenv("FINANCE_REMINDER_DAYS_AHEAD", "0")
        expenses = [Expense(id="x", amount=10, is_recurring=True, due_day=20)]
        engine = create_financial_engine([], expenses, config, now=datetime(2024, 3, 15))
        assert [r.expense_id for r in engine.get_expense_reminders()] == ["x"]


class TestLoggingFromSettings:
    """Tests for configure_logging without an explicit level."""

    def test_uses_log_level_setting(self, monkeypatch):
        """Test that FINANCE_LOG_LEVEL sets the package logger level."""
        package_logger = logging.getLogger("freelance_finance")
        previous = package_logger.level
        monkeypatch.setenv("FINANCE_LOG_LEVEL", "warning")
        try:
            configure_logging()
            assert package_logger.level == logging.WARNING
        finally:
            package_logger.setLevel(previous)
