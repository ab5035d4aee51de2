"""
Financial Calculation Engine

Pure functions over project/expense snapshots, and the FinancialEngine
façade that composes them.
"""

from freelance_finance.engine.currency import (
    CURRENCY_SYMBOLS,
    CurrencyConverter,
    convert_currency,
    create_currency_converter,
    format_currency,
    round_half_up,
    safe_float,
)
from freelance_finance.engine.dates import (
    ALL_TIME_END,
    ALL_TIME_START,
    DateWindow,
    InvalidMonthKeyError,
    MonthKey,
    add_days,
    add_months,
    days_difference,
    end_of_day,
    get_current_month,
    get_date_range,
    get_month_key,
    get_month_range,
    get_previous_date_range,
    is_date_in_range,
    is_overdue,
    is_same_month,
    month_day,
    month_key_to_date,
    parse_month_key,
    start_of_day,
)
from freelance_finance.engine.projects import (
    calculate_project_financials,
    get_project_income_in_period,
    get_project_receivables,
    get_recurring_income,
)
from freelance_finance.engine.expenses import (
    get_expense_reminders,
    get_expense_snapshot,
    get_expenses_paid_in_period,
    get_open_expenses_in_period,
    get_recurring_expense_progress,
    get_recurring_expense_total,
    is_trial_active,
)
from freelance_finance.engine.reports import (
    get_income_by_category,
    get_monthly_totals,
    get_top_clients,
    get_trend_percentage,
)
from freelance_finance.engine.financial_engine import (
    FinancialEngine,
    create_financial_engine,
)

__all__ = [
    # Currency
    "CURRENCY_SYMBOLS",
    "CurrencyConverter",
    "convert_currency",
    "create_currency_converter",
    "format_currency",
    "round_half_up",
    "safe_float",
    # Dates
    "ALL_TIME_END",
    "ALL_TIME_START",
    "DateWindow",
    "InvalidMonthKeyError",
    "MonthKey",
    "add_days",
    "add_months",
    "days_difference",
    "end_of_day",
    "get_current_month",
    "get_date_range",
    "get_month_key",
    "get_month_range",
    "get_previous_date_range",
    "is_date_in_range",
    "is_overdue",
    "is_same_month",
    "month_day",
    "month_key_to_date",
    "parse_month_key",
    "start_of_day",
    # Projects
    "calculate_project_financials",
    "get_project_income_in_period",
    "get_project_receivables",
    "get_recurring_income",
    # Expenses
    "get_expense_reminders",
    "get_expense_snapshot",
    "get_expenses_paid_in_period",
    "get_open_expenses_in_period",
    "get_recurring_expense_progress",
    "get_recurring_expense_total",
    "is_trial_active",
    # Reports
    "get_income_by_category",
    "get_monthly_totals",
    "get_top_clients",
    "get_trend_percentage",
    # Facade
    "FinancialEngine",
    "create_financial_engine",
]
