"""
Report Aggregates

Month-by-month series, client and category rankings, and trend
percentages for the reports page and the dashboard comparison cards.
"""

from datetime import datetime
from typing import Iterable, Optional

from freelance_finance.engine.currency import convert_currency, safe_float
from freelance_finance.engine.dates import add_months, get_month_key, get_month_range
from freelance_finance.engine.expenses import get_expenses_paid_in_period
from freelance_finance.engine.projects import (
    calculate_project_financials,
    get_project_income_in_period,
)
from freelance_finance.models.records import EngineConfig, Expense, Project
from freelance_finance.models.views import MonthlyTotals, RankedAmount

UNCATEGORIZED = "Uncategorized"


def get_trend_percentage(current: float, previous: float) -> Optional[float]:
    """
    Percent change from previous to current.

    None when previous is zero; there is no meaningful percentage.
    """
    if previous == 0:
        return None
    return safe_float((current - previous) / abs(previous) * 100)


def get_monthly_totals(
    projects: Iterable[Project],
    expenses: Iterable[Expense],
    config: EngineConfig,
    now: datetime,
    months: int = 6,
) -> list[MonthlyTotals]:
    """Paid income and paid expenses for the trailing months, oldest first."""
    projects = list(projects)
    expenses = list(expenses)
    first_of_month = datetime(now.year, now.month, 1)
    series = []

    for offset in range(months - 1, -1, -1):
        month_start = add_months(first_of_month, -offset)
        window = get_month_range(month_start)
        income = get_project_income_in_period(projects, window.start, window.end, config).total
        expense = get_expenses_paid_in_period(expenses, window.start, window.end, config).total
        series.append(MonthlyTotals(
            month=get_month_key(month_start).month_str,
            income=income,
            expense=expense,
            net=safe_float(income - expense),
        ))

    return series


def _ranked(totals: dict[str, float], limit: int) -> list[RankedAmount]:
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [RankedAmount(name=name, value=value) for name, value in ranked[:limit]]


def get_top_clients(
    projects: Iterable[Project],
    expenses: Iterable[Expense],
    config: EngineConfig,
    now: datetime,
    limit: int = 3,
) -> list[RankedAmount]:
    """Clients ranked by amount received, in the main currency."""
    expenses = list(expenses)
    by_client: dict[str, float] = {}

    for project in projects:
        financials = calculate_project_financials(project, expenses, config, now)
        paid = convert_currency(
            financials.paid,
            project.currency,
            config.main_currency,
            config.exchange_rates,
        )
        by_client[project.client_name] = safe_float(by_client.get(project.client_name, 0.0) + paid)

    return _ranked(by_client, limit)


def get_income_by_category(
    projects: Iterable[Project],
    expenses: Iterable[Expense],
    config: EngineConfig,
    now: datetime,
    limit: int = 5,
) -> list[RankedAmount]:
    """Project categories ranked by net value, in the main currency."""
    expenses = list(expenses)
    by_category: dict[str, float] = {}

    for project in projects:
        financials = calculate_project_financials(project, expenses, config, now)
        net = convert_currency(
            financials.net,
            project.currency,
            config.main_currency,
            config.exchange_rates,
        )
        category = project.category or UNCATEGORIZED
        by_category[category] = safe_float(by_category.get(category, 0.0) + net)

    return _ranked(by_category, limit)
