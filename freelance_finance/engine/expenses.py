"""
Expense Financial Calculator

Monthly payment status of recurring expenses, upcoming reminders, and
period aggregation of paid and open expenses.

DESIGN DECISION: An expense in an active trial is a third state, neither
paid nor pending. It is left out of progress counts, open totals,
reminders and the burn rate until the trial ends.
"""

from datetime import datetime
from typing import Iterable

from freelance_finance.engine.currency import convert_currency, round_half_up, safe_float
from freelance_finance.engine.dates import (
    MonthKey,
    add_days,
    days_difference,
    get_current_month,
    is_date_in_range,
    month_day,
    parse_month_key,
    start_of_day,
)
from freelance_finance.models.records import EngineConfig, Expense
from freelance_finance.models.views import (
    ExpenseReminder,
    ExpenseSnapshot,
    PeriodTotals,
    RecurringExpenseProgress,
)

DEFAULT_DUE_DAY = 15
DEFAULT_CATEGORY = "Other"


def is_trial_active(expense: Expense, now: datetime) -> bool:
    return (
        expense.is_trial
        and expense.trial_end_date is not None
        and expense.trial_end_date > now
    )


def paid_occurrence_dates(expense: Expense) -> list[tuple[str, datetime]]:
    """
    Concrete dates of a recurring expense's PAID months.

    Each PAID month maps to its due day (day 15 without one), clamped to
    the month's length.
    """
    occurrences = []
    for entry in expense.payment_history:
        if not entry.is_paid:
            continue
        key = parse_month_key(entry.month_str)
        occurrences.append((
            entry.month_str,
            month_day(key.year, key.month, expense.due_day or DEFAULT_DUE_DAY),
        ))
    return occurrences


def get_expense_snapshot(
    expense: Expense,
    month_key: MonthKey,
    config: EngineConfig,
    now: datetime,
) -> ExpenseSnapshot:
    """Paid and trial state of one expense for the given month."""
    is_trial = False
    trial_days_left = None
    trial_expired = False

    if expense.is_recurring:
        is_paid = expense.is_paid_for_month(month_key.month_str)
        if expense.is_trial and expense.trial_end_date is not None:
            if expense.trial_end_date > now:
                is_trial = True
                trial_days_left = days_difference(now, expense.trial_end_date)
            else:
                trial_expired = True
    else:
        is_paid = expense.is_paid

    return ExpenseSnapshot(
        expense_id=expense.id,
        title=expense.title,
        amount=expense.amount,
        amount_converted=convert_currency(
            expense.amount,
            expense.currency,
            config.main_currency,
            config.exchange_rates,
        ),
        currency=expense.currency,
        category=expense.category,
        is_recurring=expense.is_recurring,
        is_paid_this_month=is_paid,
        is_trial=is_trial,
        trial_days_left=trial_days_left,
        trial_expired=trial_expired,
        due_day=expense.due_day,
    )


def get_recurring_expense_progress(
    expenses: Iterable[Expense],
    month_key: MonthKey,
    config: EngineConfig,
    now: datetime,
) -> RecurringExpenseProgress:
    """Paid vs pending recurring expenses for a month, trials excluded from counts."""
    snapshots = []
    paid_count = pending_count = 0
    paid_amount = pending_amount = 0.0

    for expense in expenses:
        if not expense.is_recurring:
            continue
        snapshot = get_expense_snapshot(expense, month_key, config, now)
        snapshots.append(snapshot)

        if snapshot.is_trial:
            continue
        if snapshot.is_paid_this_month:
            paid_count += 1
            paid_amount = safe_float(paid_amount + snapshot.amount_converted)
        else:
            pending_count += 1
            pending_amount = safe_float(pending_amount + snapshot.amount_converted)

    total_count = paid_count + pending_count
    percent_paid = round_half_up(paid_count / total_count * 100) if total_count else 0

    return RecurringExpenseProgress(
        total_count=total_count,
        paid_count=paid_count,
        pending_count=pending_count,
        total_amount=safe_float(paid_amount + pending_amount),
        paid_amount=paid_amount,
        pending_amount=pending_amount,
        percent_paid=percent_paid,
        expenses=snapshots,
    )


def get_expense_reminders(
    expenses: Iterable[Expense],
    days_ahead: int,
    config: EngineConfig,
    now: datetime,
) -> list[ExpenseReminder]:
    """
    Recurring expenses whose due day this month falls in [today, today + days_ahead].

    Expenses still in an active trial raise no reminder.
    """
    today = start_of_day(now)
    horizon = add_days(today, days_ahead)
    current_month = get_current_month(now)
    reminders = []

    for expense in expenses:
        if not expense.is_recurring or expense.due_day is None:
            continue
        if is_trial_active(expense, now):
            continue

        due_date = month_day(now.year, now.month, expense.due_day)
        if not today <= due_date <= horizon:
            continue

        reminders.append(ExpenseReminder(
            expense_id=expense.id,
            title=expense.title,
            amount=expense.amount,
            amount_converted=convert_currency(
                expense.amount,
                expense.currency,
                config.main_currency,
                config.exchange_rates,
            ),
            currency=expense.currency,
            due_date=due_date,
            days_until_due=days_difference(today, due_date),
            is_paid=expense.is_paid_for_month(current_month.month_str),
        ))

    return sorted(reminders, key=lambda r: r.due_date)


def get_expenses_paid_in_period(
    expenses: Iterable[Expense],
    start: datetime,
    end: datetime,
    config: EngineConfig,
) -> PeriodTotals:
    """Expenses paid inside [start, end], with a per-category breakdown."""
    total = 0.0
    by_category: dict[str, float] = {}

    def add(expense: Expense, value: float) -> None:
        nonlocal total
        category = expense.category or DEFAULT_CATEGORY
        total = safe_float(total + value)
        by_category[category] = safe_float(by_category.get(category, 0.0) + value)

    for expense in expenses:
        value = convert_currency(
            expense.amount,
            expense.currency,
            config.main_currency,
            config.exchange_rates,
        )
        if expense.is_recurring:
            for _, paid_on in paid_occurrence_dates(expense):
                if is_date_in_range(paid_on, start, end):
                    add(expense, value)
        elif expense.is_paid and is_date_in_range(expense.date, start, end):
            add(expense, value)

    return PeriodTotals(total=total, breakdown=by_category)


def get_open_expenses_in_period(
    expenses: Iterable[Expense],
    start: datetime,
    end: datetime,
    config: EngineConfig,
    now: datetime,
) -> float:
    """
    What is outstanding right now within the period.

    Recurring expenses only count when today is inside the period, and
    only for the current month. One-off expenses count when dated inside
    the period and not paid.
    """
    current_month = get_current_month(now)
    today_in_period = is_date_in_range(now, start, end)
    open_total = 0.0

    for expense in expenses:
        if expense.is_recurring:
            if not today_in_period:
                continue
            if expense.is_paid_for_month(current_month.month_str):
                continue
            if is_trial_active(expense, now):
                continue
        elif expense.is_paid or not is_date_in_range(expense.date, start, end):
            continue

        open_total = safe_float(open_total + convert_currency(
            expense.amount,
            expense.currency,
            config.main_currency,
            config.exchange_rates,
        ))

    return open_total


def get_recurring_expense_total(
    expenses: Iterable[Expense],
    config: EngineConfig,
    now: datetime,
) -> float:
    """Steady-state monthly burn rate: all recurring expenses not in an active trial."""
    total = 0.0
    for expense in expenses:
        if not expense.is_recurring or is_trial_active(expense, now):
            continue
        total = safe_float(total + convert_currency(
            expense.amount,
            expense.currency,
            config.main_currency,
            config.exchange_rates,
        ))
    return total
