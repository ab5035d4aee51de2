"""
Financial Engine

DESIGN DECISION: One engine instance wraps one snapshot of projects,
expenses and configuration, plus the instant it is evaluated at. It is
cheap to build and holds no resources, so callers create one per render
or request and throw it away. Nothing is cached: every method recomputes
from the snapshot, and callers memoize on their own change keys.

GUARANTEES:
- Never mutates the records it was given
- Never performs I/O
- Never raises on bad numbers or dates; they degrade to zero / exclusion
"""

from datetime import datetime
from typing import Iterable, Optional, Union

from freelance_finance.audit import get_logger
from freelance_finance.config import get_settings
from freelance_finance.engine.currency import (
    CurrencyConverter,
    round_half_up,
    safe_float,
)
from freelance_finance.engine.dates import (
    DateWindow,
    add_days,
    get_current_month,
    get_date_range,
    get_month_key,
    get_month_range,
    get_previous_date_range,
    is_date_in_range,
    is_overdue,
    month_day,
    start_of_day,
)
from freelance_finance.engine.expenses import (
    DEFAULT_DUE_DAY,
    get_expense_reminders,
    get_expenses_paid_in_period,
    get_open_expenses_in_period,
    get_recurring_expense_progress,
    get_recurring_expense_total,
    paid_occurrence_dates,
)
from freelance_finance.engine.projects import (
    calculate_project_financials,
    get_project_income_in_period,
    get_project_receivables,
    get_recurring_income,
)
from freelance_finance.engine.reports import (
    get_income_by_category,
    get_monthly_totals,
    get_top_clients,
    get_trend_percentage,
)
from freelance_finance.models.records import (
    Currency,
    DateRange,
    EngineConfig,
    Expense,
    Project,
    coerce_datetime,
)
from freelance_finance.models.views import (
    ActivityGroup,
    ActivityItem,
    ActivityType,
    EventMeta,
    EventStatus,
    ExpenseReminder,
    ExpenseSummary,
    FinancialSnapshot,
    HealthFactors,
    HealthScore,
    HealthStatus,
    IncomeSummary,
    MonthlyTotals,
    Period,
    PeriodComparison,
    ProjectFinancials,
    RankedAmount,
    Receivable,
    RecurringExpenseProgress,
    TimelineEvent,
    TimelineEventType,
)

logger = get_logger(__name__)

# Health score weights
GOAL_WEIGHT = 0.5
MARGIN_WEIGHT = 0.35
OVERDUE_PENALTY_PER_RECEIVABLE = 5
OVERDUE_PENALTY_CAP = 15
EXCELLENT_THRESHOLD = 70
WARNING_THRESHOLD = 40

# Dashboard defaults
DEFAULT_REMINDER_DAYS_AHEAD = 7
DEFAULT_ACTIVITY_LIMIT = 15

# Activity feed buckets
TODAY_LABEL = "Today"
LAST_7_DAYS_LABEL = "Last 7 Days"
EARLIER_LABEL = "Earlier"


def _money_status(paid: bool, when: datetime, now: datetime) -> EventStatus:
    if paid:
        return EventStatus.PAID
    if is_overdue(when, now):
        return EventStatus.OVERDUE
    return EventStatus.PENDING


def _in_month(value: Optional[datetime], year: int, month: int) -> bool:
    return value is not None and value.year == year and value.month == month


class FinancialEngine:
    """
    Read-only financial views over one data snapshot.

    Args:
        projects: Projects as loaded by the persistence layer
        expenses: Expenses as loaded by the persistence layer
        config: Currency and goal context
        now: The instant "today" refers to. Defaults to the current time,
             read once at construction. Aware values are converted to
             local naive time, like record dates.
        reminder_days_ahead: Default window for get_expense_reminders
        activity_limit: Default size of the recent activity feed
    """

    def __init__(
        self,
        projects: Iterable[Project],
        expenses: Iterable[Expense],
        config: EngineConfig,
        now: Optional[datetime] = None,
        reminder_days_ahead: int = DEFAULT_REMINDER_DAYS_AHEAD,
        activity_limit: int = DEFAULT_ACTIVITY_LIMIT,
    ):
        self._projects = tuple(projects)
        self._expenses = tuple(expenses)
        self._config = config
        self._now = coerce_datetime(now) or datetime.now()
        self._reminder_days_ahead = reminder_days_ahead
        self._activity_limit = activity_limit
        self._convert = CurrencyConverter(config)

    @property
    def now(self) -> datetime:
        return self._now

    def get_config(self) -> EngineConfig:
        return self._config

    def convert_to_main_currency(self, amount: float, from_currency: Currency) -> float:
        return self._convert(amount, from_currency)

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    def get_project_financials(self, project_id: str) -> Optional[ProjectFinancials]:
        """Financials of one project, or None if the id is unknown."""
        for project in self._projects:
            if project.id == project_id:
                return calculate_project_financials(
                    project, self._expenses, self._config, self._now
                )
        return None

    def get_all_project_financials(self) -> list[ProjectFinancials]:
        return [
            calculate_project_financials(project, self._expenses, self._config, self._now)
            for project in self._projects
        ]

    def get_active_project_financials(self) -> list[ProjectFinancials]:
        return [
            calculate_project_financials(project, self._expenses, self._config, self._now)
            for project in self._projects
            if project.is_active
        ]

    def get_receivables(self) -> list[Receivable]:
        return get_project_receivables(self._projects, self._config, self._now)

    def get_recurring_income(self) -> float:
        return get_recurring_income(self._projects, self._config)

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def get_recurring_expense_progress(
        self,
        month: Optional[datetime] = None,
    ) -> RecurringExpenseProgress:
        month_key = get_month_key(month) if month else get_current_month(self._now)
        return get_recurring_expense_progress(
            self._expenses, month_key, self._config, self._now
        )

    def get_expense_reminders(self, days_ahead: Optional[int] = None) -> list[ExpenseReminder]:
        if days_ahead is None:
            days_ahead = self._reminder_days_ahead
        return get_expense_reminders(self._expenses, days_ahead, self._config, self._now)

    def get_recurring_expense_total(self) -> float:
        return get_recurring_expense_total(self._expenses, self._config, self._now)

    # -------------------------------------------------------------------------
    # Snapshot & health
    # -------------------------------------------------------------------------

    def get_financial_snapshot(self, start: datetime, end: datetime) -> FinancialSnapshot:
        """
        Headline figures for [start, end] in the main currency.

        Scheduled income counts receivables dated inside the period;
        overdue income counts every overdue receivable regardless of period.
        """
        start = coerce_datetime(start)
        end = coerce_datetime(end)
        income = get_project_income_in_period(self._projects, start, end, self._config)
        expenses = get_expenses_paid_in_period(self._expenses, start, end, self._config)
        open_expenses = get_open_expenses_in_period(
            self._expenses, start, end, self._config, self._now
        )

        receivables = self.get_receivables()
        scheduled_income = 0.0
        overdue_income = 0.0
        for receivable in receivables:
            if is_date_in_range(receivable.date, start, end):
                scheduled_income = safe_float(scheduled_income + receivable.amount_converted)
            if receivable.is_overdue:
                overdue_income = safe_float(overdue_income + receivable.amount_converted)

        net = safe_float(income.total - expenses.total)
        profit_margin = safe_float(net / income.total * 100) if income.total > 0 else 0.0
        goal = self._config.monthly_goal or 1
        goal_progress = min(100.0, safe_float(income.total / goal * 100))
        tax_reserve = safe_float(income.total * self._config.tax_reserve_percent / 100)

        snapshot = FinancialSnapshot(
            period=Period(start=start, end=end),
            income=IncomeSummary(
                total=income.total,
                paid=income.total,
                scheduled=scheduled_income,
                overdue=overdue_income,
            ),
            expenses=ExpenseSummary(
                total=expenses.total,
                paid=expenses.total,
                pending=open_expenses,
            ),
            net=net,
            profit_margin=profit_margin,
            goal_progress=goal_progress,
            tax_reserve=tax_reserve,
            recurring_income=self.get_recurring_income(),
            recurring_expenses=self.get_recurring_expense_total(),
        )
        logger.debug(
            "financial_snapshot_computed",
            start=start.isoformat(),
            end=end.isoformat(),
            income=snapshot.income.total,
            expenses=snapshot.expenses.total,
            net=snapshot.net,
        )
        return snapshot

    def get_snapshot_for_range(self, date_range: Union[DateRange, str]) -> FinancialSnapshot:
        window = get_date_range(date_range, self._now)
        return self.get_financial_snapshot(window.start, window.end)

    def get_health_score(self) -> HealthScore:
        """
        Composite 0-100 score, always over THIS_MONTH.

        score = goal% * 0.5 + clamp(margin, 0, 100) * 0.35
                - min(15, overdue receivables * 5)
        """
        snapshot = self.get_snapshot_for_range(DateRange.THIS_MONTH)
        overdue_count = sum(1 for r in self.get_receivables() if r.is_overdue)

        goal_progress = snapshot.goal_progress
        profit_margin = max(0.0, min(100.0, snapshot.profit_margin))
        overdue_penalty = min(OVERDUE_PENALTY_CAP, overdue_count * OVERDUE_PENALTY_PER_RECEIVABLE)

        raw_score = round_half_up(
            goal_progress * GOAL_WEIGHT
            + profit_margin * MARGIN_WEIGHT
            - overdue_penalty
        )
        score = max(0, min(100, raw_score))

        if score >= EXCELLENT_THRESHOLD:
            status = HealthStatus.EXCELLENT
        elif score >= WARNING_THRESHOLD:
            status = HealthStatus.WARNING
        else:
            status = HealthStatus.CRITICAL

        logger.debug(
            "health_score_computed",
            score=score,
            status=status.value,
            overdue_count=overdue_count,
        )
        return HealthScore(
            score=score,
            factors=HealthFactors(
                goal_progress=goal_progress,
                profit_margin=profit_margin,
                overdue_penalty=overdue_penalty,
            ),
            status=status,
        )

    # -------------------------------------------------------------------------
    # Activity & calendar
    # -------------------------------------------------------------------------

    def _activity_items(self) -> list[ActivityItem]:
        items = []

        for project in self._projects:
            for payment in project.payments:
                if not payment.is_paid or payment.date is None:
                    continue
                items.append(ActivityItem(
                    id=payment.id,
                    date=payment.date,
                    type=ActivityType.INCOME,
                    title=project.client_name,
                    subtitle=payment.note or "Payment received",
                    amount=payment.amount,
                    currency=project.currency,
                ))

        for expense in self._expenses:
            if expense.is_recurring:
                for month_str, paid_on in paid_occurrence_dates(expense):
                    items.append(ActivityItem(
                        id=f"{expense.id}-{month_str}",
                        date=paid_on,
                        type=ActivityType.EXPENSE,
                        title=expense.title,
                        subtitle=expense.category or "Recurring expense",
                        amount=expense.amount,
                        currency=expense.currency,
                    ))
            elif expense.is_paid and expense.date is not None:
                items.append(ActivityItem(
                    id=expense.id,
                    date=expense.date,
                    type=ActivityType.EXPENSE,
                    title=expense.title,
                    subtitle=expense.category or "One-off expense",
                    amount=expense.amount,
                    currency=expense.currency,
                ))

        return items

    def get_recent_activity(self, limit: Optional[int] = None) -> list[ActivityGroup]:
        """
        Latest paid income and expenses, grouped by recency.

        The feed is truncated to `limit` before grouping, so "Today" can
        come back empty when older items fill the limit. Empty groups are
        omitted.
        """
        if limit is None:
            limit = self._activity_limit
        latest = sorted(self._activity_items(), key=lambda item: item.date, reverse=True)[:limit]

        today_start = start_of_day(self._now)
        week_start = add_days(today_start, -7)

        buckets = [
            (TODAY_LABEL, [i for i in latest if i.date >= today_start]),
            (LAST_7_DAYS_LABEL, [i for i in latest if week_start <= i.date < today_start]),
            (EARLIER_LABEL, [i for i in latest if i.date < week_start]),
        ]
        return [ActivityGroup(label=label, items=items) for label, items in buckets if items]

    def get_calendar_events(self, month_date: datetime) -> list[TimelineEvent]:
        """Every dated event falling in the month of month_date, oldest first."""
        year, month = month_date.year, month_date.month
        month_str = get_month_key(month_date).month_str
        month_end = get_month_range(month_date).end
        now = self._now
        events = []

        for project in self._projects:
            if _in_month(project.start_date, year, month):
                events.append(TimelineEvent(
                    id=f"start-{project.id}",
                    date=project.start_date,
                    type=TimelineEventType.PROJECT_START,
                    title=f"Start: {project.client_name}",
                    status=EventStatus.INFO,
                    meta=EventMeta(project_id=project.id),
                ))

            if _in_month(project.due_date, year, month):
                events.append(TimelineEvent(
                    id=f"due-{project.id}",
                    date=project.due_date,
                    type=TimelineEventType.PROJECT_DUE,
                    title=f"Due: {project.client_name}",
                    status=_money_status(False, project.due_date, now),
                    meta=EventMeta(project_id=project.id),
                ))

            for payment in project.payments:
                if not _in_month(payment.date, year, month):
                    continue
                events.append(TimelineEvent(
                    id=f"pay-{payment.id}",
                    date=payment.date,
                    type=TimelineEventType.INCOME,
                    title=f"Payment: {project.client_name}",
                    amount=payment.amount,
                    amount_converted=self._convert(payment.amount, project.currency),
                    currency=project.currency,
                    status=_money_status(payment.is_paid, payment.date, now),
                    meta=EventMeta(project_id=project.id, payment_id=payment.id),
                ))

        for expense in self._expenses:
            if expense.is_trial and _in_month(expense.trial_end_date, year, month):
                events.append(TimelineEvent(
                    id=f"trial-{expense.id}",
                    date=expense.trial_end_date,
                    type=TimelineEventType.TRIAL_END,
                    title=f"Trial ends: {expense.title}",
                    status=_money_status(False, expense.trial_end_date, now),
                    meta=EventMeta(expense_id=expense.id),
                ))

            if expense.is_recurring:
                # Still in trial for the whole month: nothing is charged
                if (
                    expense.is_trial
                    and expense.trial_end_date is not None
                    and expense.trial_end_date > month_end
                ):
                    continue
                if expense.due_day is not None:
                    day = expense.due_day
                elif expense.date is not None:
                    day = expense.date.day
                else:
                    day = DEFAULT_DUE_DAY
                event_date = month_day(year, month, day)
                events.append(TimelineEvent(
                    id=f"rec-{expense.id}",
                    date=event_date,
                    type=TimelineEventType.EXPENSE,
                    title=expense.title,
                    amount=expense.amount,
                    amount_converted=self._convert(expense.amount, expense.currency),
                    currency=expense.currency,
                    status=_money_status(
                        expense.is_paid_for_month(month_str), event_date, now
                    ),
                    meta=EventMeta(expense_id=expense.id),
                ))
            elif _in_month(expense.date, year, month):
                events.append(TimelineEvent(
                    id=f"exp-{expense.id}",
                    date=expense.date,
                    type=TimelineEventType.EXPENSE,
                    title=expense.title,
                    amount=expense.amount,
                    amount_converted=self._convert(expense.amount, expense.currency),
                    currency=expense.currency,
                    status=_money_status(expense.is_paid, expense.date, now),
                    meta=EventMeta(expense_id=expense.id),
                ))

        return sorted(events, key=lambda event: event.date)

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def get_monthly_totals(self, months: int = 6) -> list[MonthlyTotals]:
        return get_monthly_totals(
            self._projects, self._expenses, self._config, self._now, months
        )

    def get_top_clients(self, limit: int = 3) -> list[RankedAmount]:
        return get_top_clients(
            self._projects, self._expenses, self._config, self._now, limit
        )

    def get_income_by_category(self, limit: int = 5) -> list[RankedAmount]:
        return get_income_by_category(
            self._projects, self._expenses, self._config, self._now, limit
        )

    def compare_periods(self, date_range: Union[DateRange, str]) -> PeriodComparison:
        """Snapshot of a fixed window against the window before it."""
        current = self.get_snapshot_for_range(date_range)
        previous_window: Optional[DateWindow] = get_previous_date_range(date_range, self._now)
        if previous_window is None:
            return PeriodComparison(current=current)

        previous = self.get_financial_snapshot(previous_window.start, previous_window.end)
        return PeriodComparison(
            current=current,
            previous=previous,
            income_trend=get_trend_percentage(current.income.total, previous.income.total),
            expense_trend=get_trend_percentage(current.expenses.total, previous.expenses.total),
            net_trend=get_trend_percentage(current.net, previous.net),
        )


def create_financial_engine(
    projects: Iterable[Project],
    expenses: Iterable[Expense],
    config: Optional[EngineConfig] = None,
    now: Optional[datetime] = None,
) -> FinancialEngine:
    """
    Build an engine.

    Without a config, the FINANCE_* settings supply the config and the
    dashboard defaults (reminder window, activity feed size).
    """
    if config is not None:
        return FinancialEngine(projects, expenses, config, now)

    settings = get_settings()
    return FinancialEngine(
        projects,
        expenses,
        settings.to_engine_config(),
        now,
        reminder_days_ahead=settings.reminder_days_ahead,
        activity_limit=settings.activity_limit,
    )
