"""
View Models Returned by the Engine

Every engine operation returns one of these. They are read-only snapshots
of a point in time: callers render them, they never feed them back.

DESIGN DECISION: Amounts are raw floats already rounded to cents, dates
are raw datetimes. Formatting and localization belong to the consumer.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from freelance_finance.models.records import Currency


class ViewModel(BaseModel):
    """Frozen output model; dump with by_alias=True for camelCase."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# PROJECTS
# =============================================================================

class NextPayment(ViewModel):
    """Earliest scheduled payment of a project."""

    date: datetime
    amount: float


class ProjectFinancials(ViewModel):
    """Derived money figures for a single project, in the project's currency."""

    project_id: str
    client_name: str
    currency: Currency

    gross: float
    adjustments: float
    fees: float
    net: float = Field(ge=0)
    paid: float
    scheduled: float
    remaining: float = Field(ge=0)
    expense_total: float
    profit: float = Field(ge=0)

    is_overdue: bool
    overdue_amount: float
    next_payment: Optional[NextPayment] = None


class Receivable(ViewModel):
    """A scheduled (not yet received) project payment."""

    project_id: str
    payment_id: str
    client_name: str
    amount: float
    amount_converted: float = Field(
        ...,
        description="Amount in the main currency"
    )
    currency: Currency
    date: datetime
    is_overdue: bool
    days_overdue: int = Field(ge=0)


# =============================================================================
# EXPENSES
# =============================================================================

class ExpenseSnapshot(ViewModel):
    """Payment and trial state of one expense for one month."""

    expense_id: str
    title: str
    amount: float
    amount_converted: float
    currency: Currency
    category: Optional[str] = None
    is_recurring: bool
    is_paid_this_month: bool
    is_trial: bool
    trial_days_left: Optional[int] = None
    trial_expired: bool = False
    due_day: Optional[int] = None


class RecurringExpenseProgress(ViewModel):
    """
    How much of this month's recurring bills are settled.

    Active trials appear in expenses but count as neither paid nor pending.
    """

    total_count: int
    paid_count: int
    pending_count: int
    total_amount: float
    paid_amount: float
    pending_amount: float
    percent_paid: int
    expenses: list[ExpenseSnapshot] = Field(default_factory=list)


class ExpenseReminder(ViewModel):
    """A recurring expense coming due soon."""

    expense_id: str
    title: str
    amount: float
    amount_converted: float
    currency: Currency
    due_date: datetime
    days_until_due: int
    is_paid: bool


class PeriodTotals(ViewModel):
    """A period total with a breakdown (by category or by client)."""

    total: float = 0.0
    breakdown: dict[str, float] = Field(default_factory=dict)


# =============================================================================
# SNAPSHOT & HEALTH
# =============================================================================

class Period(ViewModel):
    start: datetime
    end: datetime


class IncomeSummary(ViewModel):
    total: float
    paid: float
    scheduled: float
    overdue: float


class ExpenseSummary(ViewModel):
    total: float
    paid: float
    pending: float


class FinancialSnapshot(ViewModel):
    """All headline figures for one period, in the main currency."""

    period: Period
    income: IncomeSummary
    expenses: ExpenseSummary
    net: float
    profit_margin: float
    goal_progress: float
    tax_reserve: float
    recurring_income: float
    recurring_expenses: float


class HealthStatus(str, Enum):
    EXCELLENT = "excellent"
    WARNING = "warning"
    CRITICAL = "critical"


class HealthFactors(ViewModel):
    goal_progress: float
    profit_margin: float
    overdue_penalty: float


class HealthScore(ViewModel):
    """Composite 0-100 score for the current month."""

    score: int = Field(ge=0, le=100)
    factors: HealthFactors
    status: HealthStatus


# =============================================================================
# ACTIVITY & CALENDAR
# =============================================================================

class ActivityType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class ActivityItem(ViewModel):
    """A money movement that already happened."""

    id: str
    date: datetime
    type: ActivityType
    title: str
    subtitle: str
    amount: float
    currency: Currency


class ActivityGroup(ViewModel):
    label: str
    items: list[ActivityItem] = Field(default_factory=list)


class TimelineEventType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    PROJECT_START = "project_start"
    PROJECT_DUE = "project_due"
    TRIAL_END = "trial_end"


class EventStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"
    INFO = "info"


class EventMeta(ViewModel):
    project_id: Optional[str] = None
    expense_id: Optional[str] = None
    payment_id: Optional[str] = None


class TimelineEvent(ViewModel):
    """One entry on the calendar."""

    id: str
    date: datetime
    type: TimelineEventType
    title: str
    amount: Optional[float] = None
    amount_converted: Optional[float] = None
    currency: Optional[Currency] = None
    status: EventStatus
    meta: EventMeta = Field(default_factory=EventMeta)


# =============================================================================
# REPORTS
# =============================================================================

class MonthlyTotals(ViewModel):
    """Paid income and paid expenses of one calendar month."""

    month: str = Field(..., description="YYYY-MM")
    income: float
    expense: float
    net: float


class RankedAmount(ViewModel):
    name: str
    value: float


class PeriodComparison(ViewModel):
    """
    Current window against the window before it.

    Trends are percentages; None when the previous value is zero
    (the UI shows "--").
    """

    current: FinancialSnapshot
    previous: Optional[FinancialSnapshot] = None
    income_trend: Optional[float] = None
    expense_trend: Optional[float] = None
    net_trend: Optional[float] = None
