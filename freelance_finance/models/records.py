"""
Input Records for the Financial Engine

These models define the shapes the persistence layer hands to the engine.
They are designed to:
1. Normalize optional/legacy fields once, at ingestion
2. Never reject a record because a number is missing or garbage
3. Accept the camelCase payloads exported by the hosted store
4. Stay immutable once built

DESIGN DECISION: Data-quality problems are absorbed here, not in every
calculation. A NaN rate becomes 0.0, a payment without a status becomes
PAID, an unparseable date becomes None. The engine then only has to skip
records whose date is None.
"""

import math
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# LENIENT FIELD TYPES
# =============================================================================

_DATETIME_ADAPTER = TypeAdapter(datetime)


def coerce_amount(value: Any) -> float:
    """Turn None, garbage, NaN and infinities into 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def coerce_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a date-ish value into a local naive datetime.

    Unparseable input yields None so the owning record drops out of
    date-based aggregations instead of raising.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = _DATETIME_ADAPTER.validate_python(value)
        except ValidationError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


Amount = Annotated[float, BeforeValidator(coerce_amount)]
FlexibleDatetime = Annotated[Optional[datetime], BeforeValidator(coerce_datetime)]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Currency(str, Enum):
    """Currencies a user can bill or spend in."""
    BRL = "BRL"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class ProjectType(str, Enum):
    """
    How a project is billed.

    FIXED projects bill their rate once; HOURLY and DAILY multiply the
    rate by the billable units logged.
    """
    FIXED = "FIXED"
    HOURLY = "HOURLY"
    DAILY = "DAILY"


class ProjectStatus(str, Enum):
    """Project lifecycle status."""
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    PAID = "PAID"
    ONGOING = "ONGOING"  # Retainers


class ContractType(str, Enum):
    """Contract shape of a project."""
    ONE_OFF = "ONE_OFF"
    RETAINER = "RETAINER"
    RECURRING_FIXED = "RECURRING_FIXED"


class PaymentStatus(str, Enum):
    """
    Stored status of a project payment.

    CRITICAL: Overdue is never stored. A SCHEDULED payment whose date is
    before today is displayed as overdue by the engine.
    """
    PAID = "PAID"
    SCHEDULED = "SCHEDULED"


class ExpenseStatus(str, Enum):
    """Payment status of a one-off expense or of one month of a recurring one."""
    PAID = "PAID"
    PENDING = "PENDING"


class DateRange(str, Enum):
    """Fixed reporting windows."""
    THIS_MONTH = "THIS_MONTH"
    LAST_MONTH = "LAST_MONTH"
    THIS_YEAR = "THIS_YEAR"
    ALL_TIME = "ALL_TIME"


# =============================================================================
# BASE MODEL
# =============================================================================

class RecordModel(BaseModel):
    """Immutable record accepting both snake_case and camelCase keys."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


# =============================================================================
# PROJECT RECORDS
# =============================================================================

class WorkLog(RecordModel):
    """A block of time logged against an hourly or daily project."""

    id: Optional[str] = None
    date: FlexibleDatetime = None
    hours: Amount = 0.0
    description: str = ""
    billable: bool = True

    @field_validator("billable", mode="before")
    @classmethod
    def default_billable(cls, v: Any) -> Any:
        """Only an explicit False makes a log non-billable."""
        return True if v is None else v


class Payment(RecordModel):
    """
    A payment received (or expected) for a project.

    Payments created before statuses existed carry no status; those are
    normalized to PAID here so no consumer has to re-derive it.
    """

    id: str
    date: FlexibleDatetime = None
    amount: Amount = 0.0
    note: Optional[str] = None
    status: PaymentStatus = PaymentStatus.PAID
    invoice_number: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if v is None or v == "":
            return PaymentStatus.PAID
        if isinstance(v, str) and v.upper() == "OVERDUE":
            return PaymentStatus.SCHEDULED
        return v

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID


class ProjectAdjustment(RecordModel):
    """An ad-hoc change to a project's gross (scope creep, discount)."""

    id: Optional[str] = None
    date: FlexibleDatetime = None
    amount: Amount = 0.0
    description: str = ""
    title: Optional[str] = None


class Project(RecordModel):
    """A client engagement and everything billed or paid on it."""

    # Identity
    id: str
    client_id: Optional[str] = None
    client_name: str = ""
    category: Optional[str] = None

    # Billing shape
    type: ProjectType = ProjectType.FIXED
    contract_type: ContractType = ContractType.ONE_OFF
    rate: Amount = 0.0
    currency: Currency = Currency.BRL
    platform_fee: Amount = Field(
        default=0.0,
        description="Percentage (0-100) deducted from gross"
    )
    status: ProjectStatus = ProjectStatus.ACTIVE

    # Dates
    start_date: FlexibleDatetime = None
    due_date: FlexibleDatetime = None
    contract_end_date: FlexibleDatetime = None
    renewal_date: FlexibleDatetime = None

    # Collections
    logs: list[WorkLog] = Field(default_factory=list)
    payments: list[Payment] = Field(default_factory=list)
    adjustments: list[ProjectAdjustment] = Field(default_factory=list)
    linked_expense_ids: list[str] = Field(default_factory=list)

    notes: Optional[str] = None

    @field_validator("logs", "payments", "adjustments", "linked_expense_ids", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("contract_type", mode="before")
    @classmethod
    def default_contract_type(cls, v: Any) -> Any:
        return ContractType.ONE_OFF if v is None else v

    @property
    def is_active(self) -> bool:
        return self.status in (ProjectStatus.ACTIVE, ProjectStatus.ONGOING)

    @property
    def is_recurring_contract(self) -> bool:
        return self.contract_type in (ContractType.RETAINER, ContractType.RECURRING_FIXED)


# =============================================================================
# EXPENSE RECORDS
# =============================================================================

class ExpensePaymentEntry(RecordModel):
    """
    One month of a recurring expense's payment history.

    At most one entry exists per month; the ledger toggles it.
    """

    month_str: str = Field(
        ...,
        pattern=r"^\d{4}-(0[1-9]|1[0-2])$",
        description="Month in YYYY-MM format"
    )
    status: ExpenseStatus = ExpenseStatus.PAID
    paid_date: FlexibleDatetime = None

    @property
    def is_paid(self) -> bool:
        return self.status == ExpenseStatus.PAID


class Expense(RecordModel):
    """
    A one-off or recurring (monthly) expense.

    Recurring expenses track payment per month in payment_history and
    ignore status. One-off expenses use status and ignore history.
    """

    id: str
    title: str = ""
    amount: Amount = 0.0
    currency: Currency = Currency.BRL
    date: FlexibleDatetime = None
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    notes: Optional[str] = None

    # One-off
    status: Optional[ExpenseStatus] = None

    # Recurring
    is_recurring: bool = False
    due_day: Optional[int] = Field(
        default=None,
        description="Day of month (1-31) the recurring charge is due"
    )
    payment_history: list[ExpensePaymentEntry] = Field(default_factory=list)

    # Trial
    is_trial: bool = False
    trial_end_date: FlexibleDatetime = None

    @field_validator("is_recurring", "is_trial", mode="before")
    @classmethod
    def none_to_false(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator("tags", "payment_history", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("due_day", mode="before")
    @classmethod
    def normalize_due_day(cls, v: Any) -> Optional[int]:
        """Anything that is not a day 1-31 means 'no due day'."""
        if v is None or isinstance(v, bool):
            return None
        try:
            day = int(v)
        except (TypeError, ValueError):
            return None
        return day if 1 <= day <= 31 else None

    @property
    def is_paid(self) -> bool:
        """Status of a one-off expense."""
        return self.status == ExpenseStatus.PAID

    def is_paid_for_month(self, month_str: str) -> bool:
        """Whether the recurring history has a PAID entry for the month."""
        return any(
            entry.month_str == month_str and entry.is_paid
            for entry in self.payment_history
        )


# =============================================================================
# CONFIGURATION
# =============================================================================

def _default_exchange_rates() -> dict[Currency, float]:
    return {
        Currency.BRL: 1.0,
        Currency.USD: 5.0,
        Currency.EUR: 5.5,
        Currency.GBP: 6.5,
    }


class EngineConfig(RecordModel):
    """
    The user's currency and goal context.

    Exchange rates are user-entered and expressed against a common base:
    amount_in_base = amount * rate[currency].
    """

    main_currency: Currency = Currency.BRL
    exchange_rates: dict[Currency, Amount] = Field(
        default_factory=_default_exchange_rates
    )
    monthly_goal: Amount = 10000.0
    tax_reserve_percent: Amount = 0.0
