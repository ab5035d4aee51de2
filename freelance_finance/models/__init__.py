"""
Data Models Package

This package contains all Pydantic models used by Freelance Finance.
Records come in from the persistence layer; views go out to consumers.
"""

from freelance_finance.models.records import (
    Amount,
    ContractType,
    Currency,
    DateRange,
    EngineConfig,
    Expense,
    ExpensePaymentEntry,
    ExpenseStatus,
    FlexibleDatetime,
    Payment,
    PaymentStatus,
    Project,
    ProjectAdjustment,
    ProjectStatus,
    ProjectType,
    WorkLog,
)
from freelance_finance.models.views import (
    ActivityGroup,
    ActivityItem,
    ActivityType,
    EventMeta,
    EventStatus,
    ExpenseReminder,
    ExpenseSnapshot,
    ExpenseSummary,
    FinancialSnapshot,
    HealthFactors,
    HealthScore,
    HealthStatus,
    IncomeSummary,
    MonthlyTotals,
    NextPayment,
    Period,
    PeriodComparison,
    PeriodTotals,
    ProjectFinancials,
    RankedAmount,
    Receivable,
    RecurringExpenseProgress,
    TimelineEvent,
    TimelineEventType,
)
from freelance_finance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from freelance_finance.models.validation import (
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Records
    "Amount",
    "ContractType",
    "Currency",
    "DateRange",
    "EngineConfig",
    "Expense",
    "ExpensePaymentEntry",
    "ExpenseStatus",
    "FlexibleDatetime",
    "Payment",
    "PaymentStatus",
    "Project",
    "ProjectAdjustment",
    "ProjectStatus",
    "ProjectType",
    "WorkLog",
    # Views
    "ActivityGroup",
    "ActivityItem",
    "ActivityType",
    "EventMeta",
    "EventStatus",
    "ExpenseReminder",
    "ExpenseSnapshot",
    "ExpenseSummary",
    "FinancialSnapshot",
    "HealthFactors",
    "HealthScore",
    "HealthStatus",
    "IncomeSummary",
    "MonthlyTotals",
    "NextPayment",
    "Period",
    "PeriodComparison",
    "PeriodTotals",
    "ProjectFinancials",
    "RankedAmount",
    "Receivable",
    "RecurringExpenseProgress",
    "TimelineEvent",
    "TimelineEventType",
    # Audit
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
