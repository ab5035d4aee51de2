"""
Audit Models for Freelance Finance

Every ledger mutation (an expense month marked paid, a payment scheduled)
is logged for audit purposes. This provides:
1. Traceability of every change to money records
2. Debugging information when a total looks wrong
3. The ability to reconstruct how a month got settled

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Recurring and one-off expenses
    EXPENSE_PAYMENT_TOGGLED = "expense_payment_toggled"
    EXPENSE_MONTHS_MARKED_PAID = "expense_months_marked_paid"

    # Project payments
    PAYMENT_SCHEDULED = "payment_scheduled"
    PAYMENT_MARKED_PAID = "payment_marked_paid"

    # Data quality
    VALIDATION_ISSUES_FOUND = "validation_issues_found"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every ledger mutation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record (e.g., 'expense', 'project')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the record this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one bulk update)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_json(self) -> str:
        """Serialize for an append-only log file or table row."""
        return json.dumps(self.to_log_dict(), default=str)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.payment_marked_paid(project_id, payment_id, amount)
    """

    @staticmethod
    def expense_payment_toggled(
        expense_id: str,
        month_str: Optional[str],
        paid: bool,
        occurred_at: datetime,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        state = "paid" if paid else "unpaid"
        scope = f" for {month_str}" if month_str else ""
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_PAYMENT_TOGGLED,
            timestamp=occurred_at,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense marked {state}{scope}",
            details={
                "month": month_str,
                "paid": paid,
            },
        )

    @staticmethod
    def expense_months_marked_paid(
        expense_id: str,
        months: list[str],
        occurred_at: datetime,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_MONTHS_MARKED_PAID,
            timestamp=occurred_at,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"{len(months)} month(s) marked paid",
            details={
                "months": months,
            },
        )

    @staticmethod
    def payment_scheduled(
        project_id: str,
        payment_id: str,
        amount: float,
        due: datetime,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_SCHEDULED,
            entity_type="project",
            entity_id=project_id,
            correlation_id=correlation_id,
            description=f"Payment of {amount:.2f} scheduled for {due.date().isoformat()}",
            details={
                "payment_id": payment_id,
                "amount": amount,
                "date": due.isoformat(),
            },
        )

    @staticmethod
    def payment_marked_paid(
        project_id: str,
        payment_id: str,
        amount: float,
        occurred_at: datetime,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_MARKED_PAID,
            timestamp=occurred_at,
            entity_type="project",
            entity_id=project_id,
            correlation_id=correlation_id,
            description=f"Payment {payment_id} received ({amount:.2f})",
            details={
                "payment_id": payment_id,
                "amount": amount,
            },
        )

    @staticmethod
    def validation_issues_found(
        entity_type: str,
        entity_id: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_ISSUES_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Record has {len(issues)} data-quality issue(s)",
            details={
                "issues": issues,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
