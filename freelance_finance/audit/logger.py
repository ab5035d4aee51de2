"""
Audit Logger

DESIGN DECISION: Every change the ledger makes to a money record is
logged. This provides:
1. Complete traceability of who-paid-what-when
2. Debugging capability when a monthly total looks wrong
3. A history the user can review

The audit logger:
- Always writes a structured local log line
- Optionally forwards events to a sink (a table writer, a list in tests)
- Gracefully handles sink failures (doesn't break the mutation)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Callable, Optional
from uuid import UUID, uuid4

import structlog

from freelance_finance.config import get_settings
from freelance_finance.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Route structlog output through stdlib logging at the given level.

    Without a level, FINANCE_LOG_LEVEL (via get_settings) decides. Call
    once at application startup; library use leaves the host's logging
    configuration alone.
    """
    if level is None:
        level = get_settings().log_level
    logging.basicConfig(format="%(message)s", level=level.upper())
    logging.getLogger("freelance_finance").setLevel(level.upper())


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


AuditSink = Callable[[AuditEvent], None]


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An optional sink (for persistence and user visibility)
    """

    def __init__(self, sink: Optional[AuditSink] = None):
        """
        Initialize audit logger.

        Args:
            sink: Callable receiving every event for persistence.
                  If None, only logs locally.
        """
        self._sink = sink
        self._logger = get_logger(__name__)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Forwards to the sink if one is configured.

        Returns True if the sink accepted the event (or no sink configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._sink is not None:
            try:
                self._sink(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_validation_issues(
        self,
        entity_type: str,
        entity_id: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log data-quality issues found on a record."""
        event = AuditEventBuilder.validation_issues_found(
            entity_type=entity_type,
            entity_id=entity_id,
            issues=issues,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action that touches several records
    (e.g., marking a quarter of subscriptions paid).
    """
    return uuid4()
