"""
Record Validation

DESIGN DECISION: The engine absorbs bad data silently (a NaN rate counts
as zero, a payment without a date is skipped). The validator is the other
half of that contract: it walks the same records and REPORTS everything
the engine had to paper over, so the user can fix it at the source.

Two kinds of checks:

SHAPE CHECKS:
- Fields that contradict the record's kind (status on a recurring expense,
  payment history on a one-off)
- Duplicate months in a payment history
- Missing dates (unparseable dates are stored as None)

CONSISTENCY CHECKS:
- Platform fee outside 0-100
- Negative rates
- Linked expense ids that do not exist
- Trials without an end date

IMPORTANT: Validation NEVER fixes issues and NEVER raises.
It reports them for human review.
"""

from collections import Counter
from typing import Iterable, Optional
from uuid import UUID

from freelance_finance.audit import AuditLogger
from freelance_finance.models.records import EngineConfig, Expense, Project
from freelance_finance.models.validation import ValidationIssue, ValidationResult


class RecordValidator:
    """
    Validates projects, expenses and engine configuration.

    Pass an AuditLogger to have records with issues recorded in the
    audit trail.
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._audit = audit_logger

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def _expense_issues(self, expense: Expense) -> list[ValidationIssue]:
        issues = []

        def issue(field: str, issue_type: str, message: str, severity: str,
                  suggested_fix: Optional[str] = None) -> None:
            issues.append(ValidationIssue(
                entity_type="expense",
                entity_id=expense.id,
                field=field,
                issue_type=issue_type,
                message=message,
                severity=severity,
                suggested_fix=suggested_fix,
            ))

        if expense.amount < 0:
            issue(
                "amount", "invalid_value",
                f"Expense '{expense.title}' has a negative amount",
                "warning",
                "Enter the amount as a positive number",
            )

        if expense.is_recurring:
            if expense.status is not None:
                issue(
                    "status", "inconsistent",
                    f"Recurring expense '{expense.title}' has a status; "
                    "monthly payments are tracked in its history",
                    "info",
                    "Clear the status field",
                )

            if expense.due_day is None:
                issue(
                    "due_day", "missing",
                    f"Recurring expense '{expense.title}' has no due day",
                    "warning",
                    "Set the day of the month the charge is due",
                )

            counts = Counter(entry.month_str for entry in expense.payment_history)
            for month_str, count in sorted(counts.items()):
                if count > 1:
                    issue(
                        "payment_history", "duplicate",
                        f"Month {month_str} appears {count} times in the payment history",
                        "error",
                        "Keep a single entry per month",
                    )

            if expense.date is None and expense.due_day is None:
                issue(
                    "date", "missing",
                    f"Recurring expense '{expense.title}' has no valid date",
                    "warning",
                )
        else:
            if expense.payment_history:
                issue(
                    "payment_history", "inconsistent",
                    f"One-off expense '{expense.title}' has a monthly payment history",
                    "info",
                    "Mark the expense as recurring or clear the history",
                )

            if expense.date is None:
                issue(
                    "date", "missing",
                    f"Expense '{expense.title}' has no valid date and is left "
                    "out of period totals",
                    "warning",
                    "Enter the date the expense occurred",
                )

        if expense.is_trial and expense.trial_end_date is None:
            issue(
                "trial_end_date", "missing",
                f"Trial '{expense.title}' has no end date",
                "warning",
                "Set the date the trial converts to a paid plan",
            )

        return issues

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    def _project_issues(
        self,
        project: Project,
        known_expense_ids: Optional[set[str]],
    ) -> list[ValidationIssue]:
        issues = []
        label = project.client_name or project.id

        def issue(field: str, issue_type: str, message: str, severity: str,
                  suggested_fix: Optional[str] = None) -> None:
            issues.append(ValidationIssue(
                entity_type="project",
                entity_id=project.id,
                field=field,
                issue_type=issue_type,
                message=message,
                severity=severity,
                suggested_fix=suggested_fix,
            ))

        if project.rate < 0:
            issue(
                "rate", "invalid_value",
                f"Project for {label} has a negative rate",
                "error",
                "Enter the rate as a positive number",
            )

        if not 0 <= project.platform_fee <= 100:
            issue(
                "platform_fee", "out_of_range",
                f"Platform fee ({project.platform_fee}%) is outside 0-100",
                "error",
                "Enter the fee as a percentage between 0 and 100",
            )

        for payment in project.payments:
            if payment.date is None:
                issue(
                    "payments", "missing",
                    f"Payment {payment.id} has no valid date and is left out "
                    "of period totals",
                    "warning",
                    "Enter the payment date",
                )

        payment_ids = Counter(payment.id for payment in project.payments)
        for payment_id, count in sorted(payment_ids.items()):
            if count > 1:
                issue(
                    "payments", "duplicate",
                    f"Payment id {payment_id} is used {count} times",
                    "error",
                )

        for log in project.logs:
            if log.date is None:
                issue(
                    "logs", "missing",
                    "A work log has no valid date",
                    "info",
                )

        if known_expense_ids is not None:
            for expense_id in project.linked_expense_ids:
                if expense_id not in known_expense_ids:
                    issue(
                        "linked_expense_ids", "dangling_reference",
                        f"Linked expense {expense_id} does not exist",
                        "warning",
                        "Remove the link or restore the expense",
                    )

        return issues

    # -------------------------------------------------------------------------
    # Config
    # -------------------------------------------------------------------------

    def _config_issues(self, config: EngineConfig) -> list[ValidationIssue]:
        issues = []

        for currency, rate in config.exchange_rates.items():
            if rate <= 0:
                issues.append(ValidationIssue(
                    entity_type="config",
                    field="exchange_rates",
                    issue_type="invalid_value",
                    message=f"Exchange rate for {currency.value} is not positive",
                    severity="error" if currency == config.main_currency else "warning",
                    suggested_fix="Enter a rate greater than zero",
                ))

        if not 0 <= config.tax_reserve_percent <= 100:
            issues.append(ValidationIssue(
                entity_type="config",
                field="tax_reserve_percent",
                issue_type="out_of_range",
                message=f"Tax reserve ({config.tax_reserve_percent}%) is outside 0-100",
                severity="error",
            ))

        if config.monthly_goal < 0:
            issues.append(ValidationIssue(
                entity_type="config",
                field="monthly_goal",
                issue_type="invalid_value",
                message="Monthly goal is negative",
                severity="warning",
            ))

        return issues

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def _report(
        self,
        entity_type: str,
        entity_id: str,
        issues: list[ValidationIssue],
        correlation_id: Optional[UUID],
    ) -> None:
        if self._audit and issues:
            self._audit.log_validation_issues(
                entity_type=entity_type,
                entity_id=entity_id,
                issues=[i.model_dump(exclude_none=True) for i in issues],
                correlation_id=correlation_id,
            )

    def validate_expense(
        self,
        expense: Expense,
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        """Validate a single expense."""
        issues = self._expense_issues(expense)
        self._report("expense", expense.id, issues, correlation_id)
        return ValidationResult(issues=issues)

    def validate_project(
        self,
        project: Project,
        expenses: Optional[Iterable[Expense]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        """
        Validate a single project.

        Args:
            project: The project to validate
            expenses: Known expenses. Linked-expense checks are skipped
                      when omitted.
        """
        known = None if expenses is None else {e.id for e in expenses}
        issues = self._project_issues(project, known)
        self._report("project", project.id, issues, correlation_id)
        return ValidationResult(issues=issues)

    def validate_snapshot(
        self,
        projects: Iterable[Project],
        expenses: Iterable[Expense],
        config: Optional[EngineConfig] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        """Validate everything the engine would be built from."""
        expenses = list(expenses)
        known = {e.id for e in expenses}
        all_issues = []

        for expense in expenses:
            issues = self._expense_issues(expense)
            self._report("expense", expense.id, issues, correlation_id)
            all_issues.extend(issues)

        for project in projects:
            issues = self._project_issues(project, known)
            self._report("project", project.id, issues, correlation_id)
            all_issues.extend(issues)

        if config is not None:
            all_issues.extend(self._config_issues(config))

        return ValidationResult(issues=all_issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Plain-text summary for showing to the user."""
        errors = [i for i in result.issues if i.severity == "error"]
        warnings = [i for i in result.issues if i.severity == "warning"]
        if not errors and not warnings:
            return "All records look good."

        lines = []

        if errors:
            lines.append("Problems that affect your totals:")
            for issue in errors:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     -> {issue.suggested_fix}")

        if warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for issue in warnings:
                lines.append(f"   • {issue.message}")

        return "\n".join(lines)
