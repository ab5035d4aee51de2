"""
Validation Result Models

The engine tolerates bad data; the validator reports it. These models
carry those reports to whoever shows them to the user.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single data-quality issue found on a record."""

    entity_type: str = Field(
        ...,
        description="Type of record ('project', 'expense', 'config')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the record with the issue"
    )
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'inconsistent', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating one record or a whole snapshot.

    Validation never changes the data; it only describes it.
    """

    validated_at: datetime = Field(
        default_factory=datetime.now
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All issues found"
    )

    @property
    def is_valid(self) -> bool:
        """No error-level issues (warnings are allowed)."""
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        """Messages of warning-level issues."""
        return [issue.message for issue in self.issues if issue.severity == "warning"]

    def for_entity(self, entity_id: str) -> list[ValidationIssue]:
        """Issues attached to a single record."""
        return [issue for issue in self.issues if issue.entity_id == entity_id]
