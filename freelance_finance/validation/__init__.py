"""Validation package."""

from freelance_finance.validation.validator import RecordValidator

__all__ = ["RecordValidator"]
