"""Ledger package: the only place money records change."""

from freelance_finance.ledger.mutations import (
    LedgerError,
    PaymentNotFoundError,
    add_payment,
    bulk_mark_expense_paid,
    mark_payment_paid,
    schedule_payment,
    toggle_expense_payment,
)

__all__ = [
    "LedgerError",
    "PaymentNotFoundError",
    "add_payment",
    "bulk_mark_expense_paid",
    "mark_payment_paid",
    "schedule_payment",
    "toggle_expense_payment",
]
