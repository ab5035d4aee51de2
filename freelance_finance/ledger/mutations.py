"""
Ledger Mutations

The engine only reads. Anything that changes a money record goes through
here, from settling a subscription month to recording that an invoice
was paid.

DESIGN DECISION: Records are immutable. Every function returns a NEW
record and leaves its input untouched, so an engine built from the old
snapshot keeps describing the old snapshot.

Lifecycles enforced here:
- Project payment: SCHEDULED -> PAID
- Recurring expense month: absent -> PAID -> absent. Un-paying removes
  the history entry instead of writing PENDING, so toggling twice
  restores the starting history exactly.
"""

from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID, uuid4

from freelance_finance.audit import AuditLogger
from freelance_finance.engine.dates import get_month_key, parse_month_key
from freelance_finance.models.audit import AuditEventBuilder
from freelance_finance.models.records import (
    Expense,
    ExpensePaymentEntry,
    ExpenseStatus,
    Payment,
    PaymentStatus,
    Project,
)


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class PaymentNotFoundError(LedgerError):
    """The payment id does not exist on the project."""
    pass


def toggle_expense_payment(
    expense: Expense,
    reference: datetime,
    now: Optional[datetime] = None,
    audit_logger: Optional[AuditLogger] = None,
    correlation_id: Optional[UUID] = None,
) -> Expense:
    """
    Flip the paid state of an expense.

    Recurring: for the month of `reference`, a PAID entry is removed; a
    missing or PENDING entry becomes PAID (paid_date = now).
    One-off: status flips between PAID and PENDING.

    An explicit PENDING entry does not survive two toggles: the second one
    removes the entry, since absent and PENDING both mean unpaid.
    """
    now = now or datetime.now()

    if expense.is_recurring:
        month_str = get_month_key(reference).month_str
        history = list(expense.payment_history)
        index = next(
            (i for i, entry in enumerate(history) if entry.month_str == month_str),
            None,
        )

        if index is not None and history[index].is_paid:
            del history[index]
            paid = False
        else:
            entry = ExpensePaymentEntry(
                month_str=month_str,
                status=ExpenseStatus.PAID,
                paid_date=now,
            )
            if index is not None:
                history[index] = entry
            else:
                history.append(entry)
            paid = True

        updated = expense.model_copy(update={"payment_history": history})
    else:
        month_str = None
        paid = not expense.is_paid
        updated = expense.model_copy(update={
            "status": ExpenseStatus.PAID if paid else ExpenseStatus.PENDING,
        })

    if audit_logger:
        audit_logger.log(AuditEventBuilder.expense_payment_toggled(
            expense_id=expense.id,
            month_str=month_str,
            paid=paid,
            occurred_at=now,
            correlation_id=correlation_id,
        ))

    return updated


def bulk_mark_expense_paid(
    expense: Expense,
    month_strs: Iterable[str],
    now: Optional[datetime] = None,
    audit_logger: Optional[AuditLogger] = None,
    correlation_id: Optional[UUID] = None,
) -> Expense:
    """
    Mark several months of a recurring expense as paid.

    Months already paid are left alone. One-off expenses are returned
    unchanged.

    Raises:
        InvalidMonthKeyError: If a month is not in YYYY-MM format
    """
    if not expense.is_recurring:
        return expense

    now = now or datetime.now()
    history = list(expense.payment_history)
    paid_months = {entry.month_str for entry in history if entry.is_paid}
    added = []

    for month_str in month_strs:
        month_str = parse_month_key(month_str).month_str
        if month_str in paid_months:
            continue
        history.append(ExpensePaymentEntry(
            month_str=month_str,
            status=ExpenseStatus.PAID,
            paid_date=now,
        ))
        paid_months.add(month_str)
        added.append(month_str)

    if not added:
        return expense

    if audit_logger:
        audit_logger.log(AuditEventBuilder.expense_months_marked_paid(
            expense_id=expense.id,
            months=added,
            occurred_at=now,
            correlation_id=correlation_id,
        ))

    return expense.model_copy(update={"payment_history": history})


def add_payment(
    project: Project,
    payment: Payment,
    audit_logger: Optional[AuditLogger] = None,
    correlation_id: Optional[UUID] = None,
) -> Project:
    """Append a payment to a project."""
    updated = project.model_copy(update={"payments": [*project.payments, payment]})

    if audit_logger and payment.status == PaymentStatus.SCHEDULED and payment.date:
        audit_logger.log(AuditEventBuilder.payment_scheduled(
            project_id=project.id,
            payment_id=payment.id,
            amount=payment.amount,
            due=payment.date,
            correlation_id=correlation_id,
        ))

    return updated


def schedule_payment(
    project: Project,
    amount: float,
    due: datetime,
    note: Optional[str] = None,
    payment_id: Optional[str] = None,
    audit_logger: Optional[AuditLogger] = None,
    correlation_id: Optional[UUID] = None,
) -> Project:
    """Add an expected (SCHEDULED) payment to a project."""
    payment = Payment(
        id=payment_id or str(uuid4()),
        date=due,
        amount=amount,
        note=note,
        status=PaymentStatus.SCHEDULED,
    )
    return add_payment(project, payment, audit_logger, correlation_id)


def mark_payment_paid(
    project: Project,
    payment_id: str,
    now: Optional[datetime] = None,
    audit_logger: Optional[AuditLogger] = None,
    correlation_id: Optional[UUID] = None,
) -> Project:
    """
    Record that a scheduled payment arrived.

    An already-paid payment is left as is.

    Raises:
        PaymentNotFoundError: If the project has no payment with that id
    """
    target = next((p for p in project.payments if p.id == payment_id), None)
    if target is None:
        message = f"Payment {payment_id} not found on project {project.id}"
        if audit_logger:
            audit_logger.log_error(
                error_type="PaymentNotFoundError",
                error_message=message,
                details={"project_id": project.id, "payment_id": payment_id},
                correlation_id=correlation_id,
            )
        raise PaymentNotFoundError(message)
    if target.is_paid:
        return project

    now = now or datetime.now()
    payments = [
        p.model_copy(update={"status": PaymentStatus.PAID}) if p.id == payment_id else p
        for p in project.payments
    ]

    if audit_logger:
        audit_logger.log(AuditEventBuilder.payment_marked_paid(
            project_id=project.id,
            payment_id=payment_id,
            amount=target.amount,
            occurred_at=now,
            correlation_id=correlation_id,
        ))

    return project.model_copy(update={"payments": payments})
