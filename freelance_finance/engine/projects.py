"""
Project Financial Calculator

Derives what a project is worth, what has been received, what is still
owed and what it cost.

    base    = rate                          (FIXED)
            = rate * sum(billable hours)    (HOURLY, DAILY)
    gross   = base + sum(adjustments)
    fees    = gross * platform_fee / 100
    net     = max(0, gross - fees)
    remaining = max(0, net - paid)
    profit  = max(0, paid - linked expenses)

Figures are in the project's own currency; receivables and period totals
are converted to the main currency.
"""

from datetime import datetime
from typing import Iterable, Optional

from freelance_finance.engine.currency import convert_currency, safe_float
from freelance_finance.engine.dates import days_difference, is_date_in_range, is_overdue
from freelance_finance.models.records import (
    EngineConfig,
    Expense,
    PaymentStatus,
    Project,
    ProjectStatus,
    ProjectType,
)
from freelance_finance.models.views import (
    NextPayment,
    PeriodTotals,
    ProjectFinancials,
    Receivable,
)


def _base_amount(project: Project) -> float:
    if project.type == ProjectType.FIXED:
        return project.rate
    billable_units = sum(log.hours for log in project.logs if log.billable)
    return billable_units * project.rate


def calculate_project_financials(
    project: Project,
    expenses: Iterable[Expense],
    config: EngineConfig,
    now: datetime,
) -> ProjectFinancials:
    """
    Compute gross/fee/net/paid/remaining/profit for one project.

    A project with no itemized payments but status PAID is treated as
    fully paid; such projects predate per-payment tracking.
    """
    adjustments_total = 0.0
    for adjustment in project.adjustments:
        adjustments_total = safe_float(adjustments_total + adjustment.amount)

    gross = safe_float(_base_amount(project) + adjustments_total)
    fees = safe_float(gross * (project.platform_fee / 100))
    net = max(0.0, safe_float(gross - fees))

    paid = 0.0
    scheduled = 0.0
    overdue_amount = 0.0
    has_overdue = False
    next_payment: Optional[NextPayment] = None

    if project.payments:
        for payment in project.payments:
            if payment.status == PaymentStatus.PAID:
                paid = safe_float(paid + payment.amount)
            elif payment.status == PaymentStatus.SCHEDULED:
                scheduled = safe_float(scheduled + payment.amount)
                if is_overdue(payment.date, now):
                    has_overdue = True
                    overdue_amount = safe_float(overdue_amount + payment.amount)
                if payment.date is not None and (
                    next_payment is None or payment.date < next_payment.date
                ):
                    next_payment = NextPayment(date=payment.date, amount=payment.amount)
    elif project.status == ProjectStatus.PAID:
        paid = net

    expenses_by_id = {expense.id: expense for expense in expenses}
    expense_total = 0.0
    for expense_id in project.linked_expense_ids:
        expense = expenses_by_id.get(expense_id)
        if expense is None:
            # Deleted expense; nothing to attribute
            continue
        expense_total = safe_float(expense_total + convert_currency(
            expense.amount,
            expense.currency,
            project.currency,
            config.exchange_rates,
        ))

    return ProjectFinancials(
        project_id=project.id,
        client_name=project.client_name,
        currency=project.currency,
        gross=gross,
        adjustments=adjustments_total,
        fees=fees,
        net=net,
        paid=paid,
        scheduled=scheduled,
        remaining=max(0.0, safe_float(net - paid)),
        expense_total=expense_total,
        profit=max(0.0, safe_float(paid - expense_total)),
        is_overdue=has_overdue,
        overdue_amount=overdue_amount,
        next_payment=next_payment,
    )


def get_project_receivables(
    projects: Iterable[Project],
    config: EngineConfig,
    now: datetime,
) -> list[Receivable]:
    """Every SCHEDULED payment across all projects, oldest first."""
    receivables = []

    for project in projects:
        for payment in project.payments:
            if payment.status != PaymentStatus.SCHEDULED or payment.date is None:
                continue
            overdue = is_overdue(payment.date, now)
            receivables.append(Receivable(
                project_id=project.id,
                payment_id=payment.id,
                client_name=project.client_name,
                amount=payment.amount,
                amount_converted=convert_currency(
                    payment.amount,
                    project.currency,
                    config.main_currency,
                    config.exchange_rates,
                ),
                currency=project.currency,
                date=payment.date,
                is_overdue=overdue,
                days_overdue=max(0, days_difference(payment.date, now)) if overdue else 0,
            ))

    return sorted(receivables, key=lambda r: r.date)


def get_recurring_income(
    projects: Iterable[Project],
    config: EngineConfig,
) -> float:
    """
    Monthly income projected from active retainers and recurring contracts.

    Rate-based: rate net of platform fee, regardless of payment history.
    """
    total = 0.0
    for project in projects:
        if not (project.is_active and project.is_recurring_contract):
            continue
        net_rate = project.rate * (1 - project.platform_fee / 100)
        total = safe_float(total + convert_currency(
            net_rate,
            project.currency,
            config.main_currency,
            config.exchange_rates,
        ))
    return total


def get_project_income_in_period(
    projects: Iterable[Project],
    start: datetime,
    end: datetime,
    config: EngineConfig,
) -> PeriodTotals:
    """Paid payments dated inside [start, end], with a per-client breakdown."""
    total = 0.0
    by_client: dict[str, float] = {}

    for project in projects:
        for payment in project.payments:
            if not payment.is_paid or not is_date_in_range(payment.date, start, end):
                continue
            amount = convert_currency(
                payment.amount,
                project.currency,
                config.main_currency,
                config.exchange_rates,
            )
            total = safe_float(total + amount)
            by_client[project.client_name] = safe_float(
                by_client.get(project.client_name, 0.0) + amount
            )

    return PeriodTotals(total=total, breakdown=by_client)
