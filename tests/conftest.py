"""Shared fixtures: a fixed clock, the default configuration and a sample book."""

from datetime import datetime

import pytest

from freelance_finance.models import (
    ContractType,
    Currency,
    EngineConfig,
    Expense,
    ExpenseStatus,
    Payment,
    Project,
    ProjectStatus,
    ProjectType,
)

# Friday, mid-month, midday
NOW = datetime(2024, 3, 15, 12, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def config() -> EngineConfig:
    """BRL main currency; USD 5.0, EUR 5.5, GBP 6.5."""
    return EngineConfig()


@pytest.fixture
def projects() -> list[Project]:
    """
    Acme: fixed BRL project with paid, overdue and upcoming payments.
    Globex: USD retainer paid once in January.
    """
    return [
        Project(
            id="p1",
            client_name="Acme",
            category="Design",
            type=ProjectType.FIXED,
            rate=10000,
            currency=Currency.BRL,
            start_date=datetime(2024, 3, 1),
            due_date=datetime(2024, 3, 20),
            payments=[
                Payment(id="pay1", amount=3000, date=datetime(2024, 3, 12)),
                Payment(id="pay2", amount=2000, date=datetime(2024, 3, 15, 9, 0)),
                Payment(id="pay3", amount=1000, date=datetime(2024, 3, 10), status="SCHEDULED"),
                Payment(id="pay4", amount=2000, date=datetime(2024, 3, 25), status="SCHEDULED"),
                Payment(id="pay5", amount=2500, date=datetime(2024, 2, 1)),
            ],
        ),
        Project(
            id="p2",
            client_name="Globex",
            type=ProjectType.FIXED,
            contract_type=ContractType.RETAINER,
            status=ProjectStatus.ONGOING,
            rate=1000,
            currency=Currency.USD,
            payments=[
                Payment(id="pay6", amount=200, date=datetime(2024, 1, 15)),
            ],
        ),
    ]


@pytest.fixture
def expenses() -> list[Expense]:
    """Hosting (paid for March), a tool in trial, one paid and one pending one-off."""
    return [
        Expense(
            id="hosting",
            title="Hosting",
            amount=100,
            is_recurring=True,
            due_day=14,
            payment_history=[{"month_str": "2024-03", "status": "PAID"}],
        ),
        Expense(
            id="tool",
            title="Tool",
            amount=50,
            is_recurring=True,
            due_day=31,
            is_trial=True,
            trial_end_date=datetime(2024, 4, 10),
        ),
        Expense(
            id="laptop",
            title="Laptop",
            amount=900,
            status=ExpenseStatus.PAID,
            date=datetime(2024, 3, 5),
            category="Equipment",
        ),
        Expense(
            id="course",
            title="Course",
            amount=300,
            status=ExpenseStatus.PENDING,
            date=datetime(2024, 3, 20),
        ),
    ]
