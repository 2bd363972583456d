"""Shared fixtures for Budget Tracker tests."""

import pytest

from src.agents import InsightsAgent
from src.audit import AuditLogger
from src.config import GeminiSettings
from src.models.budget import AnnualBudget, BudgetEntry
from src.orchestrator import BudgetSession
from src.services.storage import BudgetRepository, InMemoryStore


YEAR = 2026


@pytest.fixture
def year() -> int:
    return YEAR


@pytest.fixture
def empty_budget() -> AnnualBudget:
    return AnnualBudget.empty(YEAR)


@pytest.fixture
def sample_budget() -> AnnualBudget:
    """January with income and expenses, March with one custom expense."""
    budget = AnnualBudget.empty(YEAR)
    january = budget.month(YEAR, 0)
    january.income.append(
        BudgetEntry(id="inc-1", category="Salary", description="Paycheck", amount=1000, paid=True)
    )
    january.expenses.extend([
        BudgetEntry(id="exp-1", category="Housing", description="Rent", amount=300, paid=False),
        BudgetEntry(id="exp-2", category="Food", description="Groceries", amount=200, paid=True),
    ])
    march = budget.month(YEAR, 2)
    march.expenses.append(
        BudgetEntry(id="exp-3", category="Pets", description="Vet visit", amount=85.5, paid=False)
    )
    return budget


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def session(store) -> BudgetSession:
    """A session on in-memory storage with insights disabled."""
    audit_logger = AuditLogger()
    return BudgetSession(
        repository=BudgetRepository(store, key="budget_data_v1"),
        year=YEAR,
        insights_agent=InsightsAgent(
            settings=GeminiSettings(api_key=None),
            audit_logger=audit_logger,
        ),
        audit_logger=audit_logger,
        share_base_url="https://example.org/budget/",
    )
