"""
Budget Aggregation

Derived figures for the dashboard: per-month totals and pending amounts,
the annual flow and the monthly expense breakdown.

All functions are pure reads of the budget. They are cheap enough to be
recomputed on every render.
"""

from src.models.budget import (
    MONTHS,
    AnnualBudget,
    AnnualSummary,
    BudgetEntry,
    CategoryTotal,
    MonthlyData,
    MonthSummary,
)


def total(entries: list[BudgetEntry]) -> float:
    return sum(entry.amount for entry in entries)


def pending(entries: list[BudgetEntry]) -> float:
    """Sum of the entries not yet paid / received."""
    return sum(entry.amount for entry in entries if not entry.paid)


def month_totals(month: MonthlyData) -> tuple[float, float, float]:
    """(income, expenses, balance) of a month slot."""
    income = total(month.income)
    expenses = total(month.expenses)
    return income, expenses, income - expenses


def month_pending(month: MonthlyData) -> tuple[float, float]:
    """(income pending, expenses pending) of a month slot."""
    return pending(month.income), pending(month.expenses)


def month_summary(month: MonthlyData) -> MonthSummary:
    income, expenses, _ = month_totals(month)
    income_pending, expenses_pending = month_pending(month)
    return MonthSummary(
        month=month.month,
        name=MONTHS[month.month][:3],
        income=income,
        expenses=expenses,
        income_pending=income_pending,
        expenses_pending=expenses_pending,
    )


def annual_summary(budget: AnnualBudget, year: int) -> AnnualSummary:
    """One row per month slot, in month order."""
    return AnnualSummary(
        year=year,
        months=[month_summary(m) for m in budget.year(year)],
    )


def annual_totals(budget: AnnualBudget, year: int) -> tuple[float, float, float]:
    """(income, expenses, balance) over the 12 months of a year."""
    summary = annual_summary(budget, year)
    return summary.total_income, summary.total_expenses, summary.balance


def expense_by_category(month: MonthlyData) -> list[CategoryTotal]:
    """
    Expense amounts grouped by category, in order of first appearance.

    Feeds the monthly composition chart.
    """
    totals: dict[str, float] = {}
    for entry in month.expenses:
        totals[entry.category] = totals.get(entry.category, 0.0) + entry.amount
    return [CategoryTotal(name=name, value=value) for name, value in totals.items()]


def format_currency(amount: float, symbol: str = "R$") -> str:
    """
    Format an amount the Brazilian way: R$ 1.234,56

    Negative balances keep the sign in front of the symbol.
    """
    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {text}"
