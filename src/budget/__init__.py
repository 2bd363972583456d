"""Budget operations, merge and aggregation package."""

from src.budget.aggregation import (
    annual_summary,
    annual_totals,
    expense_by_category,
    format_currency,
    month_pending,
    month_summary,
    month_totals,
)
from src.budget.merge import MergeReport, merge_budgets, replace_budget
from src.budget.operations import (
    BudgetState,
    EntryNotFoundError,
    add_entry,
    begin_edit,
    delete_entry,
    find_entry,
    toggle_paid,
    update_entry,
)

__all__ = [
    # Aggregation
    "annual_summary",
    "annual_totals",
    "expense_by_category",
    "format_currency",
    "month_pending",
    "month_summary",
    "month_totals",
    # Merge
    "MergeReport",
    "merge_budgets",
    "replace_budget",
    # Operations
    "BudgetState",
    "EntryNotFoundError",
    "add_entry",
    "begin_edit",
    "delete_entry",
    "find_entry",
    "toggle_paid",
    "update_entry",
]
