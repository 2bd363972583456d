"""
Data Models Package

This package contains all Pydantic models used in the Budget Tracker.
All data flowing through the system must conform to these schemas.
"""

from src.models.budget import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    MONTHS,
    AnnualBudget,
    AnnualSummary,
    BudgetEntry,
    CategoryTotal,
    EntryDraft,
    EntryType,
    MonthlyData,
    MonthSummary,
    ValidationIssue,
    ValidationResult,
    canonicalize_categories,
    empty_year,
    new_entry_id,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Budget models
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "MONTHS",
    "AnnualBudget",
    "AnnualSummary",
    "BudgetEntry",
    "CategoryTotal",
    "EntryDraft",
    "EntryType",
    "MonthlyData",
    "MonthSummary",
    "ValidationIssue",
    "ValidationResult",
    "canonicalize_categories",
    "empty_year",
    "new_entry_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
