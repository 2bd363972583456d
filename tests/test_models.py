"""
Tests for Budget Tracker models

Test strategy:
1. Unit tests for individual components (models, operations, codec)
2. Integration tests for flows (session with in-memory storage)
3. No real API calls in tests (use mocks)
"""

import pytest
from pydantic import ValidationError

from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from src.models.budget import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    AnnualBudget,
    AnnualSummary,
    BudgetEntry,
    EntryDraft,
    EntryType,
    MonthlyData,
    MonthSummary,
    ValidationIssue,
    ValidationResult,
    canonicalize_categories,
)


class TestBudgetEntry:
    """Tests for the BudgetEntry model."""

    def test_entry_gets_generated_id(self):
        """Entries created without an id get a unique one."""
        a = BudgetEntry(category="Food", description="Lunch", amount=12)
        b = BudgetEntry(category="Food", description="Lunch", amount=12)
        assert a.id and b.id
        assert a.id != b.id

    def test_entry_defaults_to_unpaid(self):
        entry = BudgetEntry(category="Food", amount=12)
        assert entry.paid is False
        assert entry.description == ""

    def test_entry_strips_whitespace(self):
        entry = BudgetEntry(category="  Food ", description=" Lunch  ", amount=1)
        assert entry.category == "Food"
        assert entry.description == "Lunch"

    def test_entry_rejects_negative_amount(self):
        with pytest.raises(ValidationError):
            BudgetEntry(category="Food", amount=-1)

    def test_entry_accepts_zero_amount(self):
        assert BudgetEntry(category="Food", amount=0).amount == 0

    @pytest.mark.parametrize("amount", [float("inf"), float("nan")])
    def test_entry_rejects_non_finite_amount(self, amount):
        """inf would be stored as null and make the saved budget unreadable."""
        with pytest.raises(ValidationError):
            BudgetEntry(category="Food", amount=amount)


class TestAnnualBudget:
    """Tests for the 12-slot year invariant."""

    def test_empty_year_has_twelve_ordered_slots(self):
        budget = AnnualBudget.empty(2026)
        months = budget.year(2026)
        assert len(months) == 12
        assert [m.month for m in months] == list(range(12))
        assert all(m.is_empty for m in months)

    def test_string_year_keys_are_coerced(self):
        """JSON object keys are strings; they become int years."""
        payload = {"2026": [{"month": i, "income": [], "expenses": []} for i in range(12)]}
        budget = AnnualBudget.model_validate(payload)
        assert 2026 in budget
        assert budget.years == [2026]

    def test_rejects_short_year(self):
        payload = {"2026": [{"month": i} for i in range(11)]}
        with pytest.raises(ValidationError, match="expected 12"):
            AnnualBudget.model_validate(payload)

    def test_rejects_duplicate_month_slots(self):
        payload = {"2026": [{"month": 0}] + [{"month": i} for i in range(1, 11)] + [{"month": 0}]}
        with pytest.raises(ValidationError, match="one slot per month"):
            AnnualBudget.model_validate(payload)

    def test_unordered_slots_are_sorted(self):
        payload = {"2026": [{"month": i} for i in reversed(range(12))]}
        budget = AnnualBudget.model_validate(payload)
        assert [m.month for m in budget.year(2026)] == list(range(12))

    def test_month_lookup(self, sample_budget):
        assert sample_budget.month(2026, 2).expenses[0].id == "exp-3"
        assert sample_budget.month(2030, 0) is None

    def test_json_round_trip(self, sample_budget):
        restored = AnnualBudget.model_validate_json(sample_budget.to_json())
        assert restored == sample_budget

    def test_month_index_bounds(self):
        with pytest.raises(ValidationError):
            MonthlyData(month=12)

    def test_legacy_category_names_are_mapped(self):
        budget = AnnualBudget.empty(2026)
        budget.month(2026, 0).income.append(BudgetEntry(id="i", category="Salário", amount=1))
        budget.month(2026, 0).expenses.extend([
            BudgetEntry(id="a", category="Moradia", amount=1),
            BudgetEntry(id="b", category="Pets", amount=1),
        ])

        mapped = canonicalize_categories(budget)

        assert mapped.month(2026, 0).income[0].category == "Salary"
        assert [e.category for e in mapped.month(2026, 0).expenses] == ["Housing", "Pets"]
        assert budget.month(2026, 0).expenses[0].category == "Moradia"


class TestEntryDraft:
    """Tests for the add / edit form value."""

    def test_valid_draft(self):
        draft = EntryDraft(category="Food", description="Lunch", amount=10)
        assert draft.paid is None

    @pytest.mark.parametrize("fields", [
        {"category": "", "description": "Lunch", "amount": 10},
        {"category": "Food", "description": "  ", "amount": 10},
        {"category": "Food", "description": "Lunch", "amount": 0},
        {"category": "Food", "description": "Lunch", "amount": float("inf")},
    ])
    def test_invalid_draft(self, fields):
        with pytest.raises(ValidationError):
            EntryDraft(**fields)


class TestEntryType:
    """Tests for the entry type enum."""

    def test_categories_per_type(self):
        assert EntryType.INCOME.categories is INCOME_CATEGORIES
        assert EntryType.EXPENSES.categories is EXPENSE_CATEGORIES

    def test_default_paid(self):
        assert EntryType.INCOME.default_paid is True
        assert EntryType.EXPENSES.default_paid is False

    def test_values_match_month_fields(self):
        month = MonthlyData(month=0)
        assert month.entries(EntryType.INCOME) is month.income
        assert month.entries(EntryType.EXPENSES) is month.expenses


class TestSummaryModels:
    """Tests for summary models."""

    def test_annual_summary_totals(self):
        summary = AnnualSummary(
            year=2026,
            months=[
                MonthSummary(month=0, name="Jan", income=1000, expenses=400),
                MonthSummary(month=1, name="Feb", income=500, expenses=700),
            ],
        )
        assert summary.total_income == 1500
        assert summary.total_expenses == 1100
        assert summary.balance == 400
        assert summary.months[1].balance == -200

    def test_prompt_dict_has_no_entries(self):
        summary = AnnualSummary(year=2026, months=[MonthSummary(month=0, name="Jan", income=1)])
        data = summary.to_prompt_dict()
        assert data["year"] == 2026
        assert data["months"][0] == {"month": "Jan", "income": 1, "expenses": 0, "balance": 1}


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_errors_and_warnings(self):
        result = ValidationResult(
            year=2026,
            schema_valid=False,
            semantic_valid=True,
            issues=[
                ValidationIssue(field="2026", issue_type="missing", message="no data", severity="error"),
                ValidationIssue(field="x", issue_type="y", message="z", severity="warning"),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1
        assert len(result.warnings) == 1
        assert result.is_valid is False

    def test_rejects_unknown_severity(self):
        with pytest.raises(ValidationError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.BUDGET_LOADED,
            description="Budget loaded",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.entry_changed(
            event_type=AuditEventType.ENTRY_ADDED,
            entry_id="abc",
            year=2026,
            month=3,
            entry_type="expenses",
            details={"amount": 10.0},
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "entry_added"
        assert log_dict["entity_id"] == "abc"
        assert log_dict["details"] == {
            "year": 2026, "month": 3, "entry_type": "expenses", "amount": 10.0,
        }
        assert event.description == "Entry added in expenses of 2026-04"
        assert event.is_user_action is True

    def test_rejections_are_warnings(self):
        assert AuditEventBuilder.share_link_rejected("bad").severity == AuditSeverity.WARNING
        assert AuditEventBuilder.import_rejected("f.json", "bad").severity == AuditSeverity.WARNING
        assert AuditEventBuilder.budget_replaced([2026]).severity == AuditSeverity.WARNING


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
