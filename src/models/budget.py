"""
Core Data Models for Budget Tracker

These models define the schemas for all data flowing through the tracker:
persisted blobs, imported files and decoded share links all end up as an
AnnualBudget, so validation happens once, here.

DESIGN DECISION: Amounts are floats, not Decimals. The persisted JSON and
the share-link payload carry plain JSON numbers and must round-trip
byte-for-byte with what the browser variant of the tracker writes.

Category names are English. The browser variant stored Portuguese names
("Moradia", "Alimentação", ...); files and legacy `#data=` links from it
are mapped onto the English names by position, see
canonicalize_categories(). v2 links carry category indices and need no
mapping.
"""

from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    model_validator,
)


# =============================================================================
# CONSTANTS
# =============================================================================

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# The position of each category is part of the share-link wire format.
# Append new categories at the end; never reorder.
INCOME_CATEGORIES = ["Salary", "Freelance", "Investments", "Gifts", "Other"]
EXPENSE_CATEGORIES = [
    "Housing", "Food", "Transport", "Leisure", "Education",
    "Health", "Insurance", "Subscriptions", "Other",
]

# Same positions, as written by the browser variant of the tracker
LEGACY_INCOME_CATEGORIES = ["Salário", "Freelance", "Investimentos", "Presentes", "Outros"]
LEGACY_EXPENSE_CATEGORIES = [
    "Moradia", "Alimentação", "Transporte", "Lazer", "Educação",
    "Saúde", "Seguros", "Assinaturas", "Outros",
]

MONTHS_PER_YEAR = 12


def new_entry_id() -> str:
    """Generate a fresh entry identifier."""
    return str(uuid4())


# =============================================================================
# ENUMS
# =============================================================================

class EntryType(str, Enum):
    """
    The two entry lists of a month slot.

    Values match the field names on MonthlyData.
    """
    INCOME = "income"
    EXPENSES = "expenses"

    @property
    def categories(self) -> list[str]:
        """Canonical category list for this entry type."""
        return INCOME_CATEGORIES if self is EntryType.INCOME else EXPENSE_CATEGORIES

    @property
    def legacy_categories(self) -> list[str]:
        return LEGACY_INCOME_CATEGORIES if self is EntryType.INCOME else LEGACY_EXPENSE_CATEGORIES

    @property
    def default_paid(self) -> bool:
        """Income is usually already received when recorded; expenses are not."""
        return self is EntryType.INCOME


# =============================================================================
# CORE BUDGET MODEL
# =============================================================================

class BudgetEntry(BaseModel):
    """
    One income or expense line.

    The id is generated once at creation time and never changes.
    It only has to be unique inside a single month+type list.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_entry_id,
        min_length=1,
        description="Unique entry ID"
    )
    category: str = Field(
        ...,
        description="Category name (canonical or user-defined)"
    )
    description: str = Field(
        default="",
        description="Free-text description"
    )
    amount: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Amount, never negative and always finite"
    )
    paid: bool = Field(
        default=False,
        description="Whether the entry has been paid / received"
    )


class MonthlyData(BaseModel):
    """A month slot: income and expense lists for one calendar month."""

    month: int = Field(
        ...,
        ge=0,
        le=11,
        description="Zero-based month index"
    )
    income: list[BudgetEntry] = Field(default_factory=list)
    expenses: list[BudgetEntry] = Field(default_factory=list)

    def entries(self, entry_type: EntryType) -> list[BudgetEntry]:
        return self.income if entry_type is EntryType.INCOME else self.expenses

    @property
    def is_empty(self) -> bool:
        return not self.income and not self.expenses


def empty_year() -> list[MonthlyData]:
    """Build the eager 12-slot skeleton of a year."""
    return [MonthlyData(month=i) for i in range(MONTHS_PER_YEAR)]


class AnnualBudget(RootModel[dict[int, list[MonthlyData]]]):
    """
    Year -> 12 month slots.

    INVARIANT: every year holds exactly 12 MonthlyData, one per month
    index 0..11, stored in month order. The structure is never resized
    after creation; only the entry lists change.
    """

    @model_validator(mode='after')
    def validate_month_slots(self) -> 'AnnualBudget':
        for year, months in self.root.items():
            if len(months) != MONTHS_PER_YEAR:
                raise ValueError(
                    f"Year {year} has {len(months)} month slots, expected {MONTHS_PER_YEAR}"
                )
            indices = sorted(m.month for m in months)
            if indices != list(range(MONTHS_PER_YEAR)):
                raise ValueError(f"Year {year} does not have one slot per month")
            months.sort(key=lambda m: m.month)
        return self

    @classmethod
    def empty(cls, year: int) -> 'AnnualBudget':
        return cls({year: empty_year()})

    @property
    def years(self) -> list[int]:
        return sorted(self.root)

    def __contains__(self, year: object) -> bool:
        return year in self.root

    def year(self, year: int) -> list[MonthlyData]:
        """Month slots of a year. Raises KeyError if the year is absent."""
        return self.root[year]

    def month(self, year: int, month: int) -> Optional[MonthlyData]:
        """Find a month slot by its month index."""
        for slot in self.root.get(year, []):
            if slot.month == month:
                return slot
        return None

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(indent=indent)


def canonicalize_categories(budget: AnnualBudget) -> AnnualBudget:
    """
    Copy of the budget with legacy Portuguese category names replaced by
    the English name at the same position. Other names are kept as-is.
    """
    result = budget.model_copy(deep=True)
    for months in result.root.values():
        for month in months:
            for entry_type in EntryType:
                legacy = entry_type.legacy_categories
                for entry in month.entries(entry_type):
                    if entry.category in legacy:
                        entry.category = entry_type.categories[legacy.index(entry.category)]
    return result


# =============================================================================
# DRAFTS (add / inline edit forms)
# =============================================================================

class EntryDraft(BaseModel):
    """
    Transient value behind the add form and the inline edit row.

    A draft is either committed through the budget operations or simply
    dropped. Same rules as the entry form: category and description are
    required and the amount must be positive.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    category: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    paid: Optional[bool] = Field(
        default=None,
        description="None means: use the default for the entry type"
    )


# =============================================================================
# SUMMARY MODELS (aggregation output)
# =============================================================================

class MonthSummary(BaseModel):
    """Totals of one month slot."""

    month: int
    name: str
    income: float = 0.0
    expenses: float = 0.0
    income_pending: float = 0.0
    expenses_pending: float = 0.0

    @property
    def balance(self) -> float:
        return self.income - self.expenses


class AnnualSummary(BaseModel):
    """Per-month totals of a year plus the annual sums."""

    year: int
    months: list[MonthSummary] = Field(default_factory=list)

    @property
    def total_income(self) -> float:
        return sum(m.income for m in self.months)

    @property
    def total_expenses(self) -> float:
        return sum(m.expenses for m in self.months)

    @property
    def balance(self) -> float:
        return self.total_income - self.total_expenses

    def to_prompt_dict(self) -> dict:
        """Compact form handed to the insight service."""
        return {
            "year": self.year,
            "total_income": round(self.total_income, 2),
            "total_expenses": round(self.total_expenses, 2),
            "balance": round(self.balance, 2),
            "months": [
                {
                    "month": m.name,
                    "income": round(m.income, 2),
                    "expenses": round(m.expenses, 2),
                    "balance": round(m.balance, 2),
                }
                for m in self.months
            ],
        }


class CategoryTotal(BaseModel):
    """One slice of the monthly expense breakdown."""

    name: str
    value: float


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found in an incoming payload."""

    field: str = Field(
        ...,
        description="Location of the issue (e.g. '2026.3.expenses.1.amount')"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'duplicate_id')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation of an incoming budget.

    Stage 1: Schema validation (shape, year key, entry fields)
    Stage 2: Semantic validation (suspicious but acceptable data)
    """

    year: int
    schema_valid: bool
    semantic_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    budget: Optional[AnnualBudget] = Field(
        default=None,
        description="Parsed budget, set only when schema validation passed"
    )

    @property
    def is_valid(self) -> bool:
        return self.schema_valid and self.budget is not None

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]
