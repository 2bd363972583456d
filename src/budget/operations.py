"""
Budget Operations

DESIGN DECISION: Every change to the budget goes through a pure function
that takes the current AnnualBudget and returns a new one. The input is
never mutated, so a caller holding the previous value (the UI, a test,
an undo buffer) can rely on it staying as it was.

The month/year skeleton is never resized here: operations only touch the
entry lists of an existing month slot.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from src.models.budget import (
    AnnualBudget,
    BudgetEntry,
    EntryDraft,
    EntryType,
    MonthlyData,
    new_entry_id,
)


class EntryNotFoundError(LookupError):
    """Year, month slot or entry id does not exist."""
    pass


def _copy(budget: AnnualBudget) -> AnnualBudget:
    return budget.model_copy(deep=True)


def _slot(budget: AnnualBudget, year: int, month: int) -> MonthlyData:
    if year not in budget:
        raise EntryNotFoundError(f"Year {year} is not in the budget")
    slot = budget.month(year, month)
    if slot is None:
        raise EntryNotFoundError(f"Month {month} is not in year {year}")
    return slot


def _index_of(entries: list[BudgetEntry], entry_id: str) -> int:
    for i, entry in enumerate(entries):
        if entry.id == entry_id:
            return i
    raise EntryNotFoundError(f"No entry with id {entry_id}")


def add_entry(
    budget: AnnualBudget,
    year: int,
    month: int,
    entry_type: EntryType,
    draft: EntryDraft,
) -> tuple[AnnualBudget, BudgetEntry]:
    """
    Append a new entry built from a draft.

    Returns the new budget and the created entry (with its fresh id).
    """
    result = _copy(budget)
    entry = BudgetEntry(
        id=new_entry_id(),
        category=draft.category,
        description=draft.description,
        amount=draft.amount,
        paid=entry_type.default_paid if draft.paid is None else draft.paid,
    )
    _slot(result, year, month).entries(entry_type).append(entry)
    return result, entry


def delete_entry(
    budget: AnnualBudget,
    year: int,
    month: int,
    entry_type: EntryType,
    entry_id: str,
) -> AnnualBudget:
    """Remove exactly one entry; every other entry is left untouched."""
    result = _copy(budget)
    entries = _slot(result, year, month).entries(entry_type)
    del entries[_index_of(entries, entry_id)]
    return result


def toggle_paid(
    budget: AnnualBudget,
    year: int,
    month: int,
    entry_type: EntryType,
    entry_id: str,
) -> AnnualBudget:
    """Flip the paid flag of one entry."""
    result = _copy(budget)
    entries = _slot(result, year, month).entries(entry_type)
    i = _index_of(entries, entry_id)
    entries[i] = entries[i].model_copy(update={"paid": not entries[i].paid})
    return result


def begin_edit(entry: BudgetEntry) -> EntryDraft:
    """Start an inline edit. Discarding the edit is just dropping the draft."""
    return EntryDraft(
        category=entry.category,
        description=entry.description,
        amount=entry.amount,
        paid=entry.paid,
    )


def update_entry(
    budget: AnnualBudget,
    year: int,
    month: int,
    entry_type: EntryType,
    entry_id: str,
    draft: EntryDraft,
) -> AnnualBudget:
    """Commit an inline edit. The entry keeps its id and position."""
    result = _copy(budget)
    entries = _slot(result, year, month).entries(entry_type)
    i = _index_of(entries, entry_id)
    current = entries[i]
    entries[i] = BudgetEntry(
        id=current.id,
        category=draft.category,
        description=draft.description,
        amount=draft.amount,
        paid=current.paid if draft.paid is None else draft.paid,
    )
    return result


def find_entry(
    budget: AnnualBudget,
    year: int,
    month: int,
    entry_type: EntryType,
    entry_id: str,
) -> BudgetEntry:
    entries = _slot(budget, year, month).entries(entry_type)
    return entries[_index_of(entries, entry_id)]


# =============================================================================
# APPLICATION STATE
# =============================================================================

class BudgetState(BaseModel):
    """
    The single owned value behind the UI.

    Update helpers return a new state; callers replace their reference.
    """

    budget: AnnualBudget
    year: int
    month: int = Field(default=0, ge=0, le=11)
    tab: Literal["month", "year"] = "month"
    editing: Optional[str] = Field(
        default=None,
        description="Id of the entry whose inline edit row is open"
    )

    @property
    def month_data(self) -> MonthlyData:
        slot = self.budget.month(self.year, self.month)
        if slot is None:
            raise EntryNotFoundError(f"Month {self.month} is not in year {self.year}")
        return slot

    def with_budget(self, budget: AnnualBudget) -> 'BudgetState':
        return self.model_copy(update={"budget": budget, "editing": None})

    def select_month(self, month: int) -> 'BudgetState':
        if not 0 <= month <= 11:
            raise ValueError(f"Invalid month index: {month}")
        return self.model_copy(update={"month": month, "editing": None})

    def select_tab(self, tab: Literal["month", "year"]) -> 'BudgetState':
        if tab not in ("month", "year"):
            raise ValueError(f"Invalid tab: {tab}")
        return self.model_copy(update={"tab": tab})

    def start_editing(self, entry_id: str) -> 'BudgetState':
        return self.model_copy(update={"editing": entry_id})

    def stop_editing(self) -> 'BudgetState':
        return self.model_copy(update={"editing": None})
