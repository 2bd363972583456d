"""
Budget Merge

Combines the local budget with an incoming one (share link or import
file) without losing or duplicating entries.

Entries are matched by id only. Re-merging the same snapshot is a no-op
because each id check runs against the already merged lists. Entries
that arrived without an id were given a fresh one while decoding, so two
imports of such entries are NOT recognised as the same entry.
"""

from pydantic import BaseModel, Field

from src.models.budget import AnnualBudget, BudgetEntry, EntryType


class MergeReport(BaseModel):
    """What a merge did, for the audit log and the UI toast."""

    added: int = 0
    skipped: int = 0
    years_adopted: list[int] = Field(default_factory=list)
    months_appended: int = 0


def _merge_entries(
    target: list[BudgetEntry],
    incoming: list[BudgetEntry],
    report: MergeReport,
) -> None:
    for entry in incoming:
        if any(existing.id == entry.id for existing in target):
            report.skipped += 1
            continue
        target.append(entry.model_copy())
        report.added += 1


def merge_budgets(
    current: AnnualBudget,
    incoming: AnnualBudget,
) -> tuple[AnnualBudget, MergeReport]:
    """
    Id-deduplicated union of two budgets.

    Neither argument is modified.
    """
    result = current.model_copy(deep=True)
    report = MergeReport()

    for year, incoming_months in incoming.root.items():
        if year not in result.root:
            result.root[year] = [m.model_copy(deep=True) for m in incoming_months]
            report.years_adopted.append(year)
            report.added += sum(len(m.income) + len(m.expenses) for m in incoming_months)
            continue

        for incoming_month in incoming_months:
            target = result.month(year, incoming_month.month)
            if target is None:
                result.root[year].append(incoming_month.model_copy(deep=True))
                report.months_appended += 1
                continue
            for entry_type in EntryType:
                _merge_entries(
                    target.entries(entry_type),
                    incoming_month.entries(entry_type),
                    report,
                )

    return result, report


def replace_budget(current: AnnualBudget, incoming: AnnualBudget) -> AnnualBudget:
    """
    Replace the local budget wholesale with the incoming one.

    Destructive: callers must hold the user's explicit confirmation.
    `current` is accepted so both strategies share one signature.
    """
    return incoming.model_copy(deep=True)
