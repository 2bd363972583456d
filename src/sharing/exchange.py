"""
File Export / Import

Export writes the full budget as pretty-printed JSON named after the
year. Import parses a user-selected file, validates it and hands back
the budget; deciding between merge and replace is up to the caller.
"""

import json
from enum import Enum
from typing import Optional

from src.models.budget import AnnualBudget, ValidationResult, canonicalize_categories
from src.validation import BudgetValidator


class ImportMode(str, Enum):
    """How incoming data is applied to the local budget."""
    MERGE = "merge"      # default, never loses local entries
    REPLACE = "replace"  # destructive, requires confirmation


class ImportRejectedError(ValueError):
    """The incoming file is not a usable budget."""

    def __init__(self, message: str, result: Optional[ValidationResult] = None):
        super().__init__(message)
        self.result = result


def export_filename(year: int) -> str:
    return f"budget_{year}.json"


def export_budget(budget: AnnualBudget, year: int) -> tuple[str, str]:
    """Return (filename, pretty-printed JSON) for a download."""
    return export_filename(year), budget.to_json(indent=2)


def load_import_file(
    raw: bytes,
    year: int,
    validator: Optional[BudgetValidator] = None,
    max_size: Optional[int] = None,
) -> tuple[AnnualBudget, ValidationResult]:
    """
    Parse and validate an import file.

    Raises ImportRejectedError when the file is too large, is not JSON,
    or does not hold a valid budget for `year`.
    """
    if max_size is not None and len(raw) > max_size:
        raise ImportRejectedError(
            f"File is too large ({len(raw)} bytes, limit {max_size})"
        )

    try:
        payload = json.loads(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ImportRejectedError(f"File is not valid JSON: {e}") from e

    validator = validator or BudgetValidator()
    result = validator.validate(payload, year)
    if not result.is_valid:
        raise ImportRejectedError(validator.get_user_friendly_summary(result), result)

    return canonicalize_categories(result.budget), result
