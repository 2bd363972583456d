"""
Two-Stage Validation Pipeline

DESIGN DECISION: Incoming budgets (import files, legacy share links) are
validated in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- The payload is a JSON object
- It has data keyed by the expected year
- Every year holds 12 month slots and every entry is well formed
Any error here rejects the whole payload. Nothing is partially applied.

STAGE 2 - SEMANTIC VALIDATION:
- Duplicate ids inside one entry list (the merge would drop them)
- Categories outside the canonical lists (legacy Portuguese names are
  known; they are mapped after validation)
- Zero amounts
These are warnings: the data is usable, the user should just know.

IMPORTANT: Validation NEVER silently fixes issues.
"""

from typing import Any, Optional

from pydantic import ValidationError

from src.models.budget import (
    AnnualBudget,
    EntryType,
    ValidationIssue,
    ValidationResult,
)


class BudgetValidator:
    """
    Validates a raw incoming payload against the AnnualBudget schema.

    Stage 1: Schema validation
    Stage 2: Semantic validation (only if stage 1 passed)
    """

    def _validate_schema(
        self,
        payload: Any,
        year: int,
    ) -> tuple[Optional[AnnualBudget], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (parsed_budget_or_None, list_of_issues)
        """
        issues = []

        if not isinstance(payload, dict):
            issues.append(ValidationIssue(
                field="$",
                issue_type="invalid_format",
                message="The file does not contain a budget object",
                severity="error",
            ))
            return None, issues

        if str(year) not in {str(key) for key in payload}:
            issues.append(ValidationIssue(
                field=str(year),
                issue_type="missing",
                message=f"The file has no data for {year}",
                severity="error",
            ))
            return None, issues

        try:
            budget = AnnualBudget.model_validate(payload)
        except ValidationError as e:
            for error in e.errors():
                issues.append(ValidationIssue(
                    field=".".join(str(part) for part in error["loc"]) or "$",
                    issue_type=error["type"],
                    message=error["msg"],
                    severity="error",
                ))
            return None, issues

        return budget, issues

    def _validate_semantic(
        self,
        budget: AnnualBudget,
    ) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation. Warnings only.
        """
        issues = []

        for year in budget.years:
            for month in budget.year(year):
                for entry_type in EntryType:
                    seen: set[str] = set()
                    for i, entry in enumerate(month.entries(entry_type)):
                        location = f"{year}.{month.month}.{entry_type.value}.{i}"

                        if entry.id in seen:
                            issues.append(ValidationIssue(
                                field=f"{location}.id",
                                issue_type="duplicate_id",
                                message=(
                                    f"Entry id {entry.id} appears twice in the same list; "
                                    "a merge keeps only the first"
                                ),
                                severity="warning",
                            ))
                        seen.add(entry.id)

                        known = entry_type.categories + entry_type.legacy_categories
                        if entry.category not in known:
                            issues.append(ValidationIssue(
                                field=f"{location}.category",
                                issue_type="custom_category",
                                message=f"Category '{entry.category}' is not a standard category",
                                severity="info",
                            ))

                        if entry.amount == 0:
                            issues.append(ValidationIssue(
                                field=f"{location}.amount",
                                issue_type="suspicious_value",
                                message=f"Entry '{entry.description}' has a zero amount",
                                severity="warning",
                            ))

        return issues

    def validate(self, payload: Any, year: int) -> ValidationResult:
        """
        Run the full validation pipeline.
        """
        budget, schema_issues = self._validate_schema(payload, year)
        schema_valid = budget is not None

        semantic_issues = self._validate_semantic(budget) if schema_valid else []

        return ValidationResult(
            year=year,
            schema_valid=schema_valid,
            semantic_valid=not any(i.severity == "error" for i in semantic_issues),
            issues=schema_issues + semantic_issues,
            budget=budget,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if not result.schema_valid:
            errors = [i for i in result.issues if i.severity == "error"]
            lines = ["❌ This data cannot be imported:"]
            lines.extend(f"- {issue.field}: {issue.message}" for issue in errors[:5])
            if len(errors) > 5:
                lines.append(f"- ... and {len(errors) - 5} more")
            return "\n".join(lines)

        if result.warnings:
            lines = ["⚠️ Data is valid, but please note:"]
            lines.extend(f"- {issue.message}" for issue in result.warnings[:5])
            return "\n".join(lines)

        return "✅ Data looks good."
