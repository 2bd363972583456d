"""Validation package."""

from src.validation.validator import BudgetValidator

__all__ = ["BudgetValidator"]
