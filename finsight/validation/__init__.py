"""Form validation package."""

from finsight.validation.validator import (
    FormValidator,
    ValidationIssue,
    ValidationResult,
)

__all__ = ["FormValidator", "ValidationIssue", "ValidationResult"]
