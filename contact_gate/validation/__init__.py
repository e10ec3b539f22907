"""Contact form field validation."""

from contact_gate.validation.submission_validator import ValidationResult, validate_submission

__all__ = ["ValidationResult", "validate_submission"]
