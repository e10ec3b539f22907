"""Per-field validation of sanitized contact form submissions."""

from __future__ import annotations

from dataclasses import dataclass, field

from contact_gate.models.submission import Submission
from contact_gate.validation.rules import (
    EMAIL_MAX_LENGTH,
    EMAIL_RE,
    MESSAGE_MAX_LENGTH,
    MESSAGE_MIN_LENGTH,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    PHONE_DIGIT_RE,
    PHONE_RE,
    UNSAFE_MESSAGE_PATTERNS,
)


@dataclass
class ValidationResult:
    """Outcome of validating one submission.

    ``errors`` maps field name to a human readable reason; empty means valid.
    """

    errors: dict[str, str] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors


def _check_name(name: str | None) -> str | None:
    trimmed = (name or "").strip()
    if not trimmed:
        return "Name is required"
    if len(trimmed) < NAME_MIN_LENGTH:
        return f"Name is too short (minimum {NAME_MIN_LENGTH} characters)"
    if len(trimmed) > NAME_MAX_LENGTH:
        return f"Name is too long (maximum {NAME_MAX_LENGTH} characters)"
    return None


def _check_email(email: str | None) -> str | None:
    if not email or not email.strip():
        return "Email is required"
    if len(email) > EMAIL_MAX_LENGTH:
        return f"Email is too long (maximum {EMAIL_MAX_LENGTH} characters)"
    if not EMAIL_RE.fullmatch(email):
        return "Please provide a valid email address"
    return None


def _check_phone(phone: str | None) -> str | None:
    # Optional: absent and empty are both fine
    if not phone:
        return None
    if not PHONE_RE.fullmatch(phone) or not PHONE_DIGIT_RE.search(phone):
        return "Please provide a valid phone number"
    return None


def _check_message(message: str | None) -> str | None:
    if not message or not message.strip():
        return "Message is required"
    if len(message) < MESSAGE_MIN_LENGTH:
        return f"Message is too short (minimum {MESSAGE_MIN_LENGTH} characters)"
    if len(message) > MESSAGE_MAX_LENGTH:
        return f"Message is too long (maximum {MESSAGE_MAX_LENGTH} characters)"
    for pattern, _name in UNSAFE_MESSAGE_PATTERNS:
        if pattern.search(message):
            return "Message contains invalid content"
    return None


_FIELD_CHECKS = (
    ("name", _check_name),
    ("email", _check_email),
    ("phone", _check_phone),
    ("message", _check_message),
)


def validate_submission(submission: Submission) -> ValidationResult:
    """Check every field and collect all failures.

    Does not stop at the first bad field so the caller can report every
    problem in one response.
    """
    result = ValidationResult()
    for field_name, check in _FIELD_CHECKS:
        reason = check(getattr(submission, field_name))
        if reason is not None:
            result.errors[field_name] = reason
    return result


def unsafe_markers(message: str) -> list[str]:
    """Names of the unsafe patterns found in ``message`` (for logging)."""
    return [name for pattern, name in UNSAFE_MESSAGE_PATTERNS if pattern.search(message)]
