"""Field limits and patterns for contact form validation."""

from __future__ import annotations

import re

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
MESSAGE_MIN_LENGTH = 10
MESSAGE_MAX_LENGTH = 5000

# Exactly one "@", no whitespace, and a dot somewhere in the domain
EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

# Optional leading "+", then digits, whitespace, dashes and parentheses
PHONE_RE = re.compile(r"\+?[0-9\s\-()]+")
PHONE_DIGIT_RE = re.compile(r"[0-9]")

# Markers that must never survive into an accepted message, checked even
# after sanitization: (pattern, name for logging)
UNSAFE_MESSAGE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"<script", re.IGNORECASE), "script_tag"),
    (re.compile(r"on\w+\s*=", re.IGNORECASE), "event_handler"),
]
