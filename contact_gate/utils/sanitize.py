"""Sanitization utilities for contact form fields.

Regex-based, best effort: this strips markup shaped like ``<...>``, complete
script blocks and ``on<word>=`` handler attributes. It is not an HTML parser.
Fragments that never close (an unterminated ``<script`` for example) pass
through unchanged, which is why the validator re-checks the message body.
"""

from __future__ import annotations

import re

from contact_gate.models.submission import Submission

# Comprehensive control character pattern covering:
# C0 controls (\x00-\x1f), DEL (\x7f), C1 controls (\x80-\x9f),
# Unicode line/paragraph separators (\u2028-\u2029),
# bidi overrides (\u200b-\u200f, \u202a-\u202e, \u2066-\u2069),
# zero-width no-break space / BOM (\ufeff).
CONTROL_CHARS_RE = re.compile(
    r"[\x00-\x1f\x7f-\x9f\u2028\u2029\u200b-\u200f\u202a-\u202e\u2066-\u2069\ufeff]"
)

# Same set minus tab and newline, which form fields legitimately carry
_FIELD_CONTROL_CHARS_RE = re.compile(
    r"[\x00-\x08\x0b-\x1f\x7f-\x9f\u2028\u2029\u200b-\u200f\u202a-\u202e\u2066-\u2069\ufeff]"
)

SCRIPT_BLOCK_RE = re.compile(
    r"<script\b[^<]*(?:(?!</script\s*>)<[^<]*)*</script\s*>",
    re.IGNORECASE,
)
TAG_RE = re.compile(r"<[^>]*>")
EVENT_HANDLER_QUOTED_RE = re.compile(r"""on\w+\s*=\s*["'][^"']*["']""", re.IGNORECASE)
EVENT_HANDLER_UNQUOTED_RE = re.compile(r"on\w+\s*=\s*[^\s>]*", re.IGNORECASE)

_HORIZONTAL_RUN_RE = re.compile(r"[ \t]+")
_HORIZONTAL_REPEAT_RE = re.compile(r"[ \t]{2,}")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_PHONE_DISALLOWED_RE = re.compile(r"[^0-9+\s\-()]")


def strip_control_chars(value: str) -> str:
    """Strip all control characters from a string."""
    return CONTROL_CHARS_RE.sub("", value)


def strip_tags(value: str) -> str:
    return TAG_RE.sub("", value)


def remove_scripts(value: str) -> str:
    return SCRIPT_BLOCK_RE.sub("", value)


def remove_event_handlers(value: str) -> str:
    value = EVENT_HANDLER_QUOTED_RE.sub("", value)
    return EVENT_HANDLER_UNQUOTED_RE.sub("", value)


def _strip_markup_once(value: str) -> str:
    # Script blocks go first so their bodies don't survive as plain text,
    # handlers last so fragments exposed by tag stripping are caught.
    return remove_event_handlers(strip_tags(remove_scripts(value)))


def strip_markup(value: str) -> str:
    """Remove script blocks, tags and inline handlers until nothing changes.

    Every pass that changes the value makes it shorter, so this terminates.
    Repeating defeats nesting such as ``<scr<script></script>ipt>``.
    """
    while True:
        cleaned = _strip_markup_once(value)
        if cleaned == value:
            return cleaned
        value = cleaned


def sanitize_name(value: str) -> str:
    """Strip markup and collapse repeated spaces/tabs.

    No trimming, so the same function is safe on partially typed input.
    """
    value = strip_markup(_FIELD_CONTROL_CHARS_RE.sub("", value))
    return _HORIZONTAL_REPEAT_RE.sub(" ", value)


def sanitize_email(value: str) -> str:
    value = strip_markup(_FIELD_CONTROL_CHARS_RE.sub("", value.strip()))
    return value.strip().lower()


def sanitize_phone(value: str) -> str:
    """Keep only digits, ``+``, whitespace, dashes and parentheses."""
    value = strip_markup(_FIELD_CONTROL_CHARS_RE.sub("", value.strip()))
    return _PHONE_DISALLOWED_RE.sub("", value).strip()


def sanitize_message(value: str) -> str:
    """Strip markup, normalize whitespace, keep paragraph breaks."""
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    value = strip_markup(_FIELD_CONTROL_CHARS_RE.sub("", value))
    value = _HORIZONTAL_RUN_RE.sub(" ", value)
    value = _EXCESS_NEWLINES_RE.sub("\n\n", value)
    return value.strip()


FIELD_SANITIZERS = {
    "name": sanitize_name,
    "email": sanitize_email,
    "phone": sanitize_phone,
    "message": sanitize_message,
}


def sanitize_submission(submission: Submission) -> Submission:
    """Sanitize every present string field of ``submission`` in place."""
    for field_name, sanitizer in FIELD_SANITIZERS.items():
        value = getattr(submission, field_name)
        if isinstance(value, str):
            setattr(submission, field_name, sanitizer(value))
    return submission
