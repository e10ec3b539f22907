"""Pydantic model for a contact form submission."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

SUBMISSION_FIELDS = ("name", "email", "phone", "message")


class Submission(BaseModel):
    """One parsed contact form body.

    Every field is optional at parse time; presence and shape are the
    validator's job. The sanitizer rewrites fields in place, so the model
    stays mutable.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=False)

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    message: str | None = None

    def summary(self) -> dict[str, str | int | None]:
        """Loggable view: the message body is reduced to its length."""
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "message_length": len(self.message) if self.message is not None else None,
        }
