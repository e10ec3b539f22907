"""Submission validator middleware — rejects invalid submissions with 400."""

from __future__ import annotations

import structlog
from starlette.requests import Request
from starlette.responses import Response

from contact_gate.errors import ValidationFailed
from contact_gate.middleware.pipeline import Middleware, RequestContext
from contact_gate.validation.submission_validator import unsafe_markers, validate_submission

logger = structlog.get_logger()


class SubmissionValidator(Middleware):
    """Validate the sanitized submission and report every failing field.

    Sits before the rate limiter: malformed payloads are answered here and
    never spend a client's rate-limit budget.
    """

    async def process_request(self, request: Request, context: RequestContext) -> Response | None:
        submission = context.submission
        if submission is None:
            return None

        result = validate_submission(submission)
        if result.valid:
            return None

        logger.info(
            "validation_failed",
            fields=sorted(result.errors),
            unsafe_markers=unsafe_markers(submission.message or ""),
        )
        return ValidationFailed(errors=result.errors).to_response()
