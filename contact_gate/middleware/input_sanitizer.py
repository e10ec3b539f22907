"""Input sanitizer middleware — strips markup from submission fields in place."""

from __future__ import annotations

import structlog
from starlette.requests import Request
from starlette.responses import Response

from contact_gate.middleware.pipeline import Middleware, RequestContext
from contact_gate.models.submission import SUBMISSION_FIELDS
from contact_gate.utils.sanitize import sanitize_submission

logger = structlog.get_logger()


class InputSanitizer(Middleware):
    """Sanitize the parsed submission. Never rejects; only transforms."""

    async def process_request(self, request: Request, context: RequestContext) -> Response | None:
        submission = context.submission
        if submission is None:
            return None

        before = submission.model_dump()
        sanitize_submission(submission)
        after = submission.model_dump()

        changed = [name for name in SUBMISSION_FIELDS if before[name] != after[name]]
        if changed:
            logger.info("input_sanitized", fields=changed)
        return None
