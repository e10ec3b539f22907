"""Body parser middleware — builds the Submission from JSON or form bodies."""

from __future__ import annotations

import json

import structlog
from pydantic import ValidationError
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import Response

from contact_gate.errors import BodyTooLarge, InvalidBody, ValidationFailed
from contact_gate.middleware.pipeline import Middleware, RequestContext
from contact_gate.models.submission import Submission

logger = structlog.get_logger()

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _media_type(request: Request) -> str:
    return request.headers.get("content-type", "").split(";")[0].strip().lower()


def _is_json(media_type: str) -> bool:
    return media_type == "application/json" or media_type.endswith("+json")


class SubmissionParser(Middleware):
    """Parse the request body into ``context.submission``.

    - JSON (``application/json`` and ``+json`` types) and form-encoded bodies
    - Any other content type parses as an empty submission, which the
      validator then rejects field by field
    - Oversized bodies are refused before parsing (413)
    - Unparseable JSON or a non-object JSON body is a 400
    """

    def __init__(self, max_body_bytes: int = 64 * 1024) -> None:
        self._max_body_bytes = max_body_bytes

    async def process_request(self, request: Request, context: RequestContext) -> Response | None:
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                if int(content_length) > self._max_body_bytes:
                    raise BodyTooLarge()
            except (ValueError, OverflowError):
                raise InvalidBody()

        body = await request.body()
        if len(body) > self._max_body_bytes:
            raise BodyTooLarge()

        media_type = _media_type(request)
        if _is_json(media_type):
            data = self._parse_json(body)
        elif media_type in _FORM_TYPES:
            try:
                form = await request.form()
            except HTTPException:
                logger.info("submission_form_unparseable")
                raise InvalidBody()
            data = {key: value for key, value in form.items() if isinstance(value, str)}
        else:
            data = {}

        try:
            context.submission = Submission.model_validate(data)
        except ValidationError as exc:
            errors = {}
            for error in exc.errors():
                field_name = str(error["loc"][0]) if error["loc"] else "body"
                errors.setdefault(field_name, f"{field_name.capitalize()} must be text")
            logger.info("submission_type_error", fields=sorted(errors))
            raise ValidationFailed(errors=errors)
        return None

    def _parse_json(self, body: bytes) -> dict:
        if not body.strip():
            return {}
        try:
            data = json.loads(body)
        except ValueError:
            logger.info("submission_body_unparseable")
            raise InvalidBody()
        if not isinstance(data, dict):
            logger.info("submission_body_not_object", kind=type(data).__name__)
            raise InvalidBody()
        return data
