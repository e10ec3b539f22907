"""Client-facing error taxonomy.

Every failure the service reports to a caller is one of these exceptions.
Each carries its HTTP status and public message and renders itself as the
JSON envelope ``{"success": false, "message": ..., "errors"?: {...}}``.
Internal detail never goes into the envelope; it is logged server side.
"""

from __future__ import annotations

from starlette.responses import JSONResponse


class ContactGateError(Exception):
    """Base class for failures with a defined client response."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        errors: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        if message is not None:
            self.message = message
        self.errors = errors or {}
        self.headers = headers or {}
        super().__init__(self.message)

    def to_body(self) -> dict:
        body: dict = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = dict(self.errors)
        return body

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.status_code,
            content=self.to_body(),
            headers=self.headers or None,
        )


class OriginRejected(ContactGateError):
    status_code = 403
    message = "CORS policy violation"


class ValidationFailed(ContactGateError):
    status_code = 400
    message = "Validation failed"


class InvalidBody(ContactGateError):
    status_code = 400
    message = "Invalid request body"


class BodyTooLarge(ContactGateError):
    status_code = 413
    message = "Request body too large"


class RateLimitExceeded(ContactGateError):
    status_code = 429
    message = "Too many form submissions. Please try again in 15 minutes."


class RouteNotFound(ContactGateError):
    status_code = 404
    message = "Route not found"


class SubmissionFailed(ContactGateError):
    """The downstream collaborator reported that it could not take the submission."""

    status_code = 500
    message = "Failed to send message. Please try again later."


class InternalFailure(ContactGateError):
    status_code = 500
    message = "Internal server error"


class StoreUnavailable(ContactGateError):
    """Rate-limit backend unreachable; the limiter fails closed."""

    status_code = 503
    message = "Service temporarily unavailable"
