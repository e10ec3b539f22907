"""Fixed-window rate limiter middleware for contact submissions."""

from __future__ import annotations

import math

import structlog
from starlette.requests import Request
from starlette.responses import Response

from contact_gate.errors import RateLimitExceeded
from contact_gate.middleware.pipeline import Middleware, RequestContext
from contact_gate.middleware.router import CONTACT_ROUTE
from contact_gate.store.base import WindowState, WindowStore
from contact_gate.utils.sanitize import strip_control_chars

logger = structlog.get_logger()

UNKNOWN_CLIENT = "unknown"
RATE_LIMIT_HEADERS_KEY = "rate_limit_headers"

_MAX_KEY_LENGTH = 128


def _clean_key(value: str) -> str:
    return strip_control_chars(value.strip())[:_MAX_KEY_LENGTH]


def client_key(request: Request) -> str:
    """Derive the rate-limit identity of the caller.

    Precedence is fixed:

    1. first comma-separated entry of ``X-Forwarded-For``
    2. ``X-Real-IP``
    3. the transport peer address
    4. the literal ``"unknown"``

    Clients behind one proxy that does not set either header therefore
    share a single bucket (the proxy's address).
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = _clean_key(forwarded.split(",")[0])
        if first:
            return first

    real_ip = _clean_key(request.headers.get("x-real-ip", ""))
    if real_ip:
        return real_ip

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def retry_message(window_seconds: int) -> str:
    minutes = max(1, math.ceil(window_seconds / 60))
    unit = "minute" if minutes == 1 else "minutes"
    return f"Too many form submissions. Please try again in {minutes} {unit}."


def rate_limit_headers(state: WindowState) -> dict[str, str]:
    """Standard ``RateLimit-*`` headers; legacy ``X-RateLimit-*`` are never sent."""
    return {
        "RateLimit-Limit": str(state.limit),
        "RateLimit-Remaining": str(state.remaining),
        "RateLimit-Reset": str(state.reset_in),
    }


class RateLimiter(Middleware):
    """Per-client fixed window over accepted contact submissions.

    - Only consulted for submissions that passed validation
    - Check-and-increment is atomic inside the store
    - Store failures surface as 503 (fail closed)
    - Injects RateLimit-* headers on admitted and rejected responses
    """

    def __init__(self, store: WindowStore) -> None:
        self._store = store

    async def process_request(self, request: Request, context: RequestContext) -> Response | None:
        if context.route != CONTACT_ROUTE or context.submission is None:
            return None

        key = client_key(request)
        context.client_key = key
        state = await self._store.hit(key)
        headers = rate_limit_headers(state)
        context.stash_headers(RATE_LIMIT_HEADERS_KEY, headers)

        if state.admitted:
            return None

        logger.warning(
            "rate_limit_exceeded",
            client_key=key,
            count=state.count,
            max=state.limit,
            reset_in=state.reset_in,
        )
        return RateLimitExceeded(
            retry_message(self._store.window_seconds),
            headers={**headers, "Retry-After": str(state.reset_in)},
        ).to_response()

    async def process_response(self, response: Response, context: RequestContext) -> Response:
        return context.apply_headers(RATE_LIMIT_HEADERS_KEY, response)
