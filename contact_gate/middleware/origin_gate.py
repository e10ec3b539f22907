"""Origin gate middleware — CORS admission with a health-route bypass.

The admission policy is the pure function ``evaluate_origin``; the
middleware and the health router only translate its ``OriginDecision``
into status codes and headers.

Routes fall into two states, chosen by path alone:

- health route: always admitted with permissive ``*`` headers, whatever
  the Origin. A preflight is answered 204 immediately.
- standard route: admitted when there is no Origin header (non-browser
  clients, monitors) or when the Origin exactly equals a configured origin.
  No wildcard or suffix matching. Anything else is a 403.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog
from starlette.requests import Request
from starlette.responses import Response

from contact_gate.errors import OriginRejected
from contact_gate.middleware.pipeline import Middleware, RequestContext
from contact_gate.utils.sanitize import strip_control_chars

logger = structlog.get_logger()

HEALTH_PATH = "/api/health"
PREFLIGHT_METHOD = "OPTIONS"
CORS_HEADERS_KEY = "cors_headers"

HEALTH_CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
ALLOWED_HEADERS = ("Content-Type", "Authorization")

_MAX_LOGGED_ORIGIN_LENGTH = 200


@dataclass(frozen=True)
class OriginDecision:
    """Outcome of origin admission for one request."""

    admitted: bool
    route: str  # "health" or "standard"
    preflight: bool = False
    headers: dict[str, str] = field(default_factory=dict)


def evaluate_origin(
    path: str,
    method: str,
    origin: str | None,
    allowed_origins: frozenset[str],
) -> OriginDecision:
    """Decide whether a request from ``origin`` may proceed."""
    preflight = method.upper() == PREFLIGHT_METHOD

    if path.rstrip("/") == HEALTH_PATH:
        return OriginDecision(
            admitted=True,
            route="health",
            preflight=preflight,
            headers=dict(HEALTH_CORS_HEADERS),
        )

    if origin and origin not in allowed_origins:
        return OriginDecision(admitted=False, route="standard")

    headers: dict[str, str] = {}
    if origin:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Allow-Credentials"] = "true"
        headers["Vary"] = "Origin"
    if preflight:
        headers["Access-Control-Allow-Methods"] = ",".join(ALLOWED_METHODS)
        headers["Access-Control-Allow-Headers"] = ",".join(ALLOWED_HEADERS)
    return OriginDecision(admitted=True, route="standard", preflight=preflight, headers=headers)


class OriginGate(Middleware):
    """First pipeline stage: reject disallowed origins, answer preflights.

    A rejection here means no later stage runs, so a disallowed origin can
    never touch the sanitizer, validator or rate-limit counters.
    """

    def __init__(self, allowed_origins: frozenset[str]) -> None:
        self._allowed_origins = frozenset(allowed_origins)

    async def process_request(self, request: Request, context: RequestContext) -> Response | None:
        origin = request.headers.get("origin")
        decision = evaluate_origin(
            request.url.path, request.method, origin, self._allowed_origins
        )

        if not decision.admitted:
            logger.info(
                "origin_rejected",
                origin=strip_control_chars(origin or "")[:_MAX_LOGGED_ORIGIN_LENGTH],
            )
            logger.debug("origin_allowlist", allowed=sorted(self._allowed_origins))
            return OriginRejected().to_response()

        context.stash_headers(CORS_HEADERS_KEY, decision.headers)
        if decision.preflight:
            return Response(status_code=204)
        return None

    async def process_response(self, response: Response, context: RequestContext) -> Response:
        return context.apply_headers(CORS_HEADERS_KEY, response)
