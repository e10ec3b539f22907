"""Route resolution middleware — only POST on the contact path goes further."""

from __future__ import annotations

import structlog
from starlette.requests import Request
from starlette.responses import Response

from contact_gate.errors import RouteNotFound
from contact_gate.middleware.pipeline import Middleware, RequestContext

logger = structlog.get_logger()

CONTACT_ROUTE = "contact"


def _normalize(path: str) -> str:
    return path.rstrip("/") or "/"


class ContactRouter(Middleware):
    """Mark contact submissions on the context; everything else is a 404.

    Runs after the origin gate, so unknown routes from disallowed origins
    still get the 403.
    """

    def __init__(self, contact_path: str = "/api/contact") -> None:
        self._contact_path = _normalize(contact_path)

    async def process_request(self, request: Request, context: RequestContext) -> Response | None:
        if request.method.upper() == "POST" and _normalize(request.url.path) == self._contact_path:
            context.route = CONTACT_ROUTE
            return None

        logger.info("route_not_found")
        return RouteNotFound().to_response()
