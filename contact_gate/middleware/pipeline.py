"""Ordered stage chain for contact requests.

Request hooks run front to back and may answer early by returning a
Response (or raising a ``ContactGateError``). Response hooks run back to
front over whatever response was produced, early answers included, so
CORS and rate-limit headers land on error envelopes too.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable
from uuid import uuid4

import structlog
from starlette.requests import Request
from starlette.responses import Response

from contact_gate.errors import ContactGateError, InternalFailure
from contact_gate.models.submission import Submission

logger = structlog.get_logger()

REQUEST_ID_HEADER = "x-request-id"


def _new_request_id() -> str:
    return uuid4().hex[:8]


@dataclass
class RequestContext:
    """Per-request state shared by every stage."""

    request_id: str = field(default_factory=_new_request_id)
    route: str = ""
    client_key: str = ""
    submission: Submission | None = None
    # Stage-private data, keyed by stage concern ("cors_headers", ...)
    extra: dict[str, Any] = field(default_factory=dict)

    def stash_headers(self, key: str, headers: dict[str, str]) -> None:
        """Remember headers a stage wants on the final response."""
        self.extra[key] = dict(headers)

    def apply_headers(self, key: str, response: Response) -> Response:
        for name, value in self.extra.get(key, {}).items():
            response.headers[name] = value
        return response


Terminal = Callable[[RequestContext], Awaitable[Response]]


class Middleware(abc.ABC):
    """One pipeline stage."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abc.abstractmethod
    async def process_request(self, request: Request, context: RequestContext) -> Response | None:
        """Return None to hand on to the next stage, or a Response to answer now."""

    async def process_response(self, response: Response, context: RequestContext) -> Response:
        return response


class MiddlewarePipeline:
    """Stages in registration order."""

    def __init__(self, stages: Iterable[Middleware] = ()) -> None:
        self._stages: list[Middleware] = []
        for stage in stages:
            self.add(stage)

    def add(self, middleware: Middleware) -> None:
        self._stages.append(middleware)
        logger.debug("middleware_registered", name=middleware.name)

    async def process_request(self, request: Request, context: RequestContext) -> Response | None:
        """Run request hooks until one answers.

        A ``ContactGateError`` raised by a stage is rendered as its own
        envelope. Anything else is logged with its traceback and answered
        with the generic 500, so internal detail never reaches the client.
        """
        for stage in self._stages:
            try:
                result = await stage.process_request(request, context)
            except ContactGateError as exc:
                logger.info("middleware_rejected", middleware=stage.name, status=exc.status_code)
                return exc.to_response()
            except Exception:
                logger.exception("middleware_request_error", middleware=stage.name)
                return InternalFailure().to_response()
            if result is not None:
                logger.debug("middleware_short_circuit", middleware=stage.name, status=result.status_code)
                return result
        return None

    async def process_response(self, response: Response, context: RequestContext) -> Response:
        """Run response hooks in reverse; a failing hook is logged and skipped."""
        for stage in reversed(self._stages):
            try:
                response = await stage.process_response(response, context)
            except Exception:
                logger.exception("middleware_response_error", middleware=stage.name)
        return response

    async def run(self, request: Request, context: RequestContext, terminal: Terminal) -> Response:
        """Full request lifecycle: stages, then ``terminal`` if nobody answered."""
        response = await self.process_request(request, context)
        if response is None:
            response = await terminal(context)
        response.headers[REQUEST_ID_HEADER] = context.request_id
        return await self.process_response(response, context)
