"""Health endpoint, reachable from any origin.

Mounted ahead of the pipeline catch-all so no pipeline stage, body parsing
included, ever runs for it.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from contact_gate.middleware.origin_gate import HEALTH_PATH, evaluate_origin

router = APIRouter()


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _cors_headers(request: Request) -> dict[str, str]:
    decision = evaluate_origin(HEALTH_PATH, request.method, request.headers.get("origin"), frozenset())
    return decision.headers


@router.api_route(HEALTH_PATH, methods=["GET", "HEAD"])
@router.api_route(HEALTH_PATH + "/", methods=["GET", "HEAD"], include_in_schema=False)
async def health(request: Request):
    """Liveness check with permissive CORS headers."""
    settings = request.app.state.settings
    return JSONResponse(
        content={
            "status": "ok",
            "timestamp": _utc_timestamp(),
            "environment": settings.environment,
        },
        headers=_cors_headers(request),
    )


@router.options(HEALTH_PATH)
@router.options(HEALTH_PATH + "/", include_in_schema=False)
async def health_preflight(request: Request):
    return Response(status_code=204, headers=_cors_headers(request))
