"""FastAPI contact form service."""

from __future__ import annotations

from contextlib import asynccontextmanager
from functools import partial

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from contact_gate.acceptor import LoggingAcceptor, SubmissionAcceptor
from contact_gate.config.loader import ContactSettings, get_settings
from contact_gate.errors import InternalFailure, SubmissionFailed
from contact_gate.health import router as health_router
from contact_gate.logging_config import bind_request_context, setup_logging
from contact_gate.middleware.body_parser import SubmissionParser
from contact_gate.middleware.input_sanitizer import InputSanitizer
from contact_gate.middleware.origin_gate import OriginGate
from contact_gate.middleware.pipeline import MiddlewarePipeline, RequestContext
from contact_gate.middleware.rate_limiter import RateLimiter
from contact_gate.middleware.router import ContactRouter
from contact_gate.middleware.submission_validator import SubmissionValidator
from contact_gate.store.base import WindowStore
from contact_gate.store.factory import create_store

logger = structlog.get_logger()

SUCCESS_MESSAGE = "Thank you for your message! We'll get back to you soon."

_ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def build_pipeline(settings: ContactSettings, store: WindowStore) -> MiddlewarePipeline:
    """Build the ordered middleware pipeline.

    OriginGate runs first so a disallowed origin never reaches parsing,
    sanitization or the rate-limit store. RateLimiter runs last so only
    valid submissions spend budget.
    """
    return MiddlewarePipeline([
        OriginGate(settings.allowed_origin_set),   # CORS admission, preflight
        ContactRouter(settings.contact_path),       # 404 for anything else
        SubmissionParser(settings.max_body_bytes),  # JSON / form body
        InputSanitizer(),
        SubmissionValidator(),                      # 400 with every field error
        RateLimiter(store),                         # 429 per client window
    ])


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    settings: ContactSettings = app.state.settings
    setup_logging(log_level=settings.log_level, json_format=settings.log_json)

    await app.state.store.startup()

    logger.info(
        "service_started",
        port=settings.listen_port,
        environment=settings.environment,
        contact_path=settings.contact_path,
        health_path="/api/health",
    )

    yield

    await app.state.store.shutdown()
    logger.info("service_stopped")


async def _accept_submission(acceptor: SubmissionAcceptor, context: RequestContext) -> Response:
    """Hand the admitted submission downstream and translate the outcome."""
    try:
        accepted = await acceptor.accept(context.submission)
    except Exception:
        logger.exception("submission_acceptor_error", client_key=context.client_key)
        return InternalFailure().to_response()

    if not accepted:
        logger.error("submission_not_accepted", client_key=context.client_key)
        return SubmissionFailed().to_response()

    logger.info("submission_processed", client_key=context.client_key)
    return JSONResponse(content={"success": True, "message": SUCCESS_MESSAGE})


async def handle_request(request: Request, path: str) -> Response:
    """Catch-all handler: every non-health request runs through the pipeline."""
    context = RequestContext()
    bind_request_context(context.request_id, request.method, request.url.path)

    pipeline: MiddlewarePipeline = request.app.state.pipeline
    return await pipeline.run(
        request, context, partial(_accept_submission, request.app.state.acceptor)
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> Response:
    logger.error("unhandled_exception", error=str(exc), exc_info=exc)
    return InternalFailure().to_response()


def create_app(
    settings: ContactSettings | None = None,
    store: WindowStore | None = None,
    acceptor: SubmissionAcceptor | None = None,
) -> FastAPI:
    """Build the application with its own pipeline, store and acceptor."""
    settings = settings or get_settings()
    store = store or create_store(settings)

    application = FastAPI(
        title="Contact Gate",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    application.state.settings = settings
    application.state.store = store
    application.state.acceptor = acceptor or LoggingAcceptor()
    application.state.pipeline = build_pipeline(settings, store)

    # Health first: it must match before the catch-all
    application.include_router(health_router)
    application.add_api_route("/{path:path}", handle_request, methods=_ALL_METHODS)

    # Stages report their own errors; this covers failures in handle_request itself
    application.add_exception_handler(Exception, _unhandled_error_handler)
    return application


app = create_app()
