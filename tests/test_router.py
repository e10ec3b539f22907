"""Tests for route resolution and the sanitize/validate stages."""

from __future__ import annotations

import json

import pytest
import structlog
from starlette.requests import Request

from contact_gate.acceptor import LoggingAcceptor, SubmissionAcceptor
from contact_gate.logging_config import bind_request_context
from contact_gate.middleware.input_sanitizer import InputSanitizer
from contact_gate.middleware.pipeline import RequestContext
from contact_gate.middleware.router import CONTACT_ROUTE, ContactRouter
from contact_gate.middleware.submission_validator import SubmissionValidator
from contact_gate.models.submission import Submission


def _make_request(path: str = "/api/contact", method: str = "POST") -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [],
        "root_path": "",
        "server": ("localhost", 3000),
        "client": ("127.0.0.1", 12345),
    }
    return Request(scope)


class TestContactRouter:
    @pytest.mark.asyncio
    async def test_post_to_contact_path(self):
        ctx = RequestContext()
        assert await ContactRouter().process_request(_make_request(), ctx) is None
        assert ctx.route == CONTACT_ROUTE

    @pytest.mark.asyncio
    async def test_custom_path_with_trailing_slash(self):
        router = ContactRouter("/forms/contact/")
        ctx = RequestContext()
        assert await router.process_request(_make_request("/forms/contact"), ctx) is None
        assert ctx.route == CONTACT_ROUTE

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method,path",
        [("GET", "/api/contact"), ("POST", "/api/contacts"), ("POST", "/"), ("DELETE", "/api/contact")],
    )
    async def test_everything_else_is_404(self, method, path):
        ctx = RequestContext()
        result = await ContactRouter().process_request(_make_request(path, method), ctx)
        assert result.status_code == 404
        assert json.loads(result.body)["message"] == "Route not found"
        assert ctx.route == ""


class TestInputSanitizer:
    @pytest.mark.asyncio
    async def test_rewrites_submission(self):
        ctx = RequestContext(submission=Submission(name="<b>Ada</b>", email=" A@B.IO "))
        assert await InputSanitizer().process_request(_make_request(), ctx) is None
        assert ctx.submission.name == "Ada"
        assert ctx.submission.email == "a@b.io"

    @pytest.mark.asyncio
    async def test_no_submission_is_noop(self):
        assert await InputSanitizer().process_request(_make_request(), RequestContext()) is None


class TestSubmissionValidator:
    @pytest.mark.asyncio
    async def test_valid_passes(self):
        ctx = RequestContext(
            submission=Submission(name="Ada", email="ada@example.com", message="Hello there!")
        )
        assert await SubmissionValidator().process_request(_make_request(), ctx) is None

    @pytest.mark.asyncio
    async def test_invalid_returns_400_with_errors(self):
        ctx = RequestContext(submission=Submission(name="A", email="ada@example.com", message="x"))
        result = await SubmissionValidator().process_request(_make_request(), ctx)

        assert result.status_code == 400
        body = json.loads(result.body)
        assert body["message"] == "Validation failed"
        assert set(body["errors"]) == {"name", "message"}


class TestAcceptorAndLogging:
    @pytest.mark.asyncio
    async def test_logging_acceptor_accepts(self):
        acceptor = LoggingAcceptor()
        assert isinstance(acceptor, SubmissionAcceptor)
        assert await acceptor.accept(Submission(name="Ada", message="Hello there!")) is True

    def test_summary_omits_message_body(self):
        summary = Submission(name="Ada", message="secret plans").summary()
        assert summary["message_length"] == 12
        assert "message" not in summary

    def test_bind_request_context_replaces_previous(self):
        bind_request_context("aaaa1111", "POST", "/api/contact")
        bind_request_context("bbbb2222", "GET", "/api/health")
        bound = structlog.contextvars.get_contextvars()
        assert bound == {"request_id": "bbbb2222", "method": "GET", "path": "/api/health"}
        structlog.contextvars.clear_contextvars()


def test_long_log_fields_are_capped():
    from contact_gate.logging_config import MAX_FIELD_LENGTH, _cap_field_length

    event = _cap_field_length(None, "info", {"event": "origin_rejected", "origin": "x" * 5000})
    assert len(event["origin"]) == MAX_FIELD_LENGTH + len("...[truncated]")
    assert event["event"] == "origin_rejected"
