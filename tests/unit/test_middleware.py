"""
Unit tests for the middleware pipeline and access logging.
"""

import json
import logging

import pytest

from minihttp.http.headers import CustomHeader, HeaderName
from minihttp.http.methods import Method
from minihttp.http.request import HTTPRequest
from minihttp.http.response import HTTPResponse, ResponseBuilder, HTTPStatus
from minihttp.middleware import LoggingMiddleware, Middleware, MiddlewarePipeline


def make_request(path: str = "/echo/abc") -> HTTPRequest:
    return HTTPRequest(
        method=Method.GET,
        path=path,
        headers={HeaderName.USER_AGENT: "pytest"},
        client_address=("127.0.0.1", 50000),
    )


class Recorder(Middleware):
    """Middleware that records the order it runs in."""

    def __init__(self, label: str, calls: list):
        self.label = label
        self.calls = calls

    def __call__(self, request, next):
        self.calls.append(f"{self.label}:in")
        response = next(request)
        self.calls.append(f"{self.label}:out")
        return response


class TestMiddlewarePipeline:
    """Tests for MiddlewarePipeline."""

    def test_order(self):
        calls = []
        pipeline = MiddlewarePipeline()
        pipeline.add(Recorder("outer", calls)).add(Recorder("inner", calls))

        def handler(request):
            calls.append("handler")
            return ResponseBuilder().build()

        pipeline.wrap(handler)(make_request())

        assert calls == ["outer:in", "inner:in", "handler", "inner:out", "outer:out"]

    def test_empty_pipeline_is_handler(self):
        def handler(request):
            return ResponseBuilder().text("direct").build()

        assert MiddlewarePipeline().wrap(handler)(make_request()).body == b"direct"

    def test_len_and_iter(self):
        first, second = Recorder("a", []), Recorder("b", [])
        pipeline = MiddlewarePipeline().add(first).add(second)

        assert len(pipeline) == 2
        assert list(pipeline) == [first, second]

    def test_short_circuit(self):
        class Deny(Middleware):
            def __call__(self, request, next):
                return ResponseBuilder().status(HTTPStatus.FORBIDDEN).build()

        def handler(request):
            raise AssertionError("handler must not run")

        response = MiddlewarePipeline().add(Deny()).wrap(handler)(make_request())
        assert response.status == HTTPStatus.FORBIDDEN

    def test_middleware_can_edit_response(self):
        class Tag(Middleware):
            def __call__(self, request, next):
                return next(request).set_header("X-Tag", self.name)

        response = MiddlewarePipeline().add(Tag()).wrap(
            lambda r: ResponseBuilder().build()
        )(make_request())

        assert response.headers[CustomHeader("X-Tag")] == "Tag"


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware."""

    def ok_handler(self, request) -> HTTPResponse:
        return ResponseBuilder().text("abc").build()

    def test_text_line(self, caplog: pytest.LogCaptureFixture):
        caplog.set_level(logging.INFO, logger="minihttp.access")
        LoggingMiddleware()(make_request(), self.ok_handler)

        [record] = caplog.records
        assert record.name == "minihttp.access"
        assert record.levelno == logging.INFO
        assert record.getMessage().startswith("127.0.0.1 - - [")
        assert '"GET /echo/abc" 200 3' in record.getMessage()

    def test_json_line(self, caplog: pytest.LogCaptureFixture):
        caplog.set_level(logging.INFO, logger="minihttp.access")
        LoggingMiddleware(log_format="json")(make_request(), self.ok_handler)

        entry = json.loads(caplog.records[0].getMessage())
        assert entry["method"] == "GET"
        assert entry["path"] == "/echo/abc"
        assert entry["status_code"] == 200
        assert entry["content_length"] == 3
        assert entry["user_agent"] == "pytest"

    def test_error_status_logged_as_warning(self, caplog: pytest.LogCaptureFixture):
        caplog.set_level(logging.INFO, logger="minihttp.access")
        LoggingMiddleware()(
            make_request("/nope"),
            lambda r: ResponseBuilder().status(HTTPStatus.NOT_FOUND).build(),
        )

        assert caplog.records[0].levelno == logging.WARNING

    def test_exception_logged_and_reraised(self, caplog: pytest.LogCaptureFixture):
        caplog.set_level(logging.INFO, logger="minihttp.access")

        def failing(request):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            LoggingMiddleware()(make_request(), failing)

        assert "RuntimeError: boom" in caplog.records[0].getMessage()
        assert caplog.records[0].levelno == logging.ERROR
