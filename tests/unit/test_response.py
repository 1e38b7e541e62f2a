"""
Unit tests for HTTP response building and serialization.
"""

import io

import pytest

from minihttp.http.headers import CustomHeader, HeaderName
from minihttp.http.response import (
    HTTPResponse,
    ResponseBuilder,
    HTTPStatus,
    ok,
    created,
    not_found,
    method_not_allowed,
    internal_error,
)


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        response = HTTPResponse(status=HTTPStatus.OK)
        assert response.status_line == "HTTP/1.1 200 OK"

        response = HTTPResponse(status=HTTPStatus.NOT_FOUND)
        assert response.status_line == "HTTP/1.1 404 Not Found"

    def test_status_line_echoes_version(self):
        response = HTTPResponse(status=HTTPStatus.CREATED, version="HTTP/1.0")

        assert response.status_line == "HTTP/1.0 201 Created"

    def test_to_bytes_wire_format(self):
        response = (ResponseBuilder()
            .text("abc")
            .build()
            .set_content_length())

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_empty_response(self):
        assert HTTPResponse().to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_write_to_matches_to_bytes(self):
        response = ok(b"\x00\x01binary")
        stream = io.BytesIO()
        response.write_to(stream)

        assert stream.getvalue() == response.to_bytes()

    def test_set_content_length_tracks_body(self):
        response = HTTPResponse(body=b"12345")
        response.set_content_length()
        assert response.headers[HeaderName.CONTENT_LENGTH] == "5"

        response.set_body("")
        response.set_content_length()
        assert response.headers[HeaderName.CONTENT_LENGTH] == "0"

    def test_set_header_chaining(self):
        """Test method chaining for set_header."""
        response = HTTPResponse()
        result = response.set_header("X-Custom", "value").set_header("content-type", "text/plain")

        assert result is response
        assert response.headers[CustomHeader("X-Custom")] == "value"
        assert response.headers[HeaderName.CONTENT_TYPE] == "text/plain"

    def test_custom_header_name_preserved(self):
        response = HTTPResponse().set_header("x-lower-Case", "1")

        assert b"x-lower-Case: 1\r\n" in response.to_bytes()


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        response = ResponseBuilder().status(HTTPStatus.CREATED).build()
        assert response.status == HTTPStatus.CREATED

    def test_status_from_int(self):
        response = ResponseBuilder().status(404).build()
        assert response.status is HTTPStatus.NOT_FOUND

    def test_text_body(self):
        response = ResponseBuilder().text("Hello").build()

        assert response.body == b"Hello"
        assert response.headers[HeaderName.CONTENT_TYPE] == "text/plain"

    def test_octet_stream(self):
        response = ResponseBuilder().octet_stream(b"\xff\xfe").build()

        assert response.body == b"\xff\xfe"
        assert response.headers[HeaderName.CONTENT_TYPE] == "application/octet-stream"

    def test_version(self):
        response = ResponseBuilder().version("HTTP/1.0").build()
        assert response.status_line == "HTTP/1.0 200 OK"

    def test_builder_reusable(self):
        builder = ResponseBuilder().header("X-A", "1")
        first = builder.build()
        first.set_header("X-B", "2")

        assert CustomHeader("X-B") not in builder.build().headers

    def test_method_chaining(self):
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .header("X-Custom", "value")
            .body(b"data")
            .build())

        assert response.status == HTTPStatus.OK
        assert response.headers[CustomHeader("X-Custom")] == "value"
        assert response.body == b"data"


class TestConvenienceFunctions:
    """Tests for convenience response functions."""

    def test_ok(self):
        response = ok()

        assert response.status == HTTPStatus.OK
        assert response.body == b""
        assert response.headers == {}

    def test_created(self):
        response = created()
        assert response.status == HTTPStatus.CREATED
        assert response.body == b""

    def test_not_found(self):
        response = not_found(version="HTTP/1.0")
        assert response.status_line == "HTTP/1.0 404 Not Found"
        assert response.body == b""

    def test_method_not_allowed(self):
        response = method_not_allowed(["GET", "POST"])

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers[HeaderName.ALLOW] == "GET, POST"

    def test_internal_error(self):
        response = internal_error("disk full")

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == b"disk full"


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    @pytest.mark.parametrize("status, display", [
        (HTTPStatus.CONTINUE, "100 Continue"),
        (HTTPStatus.OK, "200 OK"),
        (HTTPStatus.CREATED, "201 Created"),
        (HTTPStatus.NOT_FOUND, "404 Not Found"),
        (HTTPStatus.IM_A_TEAPOT, "418 I'm a teapot"),
        (HTTPStatus.INTERNAL_SERVER_ERROR, "500 Internal Server Error"),
        (HTTPStatus.NETWORK_AUTHENTICATION_REQUIRED, "511 Network Authentication Required"),
    ])
    def test_display(self, status: HTTPStatus, display: str):
        assert status.display == display
        assert str(status) == display

    def test_every_status_has_phrase(self):
        for status in HTTPStatus:
            assert status.phrase

    def test_is_error(self):
        assert not HTTPStatus.OK.is_error
        assert HTTPStatus.NOT_FOUND.is_error
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_error
