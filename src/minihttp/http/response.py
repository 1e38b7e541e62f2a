"""
=============================================================================
HTTP RESPONSE BUILDER AND SERIALIZER
=============================================================================

Builds HTTP/1.1 responses and writes them to the wire per RFC 7230.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                                         │ │
    │  │    ────┬─── ─┬─ ─┬─                                            │ │
    │  │    Version  Code Phrase                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS (order not significant) ──────────────────────────────┐ │
    │  │    Content-Type: text/plain\r\n                                │ │
    │  │    Content-Encoding: gzip\r\n                                  │ │
    │  │    Content-Length: 23\r\n                                      │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (raw bytes, verbatim) ───────────────────────────────────┐ │
    │  │    \x1f\x8b\x08...                                             │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CONTENT-LENGTH IS COMPUTED LAST
=============================================================================

Compression changes the body length, so Content-Length can only be
trusted once every transform has run:

    handler ──► middleware (gzip) ──► set_content_length() ──► write_to()
                                      ▲
                                      └── always recomputed from the
                                          final body, overwriting any
                                          earlier value

No chunked encoding and no trailers: the body length is always known
up front.

=============================================================================
"""

import io
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Union

from .headers import HeaderKey, HeaderName, format_header_line, header_key
from .status_codes import HTTPStatus


CRLF = b"\r\n"


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler builds       Middleware mutates       Server serializes
        HTTPResponse  ─────►  headers / body   ─────►  write_to(stream)
                              (encoding)               exactly once

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[HeaderKey, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {self.status.display}"

    def set_header(self, name: Union[HeaderKey, str], value: str) -> "HTTPResponse":
        """
        Set a response header, replacing any existing value.

        Args:
            name: HeaderKey, or a string mapped through header_key().
            value: Header value.

        Returns:
            Self for method chaining
        """
        if isinstance(name, str):
            name = header_key(name)
        self.headers[name] = value
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the response body, encoding strings as UTF-8."""
        if isinstance(body, str):
            self.body = body.encode("utf-8")
        else:
            self.body = body
        return self

    def set_content_length(self) -> "HTTPResponse":
        """Set Content-Length to the current body length."""
        self.headers[HeaderName.CONTENT_LENGTH] = str(len(self.body))
        return self

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def write_to(self, stream: BinaryIO) -> None:
        """
        Write the response to a binary stream in wire format and flush.

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\r\n               ← Status line
            Content-Type: text/plain\r\n      ← One line per header
            Content-Length: 3\r\n
            \r\n                              ← Empty line (separator)
            abc                               ← Body bytes, verbatim

        =====================================================================

        Headers are written as they are; call set_content_length() first
        if the body may have changed.

        Raises:
            OSError: The underlying socket failed mid-write.
        """
        lines: List[str] = [self.status_line]
        for name, value in self.headers.items():
            lines.append(format_header_line(name, value))

        head = "\r\n".join(lines).encode("utf-8") + CRLF + CRLF
        stream.write(head)
        stream.write(self.body)
        stream.flush()

    def to_bytes(self) -> bytes:
        """Serialize the response to bytes (same format as write_to)."""
        buffer = io.BytesIO()
        self.write_to(buffer)
        return buffer.getvalue()


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    Each method returns `self`, enabling chaining:

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .text("hello")
            .build())

        builder.status(201).version("HTTP/1.0").build()
        ────────┬────────────────┬──────────────┬───
                └────────────────┴──────────────┘
                   All return 'self' except build()
    """

    def __init__(self, version: str = "HTTP/1.1"):
        self._status = HTTPStatus.OK
        self._headers: Dict[HeaderKey, str] = {}
        self._body: bytes = b""
        self._version = version

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = HTTPStatus(status)
        return self

    def version(self, version: str) -> "ResponseBuilder":
        """Set the protocol version echoed on the status line."""
        self._version = version
        return self

    def header(self, name: Union[HeaderKey, str], value: str) -> "ResponseBuilder":
        """Add a single response header."""
        if isinstance(name, str):
            name = header_key(name)
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        """Set the Content-Type header."""
        return self.header(HeaderName.CONTENT_TYPE, content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the response body (raw bytes or string).

        Args:
            body: Response body (string auto-encoded to UTF-8)

        Returns:
            Self for method chaining
        """
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Set a plain text body with Content-Type: text/plain."""
        self._body = text.encode("utf-8")
        return self.content_type("text/plain")

    def octet_stream(self, data: bytes) -> "ResponseBuilder":
        """Set a binary body with Content-Type: application/octet-stream."""
        self._body = data
        return self.content_type("application/octet-stream")

    def build(self) -> HTTPResponse:
        """Create the HTTPResponse. The builder can be reused afterwards."""
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
            version=self._version,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Shortcuts for the responses the built-in routes produce. Error
# responses carry an empty body unless a message is given.
#
# =============================================================================

def ok(body: Union[str, bytes] = b"", version: str = "HTTP/1.1") -> HTTPResponse:
    """Create a 200 OK response."""
    return ResponseBuilder(version).status(HTTPStatus.OK).body(body).build()


def created(version: str = "HTTP/1.1") -> HTTPResponse:
    """Create a 201 Created response with an empty body."""
    return ResponseBuilder(version).status(HTTPStatus.CREATED).build()


def not_found(version: str = "HTTP/1.1") -> HTTPResponse:
    """Create a 404 Not Found response with an empty body."""
    return ResponseBuilder(version).status(HTTPStatus.NOT_FOUND).build()


def method_not_allowed(
    allowed_methods: List[str],
    version: str = "HTTP/1.1",
) -> HTTPResponse:
    """
    Create a 405 Method Not Allowed response.

    Includes the Allow header listing valid methods (RFC 7231 requirement).
    The body is empty.
    """
    return (ResponseBuilder(version)
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header(HeaderName.ALLOW, ", ".join(allowed_methods))
        .build())


def internal_error(message: str = "", version: str = "HTTP/1.1") -> HTTPResponse:
    """Create a 500 response whose body is the error text."""
    builder = ResponseBuilder(version).status(HTTPStatus.INTERNAL_SERVER_ERROR)
    if message:
        builder.text(message)
    return builder.build()
