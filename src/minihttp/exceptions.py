"""
=============================================================================
SERVER EXCEPTIONS
=============================================================================

Every failure the server can hit while handling one connection falls into
one of these families:

    ┌────────────────────────┬─────────────────────────────────────────────┐
    │  FAMILY                │  WHAT HAPPENS                               │
    ├────────────────────────┼─────────────────────────────────────────────┤
    │  HTTPParseError        │  Request bytes are malformed.               │
    │                        │  Connection is logged and closed.           │
    ├────────────────────────┼─────────────────────────────────────────────┤
    │  TransportError        │  Socket closed or failed mid-request.       │
    │                        │  Connection is logged and closed.           │
    ├────────────────────────┼─────────────────────────────────────────────┤
    │  HandlerError          │  File store failed.                         │
    │                        │  Turned into a 500 response.                │
    ├────────────────────────┼─────────────────────────────────────────────┤
    │  MissingHeaderError    │  A route needs a header the client omitted. │
    │                        │  Connection is logged and closed.           │
    └────────────────────────┴─────────────────────────────────────────────┘

Nothing is retried. A failure either becomes a response status or ends the
one connection it happened on.

=============================================================================
"""


class HTTPServerError(Exception):
    """Base exception for all server errors."""

    pass


# ═══════════════════════════════════════════════════════════════════════════
# PARSE ERRORS
# ═══════════════════════════════════════════════════════════════════════════

class HTTPParseError(HTTPServerError):
    """
    Raised when the request bytes do not form a valid HTTP request.

    Attributes:
        status_code: The status a client would get for this error. The
                     server does not send it (the connection is dropped),
                     but it is useful in logs.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class MalformedRequestLine(HTTPParseError):
    """Request line is not METHOD SP PATH SP VERSION."""

    pass


class InvalidMethod(HTTPParseError):
    """Request line names a method outside the supported set."""

    def __init__(self, method: str):
        super().__init__(f"Invalid method: {method!r}", status_code=501)
        self.method = method


class InvalidContentLength(HTTPParseError):
    """Content-Length is not a non-negative integer."""

    def __init__(self, value: str):
        super().__init__(f"Invalid Content-Length: {value!r}")
        self.value = value


# ═══════════════════════════════════════════════════════════════════════════
# TRANSPORT ERRORS
# ═══════════════════════════════════════════════════════════════════════════

class TransportError(HTTPServerError):
    """Socket-level failure while reading a request or writing a response."""

    pass


class ConnectionClosedError(TransportError):
    """Peer closed the connection before a full request head arrived."""

    pass


class IncompleteBodyError(TransportError):
    """Peer closed the connection before Content-Length body bytes arrived."""

    def __init__(self, expected: int, received: int):
        super().__init__(
            f"Incomplete body: expected {expected} bytes, got {received}"
        )
        self.expected = expected
        self.received = received


# ═══════════════════════════════════════════════════════════════════════════
# HANDLER ERRORS
# ═══════════════════════════════════════════════════════════════════════════

class HandlerError(HTTPServerError):
    """A handler's collaborator (the file store) failed."""

    pass


class MissingHeaderError(HTTPServerError):
    """A route requires a request header that was not sent."""

    def __init__(self, header: str):
        super().__init__(f"Missing required header: {header}")
        self.header = header
