"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

Everything needed to turn bytes into a request and a response back into
bytes, independent of sockets:

    headers.py       HeaderName / CustomHeader key model
    methods.py       Method enum
    status_codes.py  HTTPStatus enum with reason phrases
    request.py       HTTPRequest + RequestParser
    response.py      HTTPResponse + ResponseBuilder (serializer)
    encoding.py      Accept-Encoding negotiation and gzip
    router.py        Path/method → handler dispatch

HTTP message format (both directions):

    Start line\r\n                    Request:  GET /echo/abc HTTP/1.1
    Header: Value\r\n                 Response: HTTP/1.1 200 OK
    Header: Value\r\n
    \r\n
    [body]

=============================================================================
"""

from .headers import CustomHeader, HeaderKey, HeaderName, header_key
from .methods import Method
from .status_codes import HTTPStatus
from .request import HTTPRequest, RequestParser, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                  # 200 OK
    created,             # 201 Created
    not_found,           # 404 Not Found
    method_not_allowed,  # 405 Method Not Allowed
    internal_error,      # 500 Internal Server Error
)
from .encoding import EncodingName, apply_content_encoding, negotiate_encodings
from .router import Router, Route


__all__ = [
    # Headers
    "CustomHeader",
    "HeaderKey",
    "HeaderName",
    "header_key",

    # Request parsing
    "Method",
    "HTTPRequest",
    "RequestParser",
    "parse_request",

    # Response building
    "HTTPStatus",
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "not_found",
    "method_not_allowed",
    "internal_error",

    # Content negotiation
    "EncodingName",
    "apply_content_encoding",
    "negotiate_encodings",

    # Routing
    "Router",
    "Route",
]
