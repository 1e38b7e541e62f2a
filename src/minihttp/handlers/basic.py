"""
Small built-in handlers: root, echo and user-agent reflection.

    GET /                 → 200, empty body
    GET /echo/<value>     → 200, body "<value>", text/plain
    GET /user-agent       → 200, body is the User-Agent header, text/plain

All three accept any method.
"""

from ..exceptions import MissingHeaderError
from ..http.headers import HeaderName
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, ok


def index(request: HTTPRequest) -> HTTPResponse:
    """Answer the root path with an empty 200."""
    return ok(version=request.version)


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Return the path segment after /echo/ as a plain text body.

    The segment is sent back exactly as it appeared in the request line,
    without percent-decoding. Content encoding is applied afterwards by
    ContentEncodingMiddleware.
    """
    return (ResponseBuilder(request.version)
        .text(request.path_params["value"])
        .build())


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """
    Reflect the User-Agent header as a plain text body.

    Raises:
        MissingHeaderError: The request has no User-Agent header. There
                            is no response for this case; the server
                            drops the connection.
    """
    agent = request.user_agent
    if agent is None:
        raise MissingHeaderError(HeaderName.USER_AGENT.value)

    return (ResponseBuilder(request.version)
        .text(agent)
        .build())
