"""
=============================================================================
CONTENT-ENCODING MIDDLEWARE
=============================================================================

Runs Accept-Encoding negotiation (see http/encoding.py) on responses
for selected routes.

=============================================================================
HOW IT WORKS
=============================================================================

    Request:  GET /echo/abc HTTP/1.1
              Accept-Encoding: gzip

    1. Call the next handler to get the response
    2. Is the path under one of the configured prefixes?    no → return
    3. negotiate + apply:
         Content-Encoding: gzip
         Vary: Accept-Encoding
         body = gzip(b"abc")
    4. Return; the server recomputes Content-Length afterwards

By default the server enables this for "/echo/" only. File downloads and
the other routes are sent as-is whatever the client accepts.

=============================================================================
MIDDLEWARE POSITION
=============================================================================

Compression should be LAST (innermost) in the pipeline:

    pipeline.add(LoggingMiddleware())           # Logs the encoded size
    pipeline.add(ContentEncodingMiddleware())   # Encodes handler output

Why last? Anything added around it sees the final body.

=============================================================================
"""

import logging
from typing import Iterable, Optional, Tuple

from .base import Middleware, NextHandler
from ..http.encoding import apply_content_encoding
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


class ContentEncodingMiddleware(Middleware):
    """
    Response content-encoding middleware.

    Usage:
        # Negotiate on every route
        pipeline.add(ContentEncodingMiddleware())

        # Only on the echo route
        pipeline.add(ContentEncodingMiddleware(prefixes=["/echo/"]))
    """

    def __init__(self, prefixes: Optional[Iterable[str]] = None):
        """
        Args:
            prefixes: Path prefixes to negotiate for. None means every
                      path; an empty iterable disables negotiation.
        """
        self.prefixes: Optional[Tuple[str, ...]] = (
            tuple(prefixes) if prefixes is not None else None
        )

    def applies_to(self, path: str) -> bool:
        """Check whether negotiation runs for this request path."""
        if self.prefixes is None:
            return True
        return path.startswith(self.prefixes)

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        response = next(request)

        if not self.applies_to(request.path):
            return response

        original_size = len(response.body)
        apply_content_encoding(response, request.accept_encoding)

        if len(response.body) != original_size:
            logger.debug(
                f"Encoded {request.path}: {original_size} → {len(response.body)} bytes"
            )
        return response
