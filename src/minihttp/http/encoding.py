"""
=============================================================================
CONTENT-ENCODING NEGOTIATION
=============================================================================

Decides how a response body is encoded based on the request's
Accept-Encoding header.

=============================================================================
HOW NEGOTIATION WORKS
=============================================================================

    Request:   Accept-Encoding: invalid-1, gzip, br
                                ─────┬───  ──┬─  ─┬
                                     │       │    │
                           unknown, dropped  │    recognized
                                         recognized

    Response:  Content-Encoding: gzip, br
               Vary: Accept-Encoding
               [body gzip-compressed]

Rules:
    1. No Accept-Encoding header        → nothing happens
    2. Split on commas, trim each token → candidates, in order
    3. Keep tokens that name an EncodingName (case-insensitive)
    4. Nothing kept                     → no Content-Encoding, body unchanged
    5. Something kept                   → Content-Encoding lists them all
    6. Only gzip touches the body; br, deflate, compress and zstd are
       listed in the header but the body is left as it is

Rule 6 is deliberate: the server only ships a gzip encoder, and the
header records what the client asked for in the order it asked.

=============================================================================
"""

import gzip
from enum import Enum
from typing import List, Optional

from .headers import HeaderName
from .response import HTTPResponse


class EncodingName(str, Enum):
    """Content codings the negotiator recognizes (RFC 9110 section 8.4.1)."""

    GZIP = "gzip"
    COMPRESS = "compress"
    DEFLATE = "deflate"
    BR = "br"
    ZSTD = "zstd"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, token: str) -> Optional["EncodingName"]:
        """
        Look up an encoding by name, ignoring case.

        Returns:
            The EncodingName, or None for unknown tokens like "identity".
        """
        try:
            return cls(token.strip().lower())
        except ValueError:
            return None


def negotiate_encodings(accept_encoding: Optional[str]) -> List[EncodingName]:
    """
    Pick the recognized encodings out of an Accept-Encoding value.

    Args:
        accept_encoding: Raw header value, or None if the header is absent.

    Returns:
        Recognized encodings in the order the client listed them, each
        at most once. Empty if nothing was recognized.

    Example:
        negotiate_encodings("invalid, gzip, GZIP, br")
        # [EncodingName.GZIP, EncodingName.BR]
    """
    if not accept_encoding:
        return []

    encodings: List[EncodingName] = []
    for token in accept_encoding.split(","):
        encoding = EncodingName.parse(token)
        if encoding is not None and encoding not in encodings:
            encodings.append(encoding)
    return encodings


def encode_body(body: bytes, encodings: List[EncodingName]) -> bytes:
    """
    Apply the body transform for the negotiated encodings.

    Only gzip is implemented; gzip.compress uses the default level (9).
    """
    if EncodingName.GZIP in encodings:
        return gzip.compress(body)
    return body


def apply_content_encoding(
    response: HTTPResponse,
    accept_encoding: Optional[str],
) -> HTTPResponse:
    """
    Negotiate and apply a content encoding to a response in place.

    Sets Content-Encoding and Vary when something was negotiated and
    compresses the body for gzip. Content-Length is NOT touched here;
    the server recomputes it after all middleware has run.

    Args:
        response: Response to mutate.
        accept_encoding: The request's Accept-Encoding value, or None.

    Returns:
        The same response, for chaining.
    """
    encodings = negotiate_encodings(accept_encoding)
    if not encodings:
        return response

    response.headers[HeaderName.CONTENT_ENCODING] = ", ".join(
        encoding.value for encoding in encodings
    )
    response.headers[HeaderName.VARY] = HeaderName.ACCEPT_ENCODING.value
    response.body = encode_body(response.body, encodings)
    return response
