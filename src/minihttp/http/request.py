"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses an HTTP/1.1 request from a byte stream into an HTTPRequest.
Implements the subset of RFC 7230 the server needs: request line, header
block, and a Content-Length delimited body.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n                          │ │
    │  │    ─┬── ───────┬──────── ───┬────                              │ │
    │  │   Method      Path       Version                                │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Host: localhost:4221\r\n                                    │ │
    │  │    User-Agent: curl/8.4.0\r\n                                  │ │
    │  │    Content-Length: 5\r\n                                       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (exactly Content-Length bytes) ──────────────────────────┐ │
    │  │    hello                                                       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
READING FROM A STREAM
=============================================================================

The parser works on a buffered binary stream (socket.makefile("rb") or
io.BytesIO) instead of a pre-read buffer:

    readline()    →  request line, then one header per call
    read(n)       →  body, blocks until n bytes or EOF

This lets the OS-level buffering handle TCP's arbitrary chunking for us.
A read that hits EOF early is a transport failure, not a parse failure:
the bytes we got were fine, there just weren't enough of them.

=============================================================================
LENIENCY
=============================================================================

    - Header lines without a colon are skipped, not fatal
    - Repeated headers overwrite (last one wins)
    - The path is kept exactly as sent (no percent-decoding, no ".."
      handling, query string included)

=============================================================================
"""

import io
import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Optional, Tuple

from ..exceptions import (
    ConnectionClosedError,
    IncompleteBodyError,
    InvalidContentLength,
    InvalidMethod,
    MalformedRequestLine,
)
from .headers import HeaderKey, HeaderName, header_key, parse_header_line
from .methods import Method


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    =========================================================================
    REQUEST LIFECYCLE
    =========================================================================

        Socket stream          HTTPRequest                  Handler
        (makefile "rb") ─parse─►  frozen      ──route──►    function
                                 dataclass
                                     │
                                     └── router adds path_params via
                                         dataclasses.replace()

    Frozen because a request is built once per connection and never
    changes afterwards; the router attaches path parameters by making a
    copy.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         Method enum member
        path:           Request target exactly as sent ("/echo/abc?x=1")
        version:        Protocol version string ("HTTP/1.1")
        headers:        HeaderKey → value, one value per name
        body:           Raw body bytes (Content-Length of them)
        path_params:    Values captured by the router ({"name": "a.txt"})
        client_address: (ip, port) of the peer, for logging

    =========================================================================
    """

    method: Method
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[HeaderKey, str] = field(default_factory=dict)
    body: bytes = b""
    path_params: Dict[str, str] = field(default_factory=dict)
    client_address: Tuple[str, int] = ("", 0)

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_header(self, name, default: Optional[str] = None) -> Optional[str]:
        """
        Get a header value.

        Args:
            name: A HeaderKey, or a plain string which is mapped through
                  header_key() (so "user-agent" finds User-Agent).
            default: Value to return if the header is absent.
        """
        if isinstance(name, str):
            name = header_key(name)
        return self.headers.get(name, default)

    @property
    def user_agent(self) -> Optional[str]:
        """The User-Agent header value, or None if absent."""
        return self.headers.get(HeaderName.USER_AGENT)

    @property
    def accept_encoding(self) -> Optional[str]:
        """The Accept-Encoding header value, or None if absent."""
        return self.headers.get(HeaderName.ACCEPT_ENCODING)

    @property
    def content_length(self) -> int:
        """Length of the body actually read."""
        return len(self.body)


class RequestParser:
    """
    Parses HTTP requests from a buffered binary stream.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        stream
          │
          ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. readline() → request line                                     │
        │     │  EOF?             → ConnectionClosedError                   │
        │     │  < 3 tokens?      → MalformedRequestLine (extras ignored)   │
        │     │  unknown method?  → InvalidMethod                           │
        │     ▼                                                             │
        │  2. readline() until blank line → headers                         │
        │     │  EOF?             → ConnectionClosedError                   │
        │     │  no colon?        → line skipped                            │
        │     ▼                                                             │
        │  3. Content-Length? → read(n) → body                              │
        │     │  not a number?    → InvalidContentLength                    │
        │     │  short read?      → IncompleteBodyError                     │
        │     ▼                                                             │
        │  4. HTTPRequest(...)                                              │
        └───────────────────────────────────────────────────────────────────┘

    ==========================================================================
    """

    # Header bytes are decoded leniently; a stray byte should not kill
    # the request.
    ENCODING = "utf-8"

    def parse(
        self,
        stream: BinaryIO,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Read one HTTP request from the stream.

        Args:
            stream: Buffered binary stream positioned at a request start.
            client_address: Peer (ip, port), stored on the request.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: Request line or Content-Length is malformed.
            TransportError: Stream ended before the request was complete.
        """
        # =====================================================================
        # STEP 1: Request line
        # =====================================================================
        line = self._read_line(stream)
        if line is None:
            raise ConnectionClosedError("Connection closed before request line")
        method, path, version = self._parse_request_line(line)

        # =====================================================================
        # STEP 2: Headers, up to the blank separator line
        # =====================================================================
        headers = self._parse_headers(stream)

        # =====================================================================
        # STEP 3: Body
        # =====================================================================
        body = self._read_body(stream, headers)

        logger.debug(f"Parsed {method.value} {path} ({len(body)} body bytes)")

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _read_line(self, stream: BinaryIO) -> Optional[str]:
        """
        Read one line and strip its terminator.

        Returns:
            The decoded line ("" for a blank line), or None at EOF.
        """
        raw = stream.readline()
        if not raw:
            return None
        return raw.rstrip(b"\r\n").decode(self.ENCODING, errors="replace")

    def _parse_request_line(self, line: str) -> Tuple[Method, str, str]:
        """
        Split "METHOD SP PATH SP VERSION" into its three parts.

        Whitespace of any width separates tokens. Tokens after the version
        are ignored. The path is returned verbatim, including any query
        string or fragment.

        Raises:
            MalformedRequestLine: Fewer than three tokens.
            InvalidMethod: First token is not a supported method.
        """
        parts = line.split()
        if len(parts) < 3:
            raise MalformedRequestLine(f"Invalid request line: {line!r}")

        token, path, version = parts[:3]
        method = Method.parse(token)
        if method is None:
            raise InvalidMethod(token)

        return method, path, version

    def _parse_headers(self, stream: BinaryIO) -> Dict[HeaderKey, str]:
        """
        Read header lines until the blank line that ends the head.

        Malformed lines are skipped. A repeated header replaces the
        earlier value.

        Raises:
            ConnectionClosedError: Stream ended inside the header block.
        """
        headers: Dict[HeaderKey, str] = {}

        while True:
            line = self._read_line(stream)
            if line is None:
                raise ConnectionClosedError("Connection closed inside headers")
            if line == "":
                break

            parsed = parse_header_line(line)
            if parsed is None:
                logger.debug(f"Skipping malformed header line: {line!r}")
                continue

            key, value = parsed
            headers[key] = value

        return headers

    def _read_body(self, stream: BinaryIO, headers: Dict[HeaderKey, str]) -> bytes:
        """
        Read exactly Content-Length bytes, or nothing if the header is absent.

        Raises:
            InvalidContentLength: Header is not a non-negative integer.
            IncompleteBodyError: Stream ended before all bytes arrived.
        """
        raw_length = headers.get(HeaderName.CONTENT_LENGTH)
        if raw_length is None:
            return b""

        # Rejects "-1", "+5", "1.0", "" and non-ASCII digits like "²"
        if not (raw_length.isascii() and raw_length.isdigit()):
            raise InvalidContentLength(raw_length)
        length = int(raw_length)
        if length == 0:
            return b""

        # BufferedReader.read(n) keeps reading until n bytes or EOF
        body = stream.read(length)
        if len(body) < length:
            raise IncompleteBodyError(expected=length, received=len(body))
        return body


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """
    Parse an HTTP request held entirely in memory.

    Wraps the bytes in io.BytesIO and runs RequestParser over them.
    Handy in tests and for replaying captured requests.
    """
    return RequestParser().parse(io.BytesIO(data), client_address)
