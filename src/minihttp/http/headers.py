"""
=============================================================================
HTTP HEADER NAMES
=============================================================================

Header names are modelled as a closed set of well-known names plus an
escape hatch for everything else:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        HEADER KEY TYPES                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HeaderName.USER_AGENT          CustomHeader("X-Trace-Id")         │
    │   ─────────────────────          ──────────────────────────         │
    │   Well-known name (enum)         Anything not in the enum           │
    │   Wire form: "User-Agent"        Wire form: "X-Trace-Id" (as sent)  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Both kinds expose the wire form as `.value` and `str()`, so code that
serializes headers never needs to know which kind it holds.

Equality rules:
    HeaderName.HOST == HeaderName.HOST                        True
    CustomHeader("X-A") == CustomHeader("X-A")                True
    CustomHeader("X-A") == CustomHeader("x-a")                False
    CustomHeader("Host") == HeaderName.HOST                   False

Recognition of well-known names is case-insensitive ("user-agent" parses
to HeaderName.USER_AGENT) because RFC 7230 makes field names
case-insensitive. Unrecognized names keep their exact spelling.

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union


class HeaderName(Enum):
    """Well-known HTTP header names, valued by their canonical wire form."""

    ACCEPT = "Accept"
    ACCEPT_CHARSET = "Accept-Charset"
    ACCEPT_ENCODING = "Accept-Encoding"
    ACCEPT_LANGUAGE = "Accept-Language"
    ACCESS_CONTROL_REQUEST_METHOD = "Access-Control-Request-Method"
    ACCESS_CONTROL_REQUEST_HEADERS = "Access-Control-Request-Headers"
    ALLOW = "Allow"
    AUTHORIZATION = "Authorization"
    CACHE_CONTROL = "Cache-Control"
    CONNECTION = "Connection"
    CONTENT_DISPOSITION = "Content-Disposition"
    CONTENT_ENCODING = "Content-Encoding"
    CONTENT_LANGUAGE = "Content-Language"
    CONTENT_LENGTH = "Content-Length"
    CONTENT_TYPE = "Content-Type"
    COOKIE = "Cookie"
    DATE = "Date"
    EXPECT = "Expect"
    FORWARDED = "Forwarded"
    FROM = "From"
    HOST = "Host"
    IF_MATCH = "If-Match"
    IF_MODIFIED_SINCE = "If-Modified-Since"
    IF_NONE_MATCH = "If-None-Match"
    IF_RANGE = "If-Range"
    IF_UNMODIFIED_SINCE = "If-Unmodified-Since"
    MAX_FORWARDS = "Max-Forwards"
    ORIGIN = "Origin"
    PRAGMA = "Pragma"
    PROXY_AUTHENTICATE = "Proxy-Authenticate"
    PROXY_AUTHORIZATION = "Proxy-Authorization"
    RANGE = "Range"
    REFERER = "Referer"
    TE = "TE"
    TRAILER = "Trailer"
    TRANSFER_ENCODING = "Transfer-Encoding"
    USER_AGENT = "User-Agent"
    UPGRADE = "Upgrade"
    VARY = "Vary"
    VIA = "Via"
    WARNING = "Warning"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CustomHeader:
    """
    A header name outside the well-known set.

    Stores the name exactly as received and serializes it unchanged.
    Frozen so it can be used as a dict key alongside HeaderName members.
    """

    value: str

    def __str__(self) -> str:
        return self.value


# Either kind of header name; used as the key type of header mappings
HeaderKey = Union[HeaderName, CustomHeader]


# Lowercase wire form -> member, built once at import time
_WELL_KNOWN: Dict[str, HeaderName] = {
    member.value.lower(): member for member in HeaderName
}


def header_key(name: str) -> HeaderKey:
    """
    Map a header name string to its HeaderKey.

    Args:
        name: Header name as it appears on the wire (already trimmed).

    Returns:
        The matching HeaderName member, or a CustomHeader wrapping `name`.

    Example:
        header_key("Content-Type")   # HeaderName.CONTENT_TYPE
        header_key("X-Request-Id")   # CustomHeader("X-Request-Id")
    """
    member = _WELL_KNOWN.get(name.lower())
    if member is None:
        return CustomHeader(name)
    return member


def parse_header_line(line: str) -> Optional[Tuple[HeaderKey, str]]:
    """
    Parse one "Name: Value" header line.

    The line is split on the FIRST colon only, so values may contain
    colons ("Host: localhost:4221"). Name and value are both trimmed.

    Args:
        line: A header line without its line terminator.

    Returns:
        (key, value) tuple, or None if the line has no colon or an
        empty name. Callers skip such lines rather than failing.
    """
    name, sep, value = line.partition(":")
    name = name.strip()
    if not sep or not name:
        return None
    return header_key(name), value.strip()


def format_header_line(key: HeaderKey, value: str) -> str:
    """Serialize a header as "Name: Value" (no line terminator)."""
    return f"{key.value}: {value}"
