"""
HTTP request methods (RFC 7231 section 4, plus PATCH from RFC 5789).
"""

from enum import Enum
from typing import Optional


class Method(str, Enum):
    """
    Supported HTTP methods.

    Subclasses str so members compare equal to their wire tokens:
        Method.GET == "GET"   # True
    """

    GET = "GET"            # Retrieve resource
    HEAD = "HEAD"          # GET without body
    POST = "POST"          # Create resource / submit data
    PUT = "PUT"            # Replace resource
    DELETE = "DELETE"      # Delete resource
    CONNECT = "CONNECT"    # Establish tunnel (HTTPS proxy)
    OPTIONS = "OPTIONS"    # Get allowed methods (CORS preflight)
    TRACE = "TRACE"        # Echo request (debugging)
    PATCH = "PATCH"        # Partial update

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, token: str) -> Optional["Method"]:
        """
        Look up a method by its exact wire token.

        Methods are case-sensitive per RFC 7230, so "get" is not GET.

        Returns:
            The Method, or None if the token is not a supported method.
        """
        try:
            return cls(token)
        except ValueError:
            return None
