"""
=============================================================================
URL ROUTER
=============================================================================

Maps a request's method and path to a handler function.

=============================================================================
ROUTE PATTERNS
=============================================================================

    Pattern           Matches                 path_params
    ───────────────   ─────────────────────   ─────────────────────
    /                 /                       {}
    /user-agent       /user-agent             {}
    /echo/:value      /echo/abc               {"value": "abc"}
                      /echo/abc/def           {"value": "abc"}    (prefix)
                      /echo/                  {"value": ""}
    /files/:name      /files/report.bin       {"name": "report.bin"}

Routes registered with prefix=True match any path that STARTS with the
pattern; anything after the last captured segment is ignored. Exact
routes must match the whole path.

=============================================================================
PATTERN COMPILATION
=============================================================================

Routes are compiled to regex patterns once, at registration:

    Pattern:  /files/:name       (prefix=True)
    Regex:    ^/files/(?P<name>[^/]*)(?:/.*)?$

    Pattern:  /user-agent        (prefix=False)
    Regex:    ^/user\\-agent$

The path is matched exactly as it arrived: no trailing-slash stripping,
no percent-decoding. A query string is part of the last segment.

=============================================================================
DISPATCH ORDER
=============================================================================

First-registered, first-matched. When the path matches some route but
not for this method, the router answers 405 with an Allow header. When
nothing matches the path at all, it answers 404.

=============================================================================
"""

import dataclasses
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .methods import Method
from .request import HTTPRequest
from .response import HTTPResponse, method_not_allowed, not_found


logger = logging.getLogger(__name__)

Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered route: a path pattern bound to a handler.

        Route(
            path="/files/:name",    # URL pattern
            method=Method.GET,      # Method filter (None = any method)
            handler=read_file,      # Handler function
            prefix=True,            # Match as a prefix
        )
    """

    path: str
    method: Optional[Method]
    handler: Handler
    prefix: bool = False
    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)


@dataclass
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    params: Dict[str, str]


class Router:
    """
    HTTP request router.

    Usage:
        router = Router()

        @router.route("/echo/:value", prefix=True)
        def echo(request):
            return ok(request.path_params["value"])

        @router.get("/files/:name", prefix=True)
        def read_file(request):
            ...

        response = router.handle(request)
    """

    def __init__(self):
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        """Registered routes in match order."""
        return list(self._routes)

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[Method] = None,
        prefix: bool = False,
    ) -> Route:
        """
        Register a route.

        Args:
            path: URL pattern (":name" captures one segment)
            handler: Function taking an HTTPRequest, returning an HTTPResponse
            method: Method filter, or None to accept any method
            prefix: Match paths that start with the pattern

        Returns:
            The registered Route
        """
        pattern, param_names = self._compile_pattern(path, prefix)
        route = Route(
            path=path,
            method=Method(method) if method else None,
            handler=handler,
            prefix=prefix,
            _pattern=pattern,
            _param_names=param_names,
        )
        self._routes.append(route)
        logger.debug(f"Registered route {route.method or '*'} {path}")
        return route

    def _compile_pattern(self, path: str, prefix: bool) -> tuple[re.Pattern, List[str]]:
        """
        Compile a path pattern into a regex.

        Input:  "/echo/:value", prefix=True
        Split:  ["", "echo", ":value"]
        Build:  ^ + /echo + /(?P<value>[^/]*) + (?:/.*)? + $

        A bare "/" compiles to ^/$. Param segments may be empty, so
        "/echo/" still matches with value "".
        """
        param_names: List[str] = []
        regex_parts = ["^"]

        for segment in path.split("/")[1:]:
            regex_parts.append("/")
            if segment.startswith(":"):
                param_name = segment[1:]
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>[^/]*)")
            else:
                regex_parts.append(re.escape(segment))

        if prefix:
            regex_parts.append("(?:/.*)?")
        regex_parts.append("$")
        return re.compile("".join(regex_parts), re.DOTALL), param_names

    def match(self, method: Method, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        Returns:
            RouteMatch if found, None otherwise
        """
        for route in self._routes:
            if route.method and route.method != method:
                continue
            found = route._pattern.match(path)
            if found:
                return RouteMatch(route=route, params=found.groupdict())
        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """
        Get the methods some route accepts for this path.

        Used to fill the Allow header of a 405 response. Empty when no
        route matches the path at all.
        """
        methods = set()
        for route in self._routes:
            if route._pattern.match(path):
                if route.method is None:
                    return [m.value for m in Method]
                methods.add(route.method.value)
        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        1. Find matching route
        2. Attach path parameters (on a copy; requests are frozen)
        3. Call handler
        4. Otherwise answer 405 or 404 with an empty body
        """
        found = self.match(request.method, request.path)
        if found:
            request = dataclasses.replace(request, path_params=found.params)
            return found.route.handler(request)

        allowed = self.get_allowed_methods(request.path)
        if allowed:
            return method_not_allowed(allowed, version=request.version)
        return not_found(version=request.version)

    # =========================================================================
    # DECORATORS
    # =========================================================================

    def route(self, path: str, method: Optional[Method] = None, prefix: bool = False):
        """Decorator registering a route for one method, or any if None."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method=method, prefix=prefix)
            return handler
        return decorator

    def get(self, path: str, prefix: bool = False):
        """Register a GET route."""
        return self.route(path, Method.GET, prefix)

    def post(self, path: str, prefix: bool = False):
        """Register a POST route."""
        return self.route(path, Method.POST, prefix)
