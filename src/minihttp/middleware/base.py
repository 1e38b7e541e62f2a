"""
=============================================================================
MIDDLEWARE BASE CLASSES
=============================================================================

Middleware wraps the router to add behaviour around every request
without touching the handlers themselves (Chain of Responsibility):

        pipeline.add(LoggingMiddleware())            # First added = outermost
        pipeline.add(ContentEncodingMiddleware())    # Closest to the router

            ┌─────────────────────────────────────────────────────────┐
            │  LoggingMiddleware                                      │
            │  ┌───────────────────────────────────────────────────┐  │
            │  │  ContentEncodingMiddleware                        │  │
            │  │  ┌─────────────────────────────────────────────┐  │  │
            │  │  │           router.handle                     │  │  │
            │  │  └─────────────────────────────────────────────┘  │  │
            │  └───────────────────────────────────────────────────┘  │
            └─────────────────────────────────────────────────────────┘

Requests flow inward, responses flow outward, so the access log sees
the final (possibly compressed) body.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)

NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

    Every middleware implements __call__(request, next) and must call
    next(request) to continue the chain (unless it short-circuits):

        class MyMiddleware(Middleware):
            def __call__(self, request, next):
                response = next(request)
                response.set_header("X-Processed-By", "MyMiddleware")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        pass

    @property
    def name(self) -> str:
        """Get the middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware together around a final handler.

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())
        handler = pipeline.wrap(router.handle)
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """
        Add middleware to the pipeline (first added = outermost).

        Returns:
            Self for method chaining
        """
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap a handler with all middleware in the pipeline.

        Given [MW1, MW2] and handler, builds MW1 → MW2 → handler. We wrap
        in REVERSE order so the first-added middleware ends up outermost.
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler
    ) -> NextHandler:
        # Closure binding this middleware to the next link in the chain
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)

        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
