"""
Middleware: behaviour wrapped around every request.

    base.py          Middleware ABC + MiddlewarePipeline
    logging.py       Access log (text or JSON)
    compression.py   Accept-Encoding negotiation on selected routes
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog
from .compression import ContentEncodingMiddleware

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
    "ContentEncodingMiddleware",
]
