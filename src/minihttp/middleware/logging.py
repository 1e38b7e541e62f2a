"""
=============================================================================
LOGGING MIDDLEWARE
=============================================================================

Writes one access log line per request, with timing.

=============================================================================
LOG FORMATS
=============================================================================

    TEXT (default, Apache-like):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [16/Oct/2026:10:55:36 +0000] "GET /echo/abc" 200 3 0.41ms
    │ ─────────     ──────────────────────────── ───────────────── ─── ─ ──────
    │ IP            Timestamp                    Method/Path   Status Size Duration
    └─────────────────────────────────────────────────────────────────────┘

    JSON (for log aggregators):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"method": "GET", "path": "/echo/abc", "client_ip": "127.0.0.1",    │
    │  "user_agent": "curl/8.4.0", "status_code": 200,                    │
    │  "content_length": 3, "duration_ms": 0.41, ...}                     │
    └─────────────────────────────────────────────────────────────────────┘

Lines go to the "minihttp.access" logger, so they can be routed or
silenced separately from the server's own diagnostics:

    logging.getLogger("minihttp.access").setLevel(logging.WARNING)

=============================================================================
"""

import json
import logging
import time
from dataclasses import asdict, dataclass

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """Structured access log entry for one request."""

    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Format as an Apache-style access log line."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Should be FIRST in the pipeline so it times the whole chain and logs
    the final response size.

        pipeline.add(LoggingMiddleware(log_format="json"))
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" (Apache-like) or "json".
            log_level: Level for successful requests. Error statuses
                       (4xx/5xx) are logged at WARNING or above.
        """
        self.log_format = log_format
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            # Still log failed requests, then let the server decide
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method.value} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        entry = RequestLog(
            method=request.method.value,
            path=request.path,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        level = max(self.log_level, logging.WARNING) if response.status.is_error else self.log_level
        if self.log_format == "json":
            logger.log(level, json.dumps(entry.to_dict()))
        else:
            logger.log(level, entry.to_text())

        return response
