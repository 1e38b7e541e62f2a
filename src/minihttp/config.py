"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables live in one dataclass so the rest of the code never reads
the environment or argv directly:

    ┌──────────────┐     ┌──────────────┐     ┌──────────────────────┐
    │  defaults    │ ──► │  from_env()  │ ──► │  CLI (--directory)   │
    └──────────────┘     └──────────────┘     └──────────────────────┘
         lowest                                       highest

Configuration is validated once at startup (validate()), so a bad port
or log level fails immediately instead of at the first request.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    NETWORK SETTINGS
    - host, port, backlog, timeout

    ROUTES
    - directory, encoded_prefixes

    LOGGING
    - log_level, log_format
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """The IP address to bind to. "0.0.0.0" listens on all interfaces."""

    port: int = 4221
    """The port to listen on. 0 lets the OS pick a free one."""

    backlog: int = 128
    """Maximum number of queued connections before new ones are refused."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = block forever. A client that opens a connection and sends
    nothing holds its thread until it disconnects.
    """

    # ─────────────────────────────────────────────────────────────────────
    # ROUTES
    # ─────────────────────────────────────────────────────────────────────

    directory: str = "./"
    """Root directory for GET/POST /files/<name>."""

    encoded_prefixes: Tuple[str, ...] = ("/echo/",)
    """Path prefixes whose responses go through Accept-Encoding negotiation."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (Apache-like) or 'json'."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        HTTP_HOST        Server host (default: 127.0.0.1)
        HTTP_PORT        Server port (default: 4221)
        HTTP_TIMEOUT     Socket timeout in seconds (default: none)
        HTTP_DIRECTORY   Files root (default: ./)
        HTTP_LOG_LEVEL   Logging level (default: INFO)
        HTTP_LOG_FORMAT  Access log format (default: text)

        Usage:
            HTTP_PORT=8080 HTTP_LOG_LEVEL=DEBUG python -m minihttp
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            timeout=float(timeout) if timeout else None,
            directory=os.getenv("HTTP_DIRECTORY", "./"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text").lower(),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log_format: {self.log_format}. Must be 'text' or 'json'.")
