"""
=============================================================================
MINIHTTP - A Minimal Thread-per-Connection HTTP/1.1 Server
=============================================================================

A small HTTP/1.1 server on raw sockets with a fixed set of routes:

    GET  /                   200, empty body
    ANY  /echo/<s>           200, text/plain body <s> (gzip if accepted)
    GET  /files/<name>       200 with the file's bytes, or 404
    POST /files/<name>       201 after writing the body to <name>
    ANY  /user-agent         200, text/plain body = User-Agent header
    *                        404

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttp)
    ├── server.py            # HTTPServer: wires everything together
    ├── config.py            # ServerConfig dataclass
    ├── exceptions.py        # Error hierarchy
    ├── core/                # Sockets and connections
    ├── http/                # Parser, serializer, headers, routing, encoding
    ├── middleware/          # Access logging, content encoding
    └── handlers/            # Route handlers and the file store

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(directory="/tmp/data"))
    server.run()

=============================================================================
"""

__version__ = "0.1.0"

from .config import ServerConfig
from .server import HTTPServer
from .exceptions import HTTPServerError

__all__ = [
    "HTTPServer",
    "HTTPServerError",
    "ServerConfig",
    "__version__",
]
