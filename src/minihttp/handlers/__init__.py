"""
=============================================================================
REQUEST HANDLERS
=============================================================================

Handlers are plain functions (or bound methods) that take an HTTPRequest
and return an HTTPResponse:

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Route              Method   Handler                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │   /echo/:value       any      basic.echo                            │
    │   /files/:name       GET      FileHandler.read                      │
    │   /files/:name       POST     FileHandler.write                     │
    │   /user-agent        any      basic.user_agent                      │
    │   /                  any      basic.index                           │
    └─────────────────────────────────────────────────────────────────────┘

Anything else falls through to the router's 404 / 405 answers.

=============================================================================
USAGE
=============================================================================

    from minihttp.http import Router
    from minihttp.handlers import DirectoryFileStore, register_routes

    router = Router()
    register_routes(router, DirectoryFileStore("/tmp/data"))

=============================================================================
"""

from ..http.methods import Method
from ..http.router import Router
from .basic import echo, index, user_agent
from .files import DirectoryFileStore, FileHandler, FileStore


def register_routes(router: Router, store: FileStore) -> Router:
    """
    Register the built-in routes on a router, in match order.

    Args:
        router: Router to populate.
        store: File store backing the /files routes.

    Returns:
        The same router.
    """
    files = FileHandler(store)

    router.add_route("/echo/:value", echo, prefix=True)
    router.add_route("/files/:name", files.read, method=Method.GET, prefix=True)
    router.add_route("/files/:name", files.write, method=Method.POST, prefix=True)
    router.add_route("/user-agent", user_agent)
    router.add_route("/", index)
    return router


__all__ = [
    "DirectoryFileStore",
    "FileHandler",
    "FileStore",
    "echo",
    "index",
    "register_routes",
    "user_agent",
]
