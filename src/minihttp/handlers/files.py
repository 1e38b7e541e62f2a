"""
=============================================================================
FILE HANDLER
=============================================================================

Reads and writes files under the serving directory:

    GET  /files/<name>   → 200 + file bytes (application/octet-stream)
                           404 if the file does not exist
    POST /files/<name>   → 201, request body written verbatim
                           500 + error text if the write fails
    *    /files/<name>   → 405 (answered by the router)

=============================================================================
THE FILE STORE
=============================================================================

The handler never touches the filesystem directly. It talks to a
FileStore, which is just two operations keyed by a relative name:

    ┌──────────────┐   read(name)          ┌────────────────────────┐
    │ FileHandler  │ ────────────────────► │ DirectoryFileStore     │
    │              │   write(name, data)   │   root = --directory   │
    └──────────────┘ ────────────────────► └────────────────────────┘

Swap in another FileStore (an in-memory dict, say) for tests or other
backends.

NOTE: names are joined onto the root as-is. DirectoryFileStore does not
reject "../" or absolute names, so a client can read or write outside
the serving directory. Run it only against trusted clients.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Protocol

from ..exceptions import HandlerError
from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, ResponseBuilder, HTTPStatus,
    created, internal_error, not_found,
)


logger = logging.getLogger(__name__)


class FileStore(Protocol):
    """Byte store keyed by relative file name."""

    def read(self, name: str) -> bytes:
        """Return the stored bytes. Raises FileNotFoundError if absent."""
        ...

    def write(self, name: str, data: bytes) -> None:
        """Store bytes under name, replacing any previous content."""
        ...


class DirectoryFileStore:
    """
    FileStore backed by a directory on disk.

    Reads and writes are synchronous and block the calling connection's
    thread only.
    """

    def __init__(self, root: str = "./"):
        self.root = Path(root)

    def _path(self, name: str) -> Path:
        return self.root / name

    def read(self, name: str) -> bytes:
        path = self._path(name)
        logger.debug(f"Reading file: {path}")
        return path.read_bytes()

    def write(self, name: str, data: bytes) -> None:
        path = self._path(name)
        logger.debug(f"Writing {len(data)} bytes to {path}")
        path.write_bytes(data)


class FileHandler:
    """
    Handler for the /files/<name> routes.

    Usage:
        files = FileHandler(DirectoryFileStore("/tmp/data"))
        router.get("/files/:name", prefix=True)(files.read)
        router.post("/files/:name", prefix=True)(files.write)
    """

    def __init__(self, store: FileStore):
        self.store = store

    def read(self, request: HTTPRequest) -> HTTPResponse:
        """
        Serve a file's bytes.

        Missing files (and names that point at directories) are 404.
        Other read failures are turned into a 500 carrying the error text.
        """
        name = request.path_params["name"]
        try:
            data = self._load(name)
        except FileNotFoundError:
            logger.debug(f"File not found: {name!r}")
            return not_found(version=request.version)
        except HandlerError as e:
            logger.error(f"Failed to read {name!r}: {e}")
            return internal_error(str(e), version=request.version)

        return (ResponseBuilder(request.version)
            .status(HTTPStatus.OK)
            .octet_stream(data)
            .build())

    def write(self, request: HTTPRequest) -> HTTPResponse:
        """Store the request body under the file name; 201 on success."""
        name = request.path_params["name"]
        try:
            self._store(name, request.body)
        except HandlerError as e:
            logger.error(f"Failed to write {name!r}: {e}")
            return internal_error(str(e), version=request.version)

        logger.info(f"Stored {len(request.body)} bytes as {name!r}")
        return created(version=request.version)

    # ─────────────────────────────────────────────────────────────────────
    # STORE ACCESS
    # ─────────────────────────────────────────────────────────────────────
    # OSError from the store is wrapped in HandlerError so the handler
    # methods only deal with "not found" and "store failed".
    # ─────────────────────────────────────────────────────────────────────

    def _load(self, name: str) -> bytes:
        try:
            return self.store.read(name)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise FileNotFoundError(name) from e
        except OSError as e:
            raise HandlerError(str(e)) from e

    def _store(self, name: str, data: bytes) -> None:
        try:
            self.store.write(name, data)
        except OSError as e:
            raise HandlerError(str(e)) from e
