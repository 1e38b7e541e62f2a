"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌──────────────┐   Connection   ┌─────────────────────────────────────┐
    │ SocketServer │ ─────────────► │ _handle_connection                  │
    │ accept loop  │                │   └──► new thread per connection    │
    └──────────────┘                └──────────────────┬──────────────────┘
                                                       │
                                                       ▼
                                    ┌─────────────────────────────────────┐
                                    │ _process_connection (worker thread) │
                                    │   1. RequestParser.parse(reader)    │
                                    │   2. middleware → router → handler  │
                                    │   3. set Content-Length             │
                                    │   4. response.write_to(writer)      │
                                    │   5. close                          │
                                    └─────────────────────────────────────┘

One request per connection. Anything that goes wrong inside a worker is
logged and closes that connection only; the accept loop never sees it.

=============================================================================
"""

import logging
import threading
from typing import Callable, Optional, Tuple

from .config import ServerConfig
from .core import Connection, ConnectionState, SocketServer
from .exceptions import HTTPParseError, MissingHeaderError, TransportError
from .handlers import DirectoryFileStore, FileStore, register_routes
from .http import HTTPRequest, HTTPResponse, RequestParser, Router
from .middleware import ContentEncodingMiddleware, LoggingMiddleware, MiddlewarePipeline


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Thread-per-connection HTTP/1.1 server.

        server = HTTPServer(ServerConfig(directory="/tmp/data"))
        server.run()   # Blocks until Ctrl+C / SIGTERM / shutdown()

    Built-in routes (see handlers/): /echo/<s>, /files/<name> (GET, POST),
    /user-agent and /.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        store: Optional[FileStore] = None,
    ):
        """
        Args:
            config: Server configuration. Defaults if not provided.
            store: Backing store for /files. Defaults to a
                   DirectoryFileStore rooted at config.directory.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()

        self._router = Router()
        register_routes(self._router, store or DirectoryFileStore(self.config.directory))

        # Logging outermost so it sees the encoded body
        self._middleware = MiddlewarePipeline()
        self._middleware.add(LoggingMiddleware(log_format=self.config.log_format))
        self._middleware.add(ContentEncodingMiddleware(self.config.encoded_prefixes))

        self._handler: Callable[[HTTPRequest], HTTPResponse] = self._middleware.wrap(
            self._router.handle
        )

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the listening address cannot be bound.
        """
        self._setup_logging()
        logger.info(f"Serving files from {self.config.directory}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight workers finish on their own."""
        self._socket_server.shutdown()

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is bound (or timeout)."""
        return self._socket_server.wait_until_listening(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("minihttp").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Hand a connection to its own thread (called by the accept loop).

        Threads are daemonic so a blocked reader never keeps the process
        alive after shutdown.
        """
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on the connection, then close it.

        Parse and transport failures drop the connection without a
        response, as does a missing User-Agent on /user-agent.
        """
        with conn:
            try:
                conn.state = ConnectionState.READING
                request = self._parser.parse(conn.reader, conn.address)

                conn.state = ConnectionState.PROCESSING
                response = self._handler(request)
                response.set_content_length()

                conn.state = ConnectionState.WRITING
                response.write_to(conn.writer)

            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
            except (TransportError, OSError) as e:
                logger.warning(f"[{conn.id}] Connection error: {e}")
            except MissingHeaderError as e:
                logger.error(f"[{conn.id}] {e}")
            except Exception:
                logger.exception(f"[{conn.id}] Unhandled error while serving request")
