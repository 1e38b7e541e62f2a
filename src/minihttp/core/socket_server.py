"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket: bind, listen, accept, and hand each accepted
client to a callback. It knows nothing about HTTP.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a socket file descriptor
    2. setsockopt  SO_REUSEADDR so restarts don't hit "Address already in use"
    3. bind()      Attach it to host:port
    4. listen()    Start queueing incoming connections (backlog)
    5. accept()    Take one queued connection → new client socket
    6. close()     Release the listening socket on shutdown

=============================================================================
INTERRUPTIBLE ACCEPT
=============================================================================

accept() on a blocking socket never returns if no client connects, which
would make shutdown() useless. The listener gets a 1 second timeout
instead:

    while running:
        try:
            accept()          # At most 1 second
        except timeout:
            continue          # Re-check the running flag

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │    start(handler)                                                   │
    │        ├──► _create_socket()   SO_REUSEADDR, 1s accept timeout      │
    │        ├──► bind() / listen()                                       │
    │        ├──► _setup_signals()   SIGTERM/SIGINT (main thread only)    │
    │        └──► _accept_loop()     Blocks until shutdown()              │
    │                                                                     │
    │    shutdown()                  Clear running flag, set event        │
    │    _cleanup()                  Restore signals, close listener      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        # Created in start()
        self._socket: Optional[socket.socket] = None

        self._running = False
        self._shutdown_event = threading.Event()
        self._bound_event = threading.Event()
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        Get the server's bound address (IP, port).

        Once listening this is the real address, so binding to port 0
        reports the port the OS picked.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.settimeout(1.0)
        return sock

    def _setup_signals(self):
        """
        Setup signal handlers for graceful shutdown.

        SIGTERM (kill, docker stop) and SIGINT (Ctrl+C) both call
        shutdown(). Python only allows installing handlers from the main
        thread, so a server started from a worker thread (as the tests
        do) skips this and relies on shutdown() being called directly.
        """
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not in main thread, skipping signal handlers")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Start accepting connections. BLOCKS until shutdown() is called.

        Args:
            connection_handler: Called with each accepted Connection. It
                                must not block the loop for long; the
                                HTTP server spawns a thread and returns.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)

        self._running = True
        self._shutdown_event.clear()
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._bound_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections until shutdown.

        A failed accept() (e.g. EMFILE, ECONNABORTED) is logged and the
        loop carries on. So is a failure handing a client off (e.g. no
        thread could be started); that client's socket is closed.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._running:
                    break
                logger.error(f"Accept error: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = None
            try:
                conn = Connection(
                    socket=client_socket,
                    address=client_address,
                    timeout=self.config.timeout,
                )
                connection_handler(conn)
            except Exception:
                # e.g. "can't start new thread": drop this client, keep accepting
                logger.exception(
                    f"Failed to hand off connection from {client_address[0]}:{client_address[1]}"
                )
                if conn is not None:
                    conn.close()
                else:
                    client_socket.close()

    def shutdown(self):
        """
        Initiate graceful shutdown.

        Safe to call from a signal handler, another thread, or more than
        once. The accept loop exits within one accept timeout.
        """
        logger.info("Shutting down socket server...")
        self._running = False
        self._shutdown_event.set()

    def _cleanup(self):
        """Clean up resources on shutdown."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None

        self._bound_event.clear()
        logger.info("Socket server stopped")

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the listening socket is bound.

        Returns:
            True once listening, False if timeout.
        """
        return self._bound_event.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the server to shut down.

        Returns:
            True if shutdown completed, False if timeout.
        """
        return self._shutdown_event.wait(timeout)
