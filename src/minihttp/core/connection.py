"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with buffered file objects and a
close sequence that doesn't leak descriptors.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

TCP only guarantees that bytes arrive IN ORDER and INTACT. A request
sent in one write may show up across several recv() calls:

    First recv():  "GET /echo/a"
    Second recv(): "bc HTTP/1.1\r\nHost: ..."

Rather than buffering by hand we let socket.makefile("rb") do it. The
parser then reads line by line (readline) for the head and an exact
number of bytes (read(n)) for the body:

    ┌─────────────────────────────────────────────────────────────────┐
    │   socket ──► BufferedReader ──► RequestParser.parse(reader)     │
    │                                                                 │
    │   HTTPResponse.write_to(writer) ──► BufferedWriter ──► socket   │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► PROCESSING ──────► WRITING
     │             │                                  │
     │             ▼                                  │
     └──────────► CLOSING ◄───────────────────────────┘
                    │
                    ▼
                  CLOSED

One request per connection: after WRITING the connection always closes.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Tuple
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and cleanup."""
    NEW = "new"                # Just accepted, nothing read yet
    READING = "reading"        # Parsing the request
    PROCESSING = "processing"  # Handler is executing
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
        timeout: Socket timeout in seconds. None blocks indefinitely.
        reader: Buffered binary reader over the socket.
        writer: Buffered binary writer over the socket.
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    reader: BinaryIO = field(init=False, repr=False)
    writer: BinaryIO = field(init=False, repr=False)

    def __post_init__(self):
        # Accepted sockets inherit the listener's accept() timeout on some
        # platforms; reset to the configured value.
        self.socket.settimeout(self.timeout)

        self.reader = self.socket.makefile("rb")
        self.writer = self.socket.makefile("wb")

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def client_port(self) -> int:
        """Get the client port."""
        return self.address[1]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    def close(self):
        """
        Close the connection.

        1. Close the file objects (flushes the writer)
        2. shutdown(SHUT_WR): send FIN so the client sees end-of-stream
        3. Drain whatever the client still has in flight
        4. close(): release the file descriptor

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        for stream in (self.writer, self.reader):
            try:
                stream.close()
            except OSError:
                pass  # Peer already gone, nothing left to flush

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # socket.timeout is an OSError too

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        """
        Allows using Connection with 'with' for automatic cleanup:

            with conn:
                request = parser.parse(conn.reader, conn.address)
                response.write_to(conn.writer)
            # Connection closed here, even on error
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
