"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    socket_server.py   Listening socket + accept loop
    connection.py      Per-client socket wrapper (buffered reader/writer)

Concurrency model: the accept loop hands every connection to the HTTP
server, which starts a dedicated thread for it. There is no pool and no
cap; a thread lives exactly as long as its connection.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Accepts connections
    "Connection",       # Client socket wrapper
    "ConnectionState",  # Connection lifecycle states
]
