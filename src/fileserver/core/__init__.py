"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing under the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                               │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Creates the TCP listening socket (SO_REUSEADDR, port 0 allowed)  │
    │  • Runs the accept() loop                                           │
    │  • Stops cleanly on SIGINT / SIGTERM                                │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one Connection at a time
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                 │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Wraps the client socket: recv(), send_response(), close()        │
    │  • Tracks state and byte counts for logging                         │
    │  • Context manager: closed on every exit path                       │
    └─────────────────────────────────────────────────────────────────────┘

There is no worker pool: the handler runs on the accepting thread, so a
connection is finished and closed before the next one is accepted.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # TCP listener and accept loop
    "Connection",       # Client socket wrapper
    "ConnectionState",  # Connection lifecycle states
]
