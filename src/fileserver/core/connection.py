"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

This module wraps one accepted client socket with the small API the
request pipeline needs: read some bytes, write some bytes, close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A request sent as one write
may arrive in several reads, and the header terminator may straddle two
of them:

    Client sends:
        GET /cat.html HTTP/1.1\r\nHost: x\r\n\r\n

    Server might receive:
        recv() → "GET /cat.html HTTP/1.1\r\nHost: x\r"
        recv() → "\n\r\n"

Finding where the headers end is the job of RequestReader
(fileserver.http.reader); the Connection only moves bytes.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

Every response carries "Connection: close" and the socket is closed
right after it, so a Connection lives for exactly one request:

    NEW ──────► READING ──────► WRITING ──────► CLOSING ──────► CLOSED
     │             │                               ▲
     └─────────────┴───────────────────────────────┘
            (peer gone / request rejected early)

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)

# Upper bounds on the drain in close(): a peer that keeps sending cannot
# hold the (single) serving thread past either of them
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Used for logging and to make close() idempotent.
    """
    NEW = "new"              # Just accepted, haven't read anything yet
    READING = "reading"      # Accumulating request bytes
    WRITING = "writing"      # Sending response data
    CLOSING = "closing"      # FIN sent, draining the peer
    CLOSED = "closed"        # Connection closed, socket released


@dataclass
class Connection:
    """
    One accepted client socket, used for a single request.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used to correlate log lines.
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
        bytes_received: Total bytes read from the client.
        bytes_sent: Total bytes written to the client.
    """

    # Required parameters
    socket: socket.socket
    address: tuple[str, int]

    # Filled in at accept time
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    bytes_received: int = 0
    bytes_sent: int = 0

    # None = block forever (the server has no per-request timeout)
    timeout: Optional[float] = None

    def __post_init__(self):
        """Configure the client socket after initialization."""
        # Accepted sockets may inherit the listener's accept timeout
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Peer IP, as used in the access log."""
        return self.address[0]

    @property
    def client_port(self) -> int:
        """Peer port."""
        return self.address[1]

    # =========================================================================
    # READING
    # =========================================================================

    def recv(self, size: int) -> bytes:
        """
        Receive up to `size` bytes from the client.

        Returns:
            Received bytes, or empty bytes if the client closed or reset
            the connection.

        Raises:
            OSError: Any other socket failure (including timeouts).
        """
        self.state = ConnectionState.READING
        try:
            data = self.socket.recv(size)
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            return b""
        self.bytes_received += len(data)
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send bytes to the client.

        Uses sendall() so a short write is never mistaken for success.

        Returns:
            True if send succeeded, False if the connection is lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
        except OSError as e:
            # Client disconnected
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

        self.bytes_sent += len(data)
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Safe to call more than once.

        1. shutdown(SHUT_WR): tell the client we're done sending (FIN)
        2. Drain what the client still sends, for at most DRAIN_TIMEOUT
           seconds and DRAIN_LIMIT bytes
        3. close(): release the file descriptor

        Draining keeps the kernel from answering unread data with an RST,
        which could make the client lose the tail of our response.
        """
        if self.state == ConnectionState.CLOSED:
            return  # Already closed

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0
        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                data = self.socket.recv(1024)
                if not data:
                    break
                drained += len(data)  # Discarded
        except OSError:
            pass  # socket.timeout is an OSError too

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Connection closed "
            f"({self.bytes_received} bytes in, {self.bytes_sent} bytes out)"
        )

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """
        Context manager entry.

            with conn:
                raw = reader.read(conn)
                conn.send_response(response)
            # Connection closed here, whatever happened inside
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Close on the way out, error or not."""
        self.close()
        return False  # Don't suppress exceptions
