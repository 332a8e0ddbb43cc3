"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

This module owns the listening socket: it binds, listens, and hands each
accepted connection to a callback, one at a time.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a TCP socket
    2. bind()      Associate it with 0.0.0.0:PORT (PORT 0 = OS picks)
    3. listen()    Start queueing incoming connections
    4. accept()    Wait for a client; returns a NEW socket for it
    5. close()     Release the listening socket on shutdown

=============================================================================
STRICTLY SEQUENTIAL
=============================================================================

The callback runs on the accepting thread and must return before the
next accept() happens:

    accept ──► handle(conn) ──► close ──► accept ──► handle(conn) ──► ...

There is no thread pool and no request interleaving, so nothing here
needs a lock. A slow client delays everyone queued behind it.

=============================================================================
SHUTDOWN
=============================================================================

SIGINT (Ctrl+C) and SIGTERM only clear a running flag. The accept loop
wakes up at least once per second (accept timeout), sees the flag, and
leaves; the listening socket is closed exactly once, in _cleanup().

    signal ──► shutdown() ──► _running = False
                                   │
    accept loop ◄──────────────────┘ (checked every second)
        │
        └──► _cleanup() ──► restore handlers, close socket

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

# How often the accept loop checks whether it should stop
ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    Manages the listening socket and connection acceptance.
    Used by FileServer, which supplies the per-connection callback.

    Usage:
        def handle_connection(conn: Connection):
            with conn:
                ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        """
        Initialize the socket server.

        Args:
            config: Server configuration (host, port, backlog, timeout).

        Note: This does NOT create the socket; start() does.
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._bound_address: Optional[Tuple[str, int]] = None

        # Server state
        self._running = False

        # Set once listen() succeeded; tests wait on it to learn the port
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        Get the server's bound address (IP, port).

        Before start() this is the configured address; afterwards the port
        is the real one, which matters when the configured port is 0.
        """
        return self._bound_address or (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """
        Create and configure the server socket.

        Returns:
            Configured socket ready for binding.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # SO_REUSEADDR: restart immediately instead of waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # accept() returns at least once per poll interval so the running
        # flag gets checked
        sock.settimeout(ACCEPT_POLL_INTERVAL)

        return sock

    def _setup_signals(self):
        """
        Setup signal handlers for graceful shutdown.

        SIGINT (2):   Ctrl+C in the terminal
        SIGTERM (15): kill <pid>, systemd stop, docker stop

        Python only lets the main thread install handlers; when the server
        is embedded in another thread (tests) the caller stops it through
        shutdown() instead.
        """
        if not self.config.install_signal_handlers:
            return
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, signal handlers not installed")
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
        Bind, listen, and serve connections until shutdown() is called.

        This method BLOCKS.

        Args:
            connection_handler: Called with each accepted Connection. It
                                owns the connection and must close it.

        Raises:
            OSError: bind(), listen() or accept() failed. The listening
                     socket is closed before the error propagates.
        """
        self._socket = self._create_socket()

        try:
            try:
                self._socket.bind((self.config.host, self.config.port))
            except OSError as e:
                logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
                raise

            self._socket.listen(self.config.backlog)
            self._bound_address = self._socket.getsockname()[:2]

            self._running = True
            self._setup_signals()

            logger.info(f"Listening on port {self.address[1]}")
            self._ready_event.set()

            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Main loop: accept one connection, handle it to completion, repeat.

        Raises:
            OSError: accept() failed for a reason other than shutdown.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: lets us re-check self._running
                continue
            except OSError as e:
                if not self._running:
                    break  # Socket closed underneath us during shutdown
                logger.error(f"Accept error: {e}")
                raise

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                timeout=self.config.timeout,
            )

            # Runs to completion before the next accept()
            connection_handler(conn)

    def shutdown(self):
        """
        Ask the accept loop to stop.

        Safe to call from a signal handler or another thread, and more
        than once. The connection being handled (if any) is finished
        first; the loop exits at its next check.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Restore signal handlers and close the listening socket."""
        self._running = False
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None

        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is listening.

        Returns:
            True once listening, False on timeout.
        """
        return self._ready_event.wait(timeout)
