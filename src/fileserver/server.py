"""
=============================================================================
FILE SERVER
=============================================================================

The orchestrator: one FileServer object owns the configuration, the
listening socket and the request pipeline, and runs connections through
it one at a time.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                            FileServer                               │
    │  config: ServerConfig (canonical root, port, limits, interpreter)   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  SocketServer ──accept──► Connection                                │
    │                               │                                     │
    │                               ▼                                     │
    │                        RequestReader        bytes up to CRLF CRLF   │
    │                               │                                     │
    │                               ▼                                     │
    │                      RequestLineParser      method, target, version │
    │                               │                                     │
    │                               ▼                                     │
    │                        TargetResolver       root + path, query, ext │
    │                               │                                     │
    │                               ▼                                     │
    │                      ContentDispatcher                              │
    │                        │            │                               │
    │                        ▼            ▼                               │
    │              StaticResponder   DynamicResponder                     │
    │                        │            │                               │
    │                        └─────┬──────┘                               │
    │                              ▼                                      │
    │                       ResponseWriter ──► close                      │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FAILURES
=============================================================================

    Exception raised               What the client gets
    ─────────────────────────────  ───────────────────────────────────────
    HTTPError (any stage)          the error page for its status_code
    TransportError                 nothing, the connection is dropped
    anything else                  500, with the traceback in the log

Whatever happens, the connection is closed before the next accept().
Start-up failures (bad root, port in use) propagate out of run().

=============================================================================
"""

import logging
import time
from typing import Optional, Tuple

from .access_log import AccessLogger
from .config import ServerConfig, canonicalize_root
from .core import Connection, SocketServer
from .handlers import ContentDispatcher
from .http import (
    HTTPError,
    HTTPResponse,
    HTTPStatus,
    RequestLine,
    RequestLineParser,
    RequestReader,
    ResponseWriter,
    TargetResolver,
    TransportError,
    error_response,
)


logger = logging.getLogger(__name__)


class FileServer:
    """
    Sequential HTTP/1.1 file server.

    Usage:
        server = FileServer(ServerConfig(root="/var/www", port=8080))
        server.run()        # Blocks until SIGINT/SIGTERM or shutdown()

    Embedding (tests do this):
        server = FileServer(ServerConfig(root=docroot, install_signal_handlers=False))
        thread = threading.Thread(target=server.run)
        thread.start()
        server.wait_until_ready(5)
        port = server.port
        ...
        server.shutdown()
        thread.join()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize the server.

        Args:
            config: Server configuration. The root is canonicalized here.

        Raises:
            ValueError: Invalid configuration.
            OSError: Root is missing, not a directory, or not traversable.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config
        self.config.root = canonicalize_root(self.config.root)

        # ─────────────────────────────────────────────────────────────────
        # TRANSPORT
        # ─────────────────────────────────────────────────────────────────
        self._socket_server = SocketServer(self.config)

        # ─────────────────────────────────────────────────────────────────
        # REQUEST PIPELINE
        # ─────────────────────────────────────────────────────────────────
        self.reader = RequestReader(
            chunk_size=self.config.chunk_size,
            max_request_size=self.config.max_request_size,
        )
        self.parser = RequestLineParser(self.config.limit_request_line)
        self.resolver = TargetResolver(self.config.root)
        self.dispatcher = ContentDispatcher(self.config.interpreter)
        self.writer = ResponseWriter()

        self.access_log = AccessLogger(log_format=self.config.log_format)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once the server is listening."""
        return self._socket_server.address

    @property
    def port(self) -> int:
        return self.address[1]

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start serving (blocking).

        Returns after a requested shutdown (signal or shutdown()).

        Raises:
            OSError: bind(), listen() or accept() failed.
        """
        self._setup_logging()
        logger.info(f"Serving {self.config.root}")

        try:
            self._socket_server.start(self.handle_connection)
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. Safe from signal handlers and threads."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up; False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("fileserver").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def respond(self, raw: bytes) -> Tuple[Optional[RequestLine], HTTPResponse]:
        """
        Run a raw request through parse → resolve → dispatch.

        Never raises: failures come back as error responses.

        Returns:
            (request line, or None if it did not parse; response to send)
        """
        request_line = None
        try:
            request_line = self.parser.parse(raw)
            resolved = self.resolver.resolve(request_line.target)
            return request_line, self.dispatcher.dispatch(resolved)
        except HTTPError as e:
            logger.debug(f"{e.status_code} {e}")
            return request_line, self._error_page(e.status_code)
        except Exception as e:
            logger.exception(f"Unexpected error handling request: {e}")
            return request_line, self._error_page(HTTPStatus.INTERNAL_SERVER_ERROR)

    def handle_connection(self, conn: Connection):
        """
        Serve exactly one request on `conn`, then close it.

        Called by SocketServer for each accepted connection.
        """
        started_at = time.time()

        with conn:  # Context manager ensures connection is closed
            # ─────────────────────────────────────────────────────────────
            # READ
            # ─────────────────────────────────────────────────────────────
            try:
                raw = self.reader.read(conn)
            except TransportError as e:
                logger.debug(f"[{conn.id}] Dropped: {e}")
                return
            except HTTPError as e:
                self._finish(conn, None, self._error_page(e.status_code), started_at)
                return

            # ─────────────────────────────────────────────────────────────
            # PROCESS AND SEND
            # ─────────────────────────────────────────────────────────────
            request_line, response = self.respond(raw)
            self._finish(conn, request_line, response, started_at)

    def _finish(
        self,
        conn: Connection,
        request_line: Optional[RequestLine],
        response: HTTPResponse,
        started_at: float,
    ):
        """Write the response and emit the access log entry."""
        if not self.writer.write(conn, response):
            logger.warning(f"[{conn.id}] Response {response.status} not delivered")

        self.access_log.log(
            conn.id,
            conn.client_ip,
            request_line.line if request_line else "-",
            response.status,
            response.content_length,
            started_at,
        )

    def _error_page(self, status_code: int) -> HTTPResponse:
        """Error page for `status_code`; codes without a page become 500."""
        response = error_response(status_code)
        if response is None:
            logger.error(f"No error page for status {status_code}, sending 500")
            response = error_response(HTTPStatus.INTERNAL_SERVER_ERROR)
        return response
