"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the file server.

The ServerConfig is the ONLY state that outlives a single request. It is
built once at startup (from the command line), validated, and then read
but never written while connections are being served.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    WHERE VALUES COME FROM                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── fileserver -p 8080 /var/www                               │
    │                                                                      │
    │   2. Code (tests, embedding)                                        │
    │      └── ServerConfig(root="/var/www", port=0)                     │
    │                                                                      │
    │   3. Defaults below                                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There are no config files and no environment variables.

=============================================================================
REQUEST SIZE LIMITS
=============================================================================

The limits mirror Apache's core directives of the same names:

    LimitRequestLine        8190   bytes in the request line (incl. CRLF)
    LimitRequestFields        50   header fields
    LimitRequestFieldSize   4094   bytes per header field

A request whose headers are still unterminated after

    8190 + 50 * 4094 = 212890 bytes

is rejected with 413 Request Entity Too Large.

=============================================================================
"""

import errno
import os
import socket
from dataclasses import dataclass
from typing import Optional


# Highest port accepted on the command line (a signed 16-bit short)
MAX_PORT = 32767

LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    CONTENT
    - root, interpreter

    NETWORK SETTINGS
    - host, port, backlog, chunk_size, timeout

    REQUEST LIMITS
    - limit_request_line, limit_request_fields, limit_request_field_size

    LOGGING
    - log_level, log_format

    PROCESS
    - install_signal_handlers

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root: str = "."
    """
    Directory files are served from.
    Request paths are appended to it verbatim, so it should already be
    canonical (see canonicalize_root) and carry no trailing slash.
    """

    interpreter: str = "php-cgi"
    """
    Command run for .php files. Split with shlex, never passed to a shell.
    Receives QUERY_STRING, REDIRECT_STATUS and SCRIPT_FILENAME in its
    environment and must print a CGI header block followed by the body.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """The IP address to bind to (all interfaces)."""

    port: int = 0
    """
    The port number to listen on.
    0 asks the OS for a free ephemeral port; the bound port is logged
    and available from SocketServer.address once listening.
    """

    backlog: int = socket.SOMAXCONN
    """Maximum number of queued connections (the platform's maximum)."""

    chunk_size: int = 512
    """Bytes requested from the socket per read."""

    timeout: Optional[float] = None
    """
    Socket timeout for client connections in seconds.
    None = block forever, so a silent peer stalls the whole server.
    Tests set this to keep a broken client from hanging the suite.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LIMITS
    # ─────────────────────────────────────────────────────────────────────

    limit_request_line: int = 8190
    limit_request_fields: int = 50
    limit_request_field_size: int = 4094

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR)."""

    log_format: str = "text"
    """
    Access log format: 'text' or 'json'.
    JSON is better for log aggregators, text for human reading.
    """

    # ─────────────────────────────────────────────────────────────────────
    # PROCESS
    # ─────────────────────────────────────────────────────────────────────

    install_signal_handlers: bool = True
    """
    Catch SIGINT/SIGTERM and stop the accept loop cleanly.
    Only possible from the main thread; ignored elsewhere.
    """

    @property
    def max_request_size(self) -> int:
        """Bytes of unterminated headers after which a request is rejected."""
        return (
            self.limit_request_line
            + self.limit_request_fields * self.limit_request_field_size
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        =====================================================================
        FAIL-FAST PRINCIPLE
        =====================================================================

        We validate configuration at startup, not at first use.
        A bad port should stop the process before a socket is created.

        =====================================================================
        """
        if not 0 <= self.port <= MAX_PORT:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-{MAX_PORT}.")

        if not self.root:
            raise ValueError("root must not be empty")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if min(self.limit_request_line,
               self.limit_request_fields,
               self.limit_request_field_size) < 1:
            raise ValueError("request limits must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")

        if not self.interpreter.strip():
            raise ValueError("interpreter must not be empty")


def canonicalize_root(path: str) -> str:
    """
    Resolve the server root to an absolute, symlink-free path.

    The root must exist, be a directory, and be traversable (executable)
    by this process. Failures are reported as the OSError the operating
    system would give, so the CLI can print its message and exit 1.

    Args:
        path: Root directory as given on the command line.

    Returns:
        Canonical absolute path without a trailing slash.

    Raises:
        FileNotFoundError: Path does not exist.
        NotADirectoryError: Path is not a directory.
        PermissionError: Directory is not traversable.
    """
    # strict=True raises instead of returning a path that does not exist
    root = os.path.realpath(path, strict=True)

    if not os.path.isdir(root):
        raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), root)

    if not os.access(root, os.X_OK):
        raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), root)

    return root
