"""
=============================================================================
REQUEST READER
=============================================================================

Accumulates bytes from a Connection until the end of the request headers
(CRLF CRLF) shows up, or until the request is too large to be legitimate.

=============================================================================
INCREMENTAL TERMINATOR SEARCH
=============================================================================

Scanning the whole buffer after every read is O(n²) over a long request.
Only the new chunk can complete a terminator, and at most 3 bytes of that
terminator can sit at the end of what we already had:

    buffer before read          new chunk
    ┌──────────────────────┬───┬────────────────────┐
    │ ... Host: x          │\r │\n\r\n              │
    └──────────────────────┴───┴────────────────────┘
                           ▲
                           search starts here:
                           len(buffer) - len(chunk) - 3

So each search covers the new chunk plus a 3-byte overlap, and a
terminator split across two reads is still found.

=============================================================================
WHAT IS RETURNED
=============================================================================

The buffer is cut right after the first CRLF of the terminator, which
keeps the request line and any header lines, each with its own CRLF:

    "GET /cat.html HTTP/1.1\r\nHost: x\r\n\r\n<anything>"
     returned: "GET /cat.html HTTP/1.1\r\nHost: x\r\n"

=============================================================================
"""

import logging

from ..core.connection import Connection
from .errors import ConnectionClosedError, RequestTooLargeError, TransportError


logger = logging.getLogger(__name__)

TERMINATOR = b"\r\n\r\n"


def find_terminator(buffer: bytes, new_bytes: int) -> int:
    """
    Find the header terminator, looking only where it can newly appear.

    Args:
        buffer: Everything read so far (bytes or bytearray).
        new_bytes: How many bytes at the end of `buffer` came from the
                   latest read.

    Returns:
        Offset of the first CRLF CRLF in the searched window, or -1.
    """
    start = max(0, len(buffer) - new_bytes - (len(TERMINATOR) - 1))
    return buffer.find(TERMINATOR, start)


class RequestReader:
    """
    Reads one request's header block from a connection.

    Usage:
        reader = RequestReader(chunk_size=512, max_request_size=212890)
        raw = reader.read(conn)
    """

    def __init__(self, chunk_size: int = 512, max_request_size: int = 8190 + 50 * 4094):
        """
        Args:
            chunk_size: Bytes requested per recv().
            max_request_size: Unterminated bytes at which the request is
                              rejected with 413.
        """
        self.chunk_size = chunk_size
        self.max_request_size = max_request_size

    def read(self, connection: Connection) -> bytes:
        """
        Read until CRLF CRLF and return the header block.

        Returns:
            Request bytes up to and including the CRLF that starts the
            terminator.

        Raises:
            RequestTooLargeError: No terminator within max_request_size bytes.
            ConnectionClosedError: The peer closed before the terminator.
            TransportError: The read itself failed (timeout, socket error).
        """
        buffer = bytearray()

        while True:
            try:
                chunk = connection.recv(self.chunk_size)
            except OSError as e:
                raise TransportError(f"Read failed after {len(buffer)} bytes: {e}") from e

            if not chunk:
                raise ConnectionClosedError(f"Peer closed after {len(buffer)} bytes")

            buffer += chunk

            end = find_terminator(buffer, len(chunk))
            if end != -1:
                # Keep the CRLF ending the last header line, drop the blank line
                return bytes(buffer[:end + 2])

            if len(buffer) >= self.max_request_size:
                logger.debug(f"No header terminator in {len(buffer)} bytes")
                raise RequestTooLargeError(
                    f"Request headers exceed {self.max_request_size} bytes"
                )
