"""
=============================================================================
HTTP RESPONSES
=============================================================================

Building and sending the two kinds of reply this server produces: file
or interpreter output (200), and fixed HTML error pages.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─ HEAD ─────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                               │
    │  Connection: close\r\n                             │
    │  Content-Length: 1337\r\n                          │
    │  Content-Type: text/html\r\n     (static only)     │
    │  \r\n                                              │
    └────────────────────────────────────────────────────┘
    ┌─ BODY ─────────────────────────────────────────────┐
    │  <file bytes / interpreter output after its CGI    │
    │   header block>                                    │
    └────────────────────────────────────────────────────┘

Headers go out in insertion order. No Date or Server header is added:
what a handler puts in the response is exactly what goes on the wire.

The head and the body are written as two separate stages. If either
write fails the response is abandoned; nothing is retried.

=============================================================================
ERROR PAGES
=============================================================================

Every supported error code gets the same tiny page:

    <html><head><title>404 Not Found</title></head>
    <body><h1>404 Not Found</h1></body></html>

Only the codes in SUPPORTED_ERRORS can be sent. Anything else (a 2xx, a
code without a page) is refused by error_response(), which returns None.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from ..core.connection import Connection
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)

ERROR_TEMPLATE = (
    "<html><head><title>{code} {phrase}</title></head>"
    "<body><h1>{code} {phrase}</h1></body></html>"
)

SUPPORTED_ERRORS = frozenset({
    HTTPStatus.BAD_REQUEST,
    HTTPStatus.FORBIDDEN,
    HTTPStatus.NOT_FOUND,
    HTTPStatus.METHOD_NOT_ALLOWED,
    HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
    HTTPStatus.REQUEST_URI_TOO_LONG,
    HTTPStatus.IM_A_TEAPOT,
    HTTPStatus.INTERNAL_SERVER_ERROR,
    HTTPStatus.NOT_IMPLEMENTED,
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED,
})


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be written to a connection.

    Attributes:
        status:  HTTPStatus of the response
        headers: Header name → value, serialized in insertion order
        body:    Response body bytes
        version: Protocol version for the status line
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """Status line without CRLF, e.g. "HTTP/1.1 200 OK"."""
        return f"{self.version} {self.status} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        """Declared Content-Length, falling back to the body size."""
        return int(self.headers.get("Content-Length", len(self.body)))

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header; returns self for chaining."""
        self.headers[name] = value
        return self

    def head_bytes(self) -> bytes:
        """
        Serialize the status line and headers, including the blank line.

            HTTP/1.1 200 OK\\r\\n
            Connection: close\\r\\n
            Content-Length: 5\\r\\n
            \\r\\n
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")
        return ("\r\n".join(lines) + "\r\n").encode("latin-1")

    def to_bytes(self) -> bytes:
        """Serialize the whole response (head and body)."""
        return self.head_bytes() + self.body


# =============================================================================
# CONSTRUCTORS
# =============================================================================

def ok(body: bytes, content_type: Optional[str] = None) -> HTTPResponse:
    """
    Build a 200 OK response.

    Headers are Connection, Content-Length and (when given) Content-Type,
    in that order.

    Args:
        body: Response body
        content_type: MIME type; omit to send no Content-Type header
    """
    response = HTTPResponse(status=HTTPStatus.OK, body=body)
    response.set_header("Connection", "close")
    response.set_header("Content-Length", str(len(body)))
    if content_type is not None:
        response.set_header("Content-Type", content_type)
    return response


def error_response(code: Union[int, HTTPStatus]) -> Optional[HTTPResponse]:
    """
    Build the HTML error page for `code`.

    Returns:
        The response, or None if `code` is outside 400-599 or has no page.
    """
    if not 400 <= int(code) <= 599:
        return None
    try:
        status = HTTPStatus(int(code))
    except ValueError:
        return None
    if status not in SUPPORTED_ERRORS:
        return None

    body = ERROR_TEMPLATE.format(code=int(status), phrase=status.phrase).encode("utf-8")

    response = HTTPResponse(status=status, body=body)
    response.set_header("Connection", "close")
    response.set_header("Content-Length", str(len(body)))
    response.set_header("Content-Type", "text/html")
    return response


# =============================================================================
# WRITING
# =============================================================================

class ResponseWriter:
    """
    Writes responses to a connection.

    Usage:
        writer = ResponseWriter()
        writer.write(conn, ok(b"hello", "text/html"))
        writer.send_error(conn, 404)
    """

    def write(self, connection: Connection, response: HTTPResponse) -> bool:
        """
        Send `response` as two stages: head, then body.

        Returns:
            True if every stage was sent, False as soon as one fails.
        """
        if not connection.send_response(response.head_bytes()):
            logger.debug(f"[{connection.id}] Aborted response: head not sent")
            return False

        if response.body and not connection.send_response(response.body):
            logger.debug(f"[{connection.id}] Aborted response: body not sent")
            return False

        return True

    def send_error(self, connection: Connection, code: Union[int, HTTPStatus]) -> bool:
        """
        Send the error page for `code`.

        Returns:
            False if `code` has no error page (nothing is written) or if
            the write failed.
        """
        response = error_response(code)
        if response is None:
            logger.error(f"[{connection.id}] No error page for status {code}")
            return False
        return self.write(connection, response)
