"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The handful of status codes this server ever sends.

    2xx  Success        200 OK
    4xx  Client Error   400, 403, 404, 405, 413, 414, 418
    5xx  Server Error   500, 501, 505

The reason phrases are the RFC 2616 wording (e.g. "Request-URI Too Long"
rather than RFC 7231's "URI Too Long"); clients compare on the number,
but the phrase ends up verbatim in the error page title.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes.

    IntEnum so a member compares equal to its number:

        HTTPStatus.NOT_FOUND == 404   # True
        f"{HTTPStatus.NOT_FOUND}"     # "404"
    """

    OK = 200

    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    REQUEST_ENTITY_TOO_LARGE = 413      # Request exceeded the header limits
    REQUEST_URI_TOO_LONG = 414          # Request line longer than 8190 bytes
    IM_A_TEAPOT = 418                   # RFC 2324, kept in the error page table

    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    HTTP_VERSION_NOT_SUPPORTED = 505

    def __str__(self) -> str:
        return str(self.value)

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_ENTITY_TOO_LARGE: "Request Entity Too Large",
    HTTPStatus.REQUEST_URI_TOO_LONG: "Request-URI Too Long",
    HTTPStatus.IM_A_TEAPOT: "I'm a teapot",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
