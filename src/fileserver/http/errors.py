"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure the request pipeline can detect is an exception that carries
the HTTP status code the client should see. The server catches HTTPError
once, at the top of the connection handler, and turns it into exactly one
error page.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      WHO RAISES WHAT                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   RequestReader       RequestTooLargeError (413)                    │
    │                       TransportError / ConnectionClosedError        │
    │                                                                      │
    │   RequestLineParser   MalformedRequestError (400)                   │
    │                       URITooLongError (414)                         │
    │                       MethodNotAllowedError (405)                   │
    │                       NotImplementedFeatureError (501)              │
    │                       HTTPVersionNotSupportedError (505)            │
    │                                                                      │
    │   TargetResolver      ResourceNotFoundError (404)                   │
    │                       ForbiddenError (403)                          │
    │                                                                      │
    │   Responders          UnsupportedMediaTypeError (501)               │
    │                       FileReadError (500)                           │
    │                       InterpreterError (500)                        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

TransportError is NOT an HTTPError: when the peer is gone nobody is left
to answer, so the connection is dropped without a response.

=============================================================================
"""

from typing import Optional

from .status_codes import HTTPStatus


class HTTPError(Exception):
    """
    Raised when a request cannot be answered with 200 OK.

    Subclasses pin the status code; callers may still override it, which
    keeps the base class usable for one-off errors.
    """

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message or self.status_code.phrase)
        if status_code is not None:
            self.status_code = HTTPStatus(status_code)


# ─────────────────────────────────────────────────────────────────────────
# 4xx: the client sent something we refuse to serve
# ─────────────────────────────────────────────────────────────────────────

class MalformedRequestError(HTTPError):
    status_code = HTTPStatus.BAD_REQUEST


class ForbiddenError(HTTPError):
    status_code = HTTPStatus.FORBIDDEN


class ResourceNotFoundError(HTTPError):
    status_code = HTTPStatus.NOT_FOUND


class MethodNotAllowedError(HTTPError):
    status_code = HTTPStatus.METHOD_NOT_ALLOWED


class RequestTooLargeError(HTTPError):
    status_code = HTTPStatus.REQUEST_ENTITY_TOO_LARGE


class URITooLongError(HTTPError):
    status_code = HTTPStatus.REQUEST_URI_TOO_LONG


# ─────────────────────────────────────────────────────────────────────────
# 5xx: we understood the request but could not produce the content
# ─────────────────────────────────────────────────────────────────────────

class InternalServerError(HTTPError):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class FileReadError(InternalServerError):
    """The file passed the access checks but reading it failed."""


class InterpreterError(InternalServerError):
    """The interpreter could not be spawned or produced no CGI header block."""


class NotImplementedFeatureError(HTTPError):
    """Request uses something this server does not do (e.g. no absolute path)."""
    status_code = HTTPStatus.NOT_IMPLEMENTED


class UnsupportedMediaTypeError(NotImplementedFeatureError):
    """File exists but its extension has no MIME mapping."""


class HTTPVersionNotSupportedError(HTTPError):
    status_code = HTTPStatus.HTTP_VERSION_NOT_SUPPORTED


# ─────────────────────────────────────────────────────────────────────────
# Transport failures: never answered
# ─────────────────────────────────────────────────────────────────────────

class TransportError(Exception):
    """Reading from the client socket failed."""


class ConnectionClosedError(TransportError):
    """The peer closed the connection before the headers were complete."""
