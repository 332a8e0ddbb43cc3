"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between raw bytes and a response on the wire.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ reader.py        RequestReader       bytes until CRLF CRLF (413)    │
    │ request.py       RequestLineParser   request line checks            │
    │                                      (400/405/414/501/505)          │
    │ target.py        TargetResolver      root + path, query, extension  │
    │                                      (403/404)                      │
    │ response.py      HTTPResponse, ok(), error_response(),              │
    │                  ResponseWriter                                     │
    │ errors.py        HTTPError hierarchy, TransportError                │
    │ status_codes.py  HTTPStatus                                         │
    │ mime_types.py    extension → Content-Type                           │
    └─────────────────────────────────────────────────────────────────────┘

Only a subset of HTTP/1.1 is understood: GET, one request per
connection, and headers that are read but never interpreted.

=============================================================================
"""

from .errors import (
    HTTPError,
    MalformedRequestError,
    ForbiddenError,
    ResourceNotFoundError,
    MethodNotAllowedError,
    RequestTooLargeError,
    URITooLongError,
    InternalServerError,
    FileReadError,
    InterpreterError,
    NotImplementedFeatureError,
    UnsupportedMediaTypeError,
    HTTPVersionNotSupportedError,
    TransportError,
    ConnectionClosedError,
)
from .reader import RequestReader, find_terminator
from .request import RequestLine, RequestLineParser, parse_request_line
from .target import Target, ResolvedTarget, TargetResolver
from .response import HTTPResponse, ResponseWriter, ok, error_response
from .status_codes import HTTPStatus
from .mime_types import MIME_TYPES, get_mime_type

__all__ = [
    # Errors
    "HTTPError",
    "MalformedRequestError",
    "ForbiddenError",
    "ResourceNotFoundError",
    "MethodNotAllowedError",
    "RequestTooLargeError",
    "URITooLongError",
    "InternalServerError",
    "FileReadError",
    "InterpreterError",
    "NotImplementedFeatureError",
    "UnsupportedMediaTypeError",
    "HTTPVersionNotSupportedError",
    "TransportError",
    "ConnectionClosedError",

    # Request side
    "RequestReader",
    "find_terminator",
    "RequestLine",
    "RequestLineParser",
    "parse_request_line",
    "Target",
    "ResolvedTarget",
    "TargetResolver",

    # Response side
    "HTTPResponse",
    "ResponseWriter",
    "ok",
    "error_response",

    "HTTPStatus",
    "MIME_TYPES",
    "get_mime_type",
]
