"""
=============================================================================
STATIC FILE RESPONDER
=============================================================================

Answers requests for plain files: look up the MIME type from the
extension, read the whole file, send it back.

    ResolvedTarget(path="/var/www/cat.jpg", extension="jpg")
        │
        ├── MIME lookup     jpg → image/jpeg      (unknown → 501)
        ├── read file       open(path, "rb")      (failure → 500)
        │
        ▼
    HTTP/1.1 200 OK
    Connection: close
    Content-Length: 48213
    Content-Type: image/jpeg

The file is read into memory in one go; there is no streaming and no
size cap. Existence and permissions were already checked by
TargetResolver, so a read error here means something changed in between
(file deleted, it is a directory, I/O error).

=============================================================================
"""

import logging

from ..http.errors import FileReadError, UnsupportedMediaTypeError
from ..http.mime_types import get_mime_type
from ..http.response import HTTPResponse, ok
from ..http.target import ResolvedTarget


logger = logging.getLogger(__name__)


class StaticResponder:
    """
    Serves files whose extension has a known MIME type.

    Usage:
        responder = StaticResponder()
        response = responder.respond(resolved)
    """

    def respond(self, resolved: ResolvedTarget) -> HTTPResponse:
        """
        Build a 200 response carrying the file's bytes.

        Raises:
            UnsupportedMediaTypeError: Extension has no MIME type (501).
            FileReadError: The file could not be read (500).
        """
        content_type = get_mime_type(resolved.extension)
        if content_type is None:
            raise UnsupportedMediaTypeError(
                f"No MIME type for extension {resolved.extension!r}"
            )

        try:
            with open(resolved.path, "rb") as f:
                content = f.read()
        except OSError as e:
            logger.error(f"Error reading {resolved.path}: {e}")
            raise FileReadError(f"Failed to read {resolved.path}") from e

        return ok(content, content_type)
