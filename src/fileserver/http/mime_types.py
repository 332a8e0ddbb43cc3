"""
=============================================================================
MIME TYPE LOOKUP
=============================================================================

Maps a file extension to the Content-Type sent with static content.

=============================================================================
WHY A FIXED TABLE?
=============================================================================

The server only serves the kinds of files a small static site is made of.
Anything else is refused with 501 Not Implemented instead of being sent
as application/octet-stream, so a stray source file or database under the
root is never handed out by accident.

    ┌───────────────┬──────────────────────┐
    │  Extension    │  MIME type           │
    ├───────────────┼──────────────────────┤
    │  css          │  text/css            │
    │  html         │  text/html           │
    │  gif          │  image/gif           │
    │  ico          │  image/x-icon        │
    │  jpg          │  image/jpeg          │
    │  js           │  text/javascript     │
    │  png          │  image/png           │
    └───────────────┴──────────────────────┘

Lookups are case-insensitive: "PNG" and "png" are the same extension.

=============================================================================
"""

from typing import Optional


MIME_TYPES = {
    "css": "text/css",
    "html": "text/html",
    "gif": "image/gif",
    "ico": "image/x-icon",
    "jpg": "image/jpeg",
    "js": "text/javascript",
    "png": "image/png",
}


def get_mime_type(extension: str) -> Optional[str]:
    """
    Get the MIME type for an extension (without the leading dot).

    Returns:
        The MIME type string, or None if the extension is not served.

    Examples:
        >>> get_mime_type("css")
        'text/css'

        >>> get_mime_type("JPG")
        'image/jpeg'

        >>> get_mime_type("xyz") is None
        True
    """
    return MIME_TYPES.get(extension.lower())
