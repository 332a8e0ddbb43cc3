"""
=============================================================================
TARGET RESOLUTION
=============================================================================

Turns a request target into a filesystem path under the server root.

    target:   /search.php?q=cats
              ─────┬───── ──┬───
                   │        └── query  "q=cats"
                   └─────────── path   "/search.php"

    root:     /var/www
    resolved: /var/www/search.php      (plain concatenation)
    extension:           php           (after the FIRST "." in the path)

=============================================================================
KNOWN QUIRKS
=============================================================================

1. NO NORMALISATION
   The path is appended to the root as-is. "/../etc/hosts.html" becomes
   "/var/www/../etc/hosts.html" and is served if it exists. Deploy behind
   something that rejects ".." segments if that matters.

2. FIRST-DOT EXTENSION
   The extension is everything after the first "." anywhere in the
   resolved path, not the last one in the file name:

       /var/www/app.min.js   →  "min.js"   (no MIME type → 501)
       /srv/site.d/a.html    →  "d/a.html" (root with a dot breaks lookups)

   Existing deployments depend on this, so it is kept.

=============================================================================
"""

import os
import logging
from dataclasses import dataclass

from .errors import ForbiddenError, ResourceNotFoundError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Target:
    """A request target split at the first "?"."""

    path: str
    query: str = ""

    @classmethod
    def parse(cls, target: str) -> "Target":
        """
        Split a request target into path and query string.

        Examples:
            Target.parse("/a.php?x=1")  → Target("/a.php", "x=1")
            Target.parse("/a.php?")     → Target("/a.php", "")
            Target.parse("/a.html")     → Target("/a.html", "")
        """
        path, _, query = target.partition("?")
        return cls(path=path, query=query)


@dataclass(frozen=True)
class ResolvedTarget:
    """
    A target mapped onto the filesystem and checked for access.

    Attributes:
        path:      root + target path, verbatim
        query:     Query string (possibly empty)
        extension: Text after the first "." in `path` ("" if none)
    """

    path: str
    query: str
    extension: str


def extract_extension(path: str) -> str:
    """Return everything after the first "." in `path`, or "" if there is none."""
    dot = path.find(".")
    if dot == -1:
        return ""
    return path[dot + 1:]


class TargetResolver:
    """
    Resolves request targets against the server root.

    Usage:
        resolver = TargetResolver("/var/www")
        resolved = resolver.resolve("/index.html")
        resolved.path        # "/var/www/index.html"
        resolved.extension   # "html"
    """

    def __init__(self, root: str):
        """
        Args:
            root: Canonical root directory, without a trailing slash.
        """
        self.root = root

    def resolve(self, target: str) -> ResolvedTarget:
        """
        Map a target onto the filesystem.

        Existence and readability are two separate probes, in that order,
        so a missing file is always 404 even in an unreadable directory.

        Args:
            target: Request target from the request line ("/" prefixed).

        Returns:
            The resolved path, query string and extension.

        Raises:
            ResourceNotFoundError: Path does not exist (404).
            ForbiddenError: Path exists but is not readable (403).
        """
        parts = Target.parse(target)
        path = self.root + parts.path

        if not os.access(path, os.F_OK):
            raise ResourceNotFoundError(f"No such file: {path}")

        if not os.access(path, os.R_OK):
            raise ForbiddenError(f"Not readable: {path}")

        return ResolvedTarget(
            path=path,
            query=parts.query,
            extension=extract_extension(path),
        )
