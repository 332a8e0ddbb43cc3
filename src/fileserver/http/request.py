"""
=============================================================================
REQUEST LINE PARSER
=============================================================================

Extracts and validates the request line from the raw header block that
RequestReader hands over.

=============================================================================
REQUEST LINE ANATOMY
=============================================================================

    GET /search.php?q=cats HTTP/1.1\r\n
    ─┬─ ─────────┬──────── ───┬────
     │           │            └── version: must contain HTTP/1.1
     │           └─────────────── target: absolute path, needs a "."
     └─────────────────────────── method: only GET

Header lines after the request line are read (so the terminator can be
found) but never interpreted.

=============================================================================
VALIDATION ORDER
=============================================================================

The checks run in a fixed order and the first failure wins. The order
is observable: "POST nofile HTTP/1.0" is a 405, not a 501 or a 505.

    ┌────┬───────────────────────────────────────────┬────────┐
    │ #  │ Check                                     │ Status │
    ├────┼───────────────────────────────────────────┼────────┤
    │ 1  │ CRLF before any NUL byte                  │  400   │
    │    │ request line (incl. CRLF) <= 8190 bytes   │  414   │
    │ 2  │ starts with "GET"                         │  405   │
    │ 3  │ first space is followed by "/"            │  501   │
    │ 4  │ no '"' anywhere in the line               │  400   │
    │ 5  │ contains "HTTP/1.1" (any case)            │  505   │
    │ 6  │ target contains a "."                     │  501   │
    └────┴───────────────────────────────────────────┴────────┘

Rule 6 exists because only named files are served: no directories and
no extensionless paths.

=============================================================================
"""

from dataclasses import dataclass

from .errors import (
    HTTPVersionNotSupportedError,
    MalformedRequestError,
    MethodNotAllowedError,
    NotImplementedFeatureError,
    URITooLongError,
)


CRLF = b"\r\n"
VERSION_TOKEN = b"http/1.1"

# Checks run on bytes (lower() and find() stay ASCII-only and keep offsets);
# the results are decoded so any byte sequence survives the round trip back
# to the filesystem (os.fsencode uses the same handler)
ENCODING = "utf-8"
ERRORS = "surrogateescape"


@dataclass(frozen=True)
class RequestLine:
    """
    A validated request line.

    The fields are independent copies: the raw request buffer can be
    discarded as soon as parsing is done.

    Attributes:
        method:  "GET" (only the first three bytes are checked)
        target:  Request target starting with "/", query string included
        version: The version token as sent ("HTTP/1.1", any case)
        line:    Whole request line without its CRLF, for logging
    """

    method: str
    target: str
    version: str
    line: str


class RequestLineParser:
    """
    Parses and validates the request line of a raw request.

    Usage:
        parser = RequestLineParser()
        request_line = parser.parse(b"GET /index.html HTTP/1.1\\r\\n")
        request_line.target   # "/index.html"
    """

    def __init__(self, limit_request_line: int = 8190):
        """
        Args:
            limit_request_line: Longest accepted request line in bytes,
                                including its CRLF (Apache's
                                LimitRequestLine).
        """
        self.limit_request_line = limit_request_line

    def parse(self, raw: bytes) -> RequestLine:
        """
        Parse the request line at the start of `raw`.

        Args:
            raw: Header block as returned by RequestReader.read().

        Returns:
            The validated RequestLine.

        Raises:
            MalformedRequestError: No CRLF before the first NUL, or a '"' in
                                   the line (400).
            URITooLongError: Request line too long (414).
            MethodNotAllowedError: Method is not GET (405).
            NotImplementedFeatureError: Target is not an absolute path to
                                        a named file (501).
            HTTPVersionNotSupportedError: No HTTP/1.1 token (505).
        """
        # =====================================================================
        # STEP 1: Isolate the request line
        # =====================================================================
        # Text ends at the first NUL; a NUL inside the line hides its CRLF.
        nul = raw.find(b"\x00")
        if nul != -1:
            raw = raw[:nul]

        end = raw.find(CRLF)
        if end == -1:
            raise MalformedRequestError("Request line is not terminated by CRLF")

        if end + len(CRLF) > self.limit_request_line:
            raise URITooLongError(
                f"Request line is {end + len(CRLF)} bytes, "
                f"limit is {self.limit_request_line}"
            )

        line = raw[:end]

        # =====================================================================
        # STEP 2: Method must be GET (case-sensitive)
        # =====================================================================
        if not line.startswith(b"GET"):
            method = line.split(b" ", 1)[0].decode(ENCODING, ERRORS)
            raise MethodNotAllowedError(f"Method not allowed: {method!r}")

        # =====================================================================
        # STEP 3: Target must be an absolute path
        # =====================================================================
        space = line.find(b" ")
        if space == -1 or line[space:space + 2] != b" /":
            raise NotImplementedFeatureError("Request target must start with '/'")

        # =====================================================================
        # STEP 4: No double quotes anywhere
        # =====================================================================
        if b'"' in line:
            raise MalformedRequestError("Request line contains '\"'")

        # =====================================================================
        # STEP 5: Version must be HTTP/1.1
        # =====================================================================
        version_at = line.lower().find(VERSION_TOKEN)
        if version_at == -1:
            raise HTTPVersionNotSupportedError("Only HTTP/1.1 is supported")

        # =====================================================================
        # STEP 6: Extract the target and require an extension
        # =====================================================================
        # The target runs from the first "/" up to the version token;
        # the space in front of the token is not part of it.
        slash = line.find(b"/")
        target = line[slash:version_at] if version_at > slash else b""
        if target.endswith(b" "):
            target = target[:-1]

        if b"." not in target:
            raise NotImplementedFeatureError(
                f"Target has no extension: {target.decode(ENCODING, ERRORS)!r}"
            )

        return RequestLine(
            method=line[:3].decode(ENCODING, ERRORS),
            target=target.decode(ENCODING, ERRORS),
            version=line[version_at:version_at + len(VERSION_TOKEN)].decode(ENCODING, ERRORS),
            line=line.decode(ENCODING, ERRORS),
        )


def parse_request_line(raw: bytes, limit_request_line: int = 8190) -> RequestLine:
    """
    Convenience function to parse a request line in one call.

    Use RequestLineParser directly when parsing many requests with the
    same settings.
    """
    return RequestLineParser(limit_request_line).parse(raw)
