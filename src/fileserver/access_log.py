"""
=============================================================================
ACCESS LOG
=============================================================================

One line per answered request on the "fileserver.access" logger.

    TEXT (default):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [18/Oct/2026:10:55:36 +0000] "GET /a.html HTTP/1.1"   │
    │     200 1234 0.41ms                                                 │
    └─────────────────────────────────────────────────────────────────────┘

    JSON (--log-format json):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"connection_id": "a1b2c3d4", "client_ip": "127.0.0.1",             │
    │  "request_line": "GET /a.html HTTP/1.1", "status_code": 200,        │
    │  "content_length": 1234, "duration_ms": 0.41, "timestamp": "..."}   │
    └─────────────────────────────────────────────────────────────────────┘

A request rejected before its request line could be read (413, or a
request line that never parsed) is logged with "-" as the request line.
Connections dropped without any response are not logged here.

Route it elsewhere the usual way:

    logging.getLogger("fileserver.access").addHandler(file_handler)

=============================================================================
"""

import json
import time
import logging
from dataclasses import dataclass, asdict


logger = logging.getLogger("fileserver.access")


@dataclass
class RequestLog:
    """
    Access log entry for one request.

    Attributes:
        connection_id:  Connection.id, matches the debug log lines
        client_ip:      Peer address
        request_line:   Request line as received, or "-"
        status_code:    Status sent (or attempted)
        content_length: Content-Length of the response
        duration_ms:    Time from accept to response written
        timestamp:      Common Log Format timestamp
    """

    connection_id: str
    client_ip: str
    request_line: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        """Convert to a dictionary for JSON output."""
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        """Format in the Common Log Format, plus the duration."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.request_line}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """
    Emits RequestLog entries in the configured format.

    Usage:
        access_log = AccessLogger(log_format="json")
        started_at = time.time()
        ...
        access_log.log(conn.id, conn.client_ip, "GET /a.html HTTP/1.1",
                       200, 1234, started_at)
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" or "json"
            log_level: Level the entries are logged at
        """
        self.log_format = log_format
        self.log_level = log_level

    def build_entry(
        self,
        connection_id: str,
        client_ip: str,
        request_line: str,
        status_code: int,
        content_length: int,
        started_at: float,
    ) -> RequestLog:
        return RequestLog(
            connection_id=connection_id,
            client_ip=client_ip,
            request_line=request_line or "-",
            status_code=int(status_code),
            content_length=content_length,
            duration_ms=(time.time() - started_at) * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def format(self, entry: RequestLog) -> str:
        if self.log_format == "json":
            return json.dumps(entry.to_dict())
        return entry.to_text()

    def log(
        self,
        connection_id: str,
        client_ip: str,
        request_line: str,
        status_code: int,
        content_length: int,
        started_at: float,
    ) -> RequestLog:
        """Build an entry, emit it, and return it."""
        entry = self.build_entry(
            connection_id, client_ip, request_line,
            status_code, content_length, started_at,
        )
        logger.log(self.log_level, self.format(entry))
        return entry
