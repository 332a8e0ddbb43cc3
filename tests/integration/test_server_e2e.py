"""
End-to-end tests: a real FileServer on an ephemeral port, raw sockets.
"""

import logging
import os
import signal
import subprocess
import sys
from pathlib import Path

import pytest


SRC = str(Path(__file__).parent.parent.parent / "src")
MAX_REQUEST_SIZE = 8190 + 50 * 4094


class TestScenarios:
    """The basic request/response scenarios."""

    def test_static_file(self, test_server, docroot, parse_response):
        """GET of an HTML file returns it with its headers."""
        raw = test_server.request(b"GET /index.html HTTP/1.1\r\nHost: x\r\n\r\n")
        status_line, headers, body = parse_response(raw)
        expected = (docroot / "index.html").read_bytes()

        assert status_line == "HTTP/1.1 200 OK"
        assert headers == {
            "Connection": "close",
            "Content-Length": str(len(expected)),
            "Content-Type": "text/html",
        }
        assert body == expected

    def test_missing_file(self, test_server, parse_response):
        """A missing file gets the 404 page."""
        raw = test_server.request(b"GET /missing.html HTTP/1.1\r\n\r\n")
        status_line, headers, body = parse_response(raw)

        assert status_line == "HTTP/1.1 404 Not Found"
        assert headers["Content-Type"] == "text/html"
        assert b"404" in body and b"Not Found" in body

    def test_post(self, test_server, parse_response):
        """POST is a 405."""
        raw = test_server.request(b"POST /index.html HTTP/1.1\r\n\r\n")
        assert parse_response(raw)[0] == "HTTP/1.1 405 Method Not Allowed"

    def test_no_leading_slash(self, test_server, parse_response):
        """A relative target is a 501."""
        raw = test_server.request(b"GET nofile HTTP/1.1\r\n\r\n")
        assert parse_response(raw)[0] == "HTTP/1.1 501 Not Implemented"

    def test_unknown_mime_type(self, test_server, parse_response):
        """An unknown extension is a 501."""
        raw = test_server.request(b"GET /page.xyz HTTP/1.1\r\n\r\n")
        assert parse_response(raw)[0] == "HTTP/1.1 501 Not Implemented"

    def test_php(self, test_server, parse_response):
        """A php target returns the script output without CGI headers."""
        raw = test_server.request(b"GET /run.php?x=1 HTTP/1.1\r\n\r\n")
        status_line, headers, body = parse_response(raw)

        assert status_line == "HTTP/1.1 200 OK"
        assert "Content-Type" not in headers
        assert body.startswith(b"query=x=1\n")
        assert int(headers["Content-Length"]) == len(body)

    def test_http_1_0(self, test_server, parse_response):
        """HTTP/1.0 is a 505."""
        raw = test_server.request(b"GET /index.html HTTP/1.0\r\n\r\n")
        assert parse_response(raw)[0] == "HTTP/1.1 505 HTTP Version Not Supported"

    def test_quote_in_request_line(self, test_server, parse_response):
        """A quote in the request line is a 400."""
        raw = test_server.request(b'GET /"index".html HTTP/1.1\r\n\r\n')
        assert parse_response(raw)[0] == "HTTP/1.1 400 Bad Request"

    def test_nul_in_request_line(self, test_server, parse_response, caplog):
        """A NUL byte is a malformed request, not a server error."""
        with caplog.at_level(logging.ERROR, logger="fileserver"):
            for line in (b"GET /in\x00dex.html HTTP/1.1", b"GET /run.php?a=\x00 HTTP/1.1"):
                raw = test_server.request(line + b"\r\n\r\n")
                assert parse_response(raw)[0] == "HTTP/1.1 400 Bad Request"

        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]

    def test_php_interpreter_failure(self, start_server, broken_interpreter, config, parse_response):
        """A broken interpreter is a 500."""
        config.interpreter = broken_interpreter
        server = start_server(config)

        raw = server.request(b"GET /run.php HTTP/1.1\r\n\r\n")

        assert parse_response(raw)[0] == "HTTP/1.1 500 Internal Server Error"


class TestProperties:
    """Properties that hold across requests."""

    def test_content_length_matches_file_size(self, test_server, docroot, parse_response):
        """Content-Length and body match the file size."""
        for name in ("index.html", "style.css"):
            raw = test_server.request(f"GET /{name} HTTP/1.1\r\n\r\n".encode())
            _, headers, body = parse_response(raw)

            assert int(headers["Content-Length"]) == os.path.getsize(docroot / name)
            assert len(body) == os.path.getsize(docroot / name)

    def test_repeated_requests_are_identical(self, test_server):
        """The same request gives the same bytes."""
        responses = {
            test_server.request(b"GET /style.css HTTP/1.1\r\n\r\n")
            for _ in range(5)
        }
        assert len(responses) == 1

    def test_every_method_but_get_is_405(self, test_server, parse_response):
        """The method check wins over any other error."""
        for line in (b"PUT /index.html HTTP/1.1", b"DELETE nofile HTTP/1.0",
                     b"OPTIONS * HTTP/1.1"):
            raw = test_server.request(line + b"\r\n\r\n")
            assert parse_response(raw)[0] == "HTTP/1.1 405 Method Not Allowed"

    def test_unterminated_request_does_not_hang(self, test_server, parse_response):
        """The server drops the half-request and keeps serving."""
        assert test_server.request(b"GET /index.html HTTP/1.1", shut_write=True) == b""

        raw = test_server.request(b"GET /index.html HTTP/1.1\r\n\r\n")
        assert parse_response(raw)[0] == "HTTP/1.1 200 OK"

    def test_request_line_at_limit(self, test_server, parse_response):
        """8190 bytes gets past the length check."""
        prefix, suffix = b"GET /", b".html HTTP/1.1\r\n"
        line = prefix + b"a" * (8190 - len(prefix) - len(suffix)) + suffix
        assert len(line) == 8190

        raw = test_server.request(line + b"\r\n")
        assert parse_response(raw)[0] == "HTTP/1.1 404 Not Found"

    def test_request_line_over_limit(self, test_server, parse_response):
        """8191 bytes is a 414."""
        prefix, suffix = b"GET /", b".html HTTP/1.1\r\n"
        line = prefix + b"a" * (8191 - len(prefix) - len(suffix)) + suffix

        raw = test_server.request(line + b"\r\n")
        assert parse_response(raw)[0] == "HTTP/1.1 414 Request-URI Too Long"

    def test_request_at_size_limit(self, test_server, parse_response):
        """A request that reaches the size limit is a 413."""
        raw = test_server.request(b"a" * MAX_REQUEST_SIZE)
        assert parse_response(raw)[0] == "HTTP/1.1 413 Request Entity Too Large"

    def test_request_below_size_limit(self, test_server):
        """One byte short, the server is still waiting when the peer leaves."""
        assert test_server.request(b"a" * (MAX_REQUEST_SIZE - 1), shut_write=True) == b""


class TestProcess:
    """The server as a process: start-up and signal handling."""

    @pytest.mark.skipif(not hasattr(signal, "SIGINT") or os.name != "posix",
                        reason="POSIX signals required")
    def test_sigint_exits_zero(self, docroot):
        """SIGINT stops the server with exit status 0."""
        env = dict(os.environ, PYTHONPATH=SRC)
        proc = subprocess.Popen(
            [sys.executable, "-m", "fileserver", str(docroot)],
            env=env,
            stderr=subprocess.PIPE,
            text=True,
        )
        try:
            for line in proc.stderr:
                if "Listening on port" in line:
                    break
            else:
                pytest.fail("server never started listening")

            proc.send_signal(signal.SIGINT)
            assert proc.wait(timeout=10) == 0
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            proc.stderr.close()
