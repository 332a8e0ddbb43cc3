"""
pytest configuration and fixtures.
"""

import os
import shlex
import socket
import threading
from typing import Generator, List, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fileserver import FileServer, ServerConfig


INDEX_HTML = b"<html><body><h1>It works</h1></body></html>\n"
STYLE_CSS = b"body { color: #333; }\n"

# Stands in for php-cgi: prints a CGI header block, then the environment
# values the server is expected to pass.
FAKE_INTERPRETER = '''\
import os
import sys

out = sys.stdout.buffer
out.write(b"X-Powered-By: fake-cgi\\r\\nContent-type: text/plain\\r\\n\\r\\n")
out.write(("query=" + os.environ.get("QUERY_STRING", "<unset>") + "\\n").encode())
out.write(("script=" + os.environ.get("SCRIPT_FILENAME", "<unset>") + "\\n").encode())
out.write(("redirect=" + os.environ.get("REDIRECT_STATUS", "<unset>") + "\\n").encode())
'''

# Output with no blank line after the headers
BROKEN_INTERPRETER = '''\
import sys
sys.stdout.write("Content-type: text/plain\\r\\nno terminator here")
'''


def _python_command(script: Path) -> str:
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    """Document root with one file of each kind the tests need."""
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "style.css").write_bytes(STYLE_CSS)
    (root / "page.xyz").write_bytes(b"no mime type for this\n")
    (root / "run.php").write_bytes(b"<?php echo 'hi'; ?>\n")
    (root / "LOUD.PHP").write_bytes(b"<?php echo 'HI'; ?>\n")
    (root / "noext").write_bytes(b"plain\n")
    return root


@pytest.fixture
def fake_interpreter(tmp_path: Path) -> str:
    """Interpreter command line that behaves like a tiny php-cgi."""
    script = tmp_path / "fake_cgi.py"
    script.write_text(FAKE_INTERPRETER)
    return _python_command(script)


@pytest.fixture
def broken_interpreter(tmp_path: Path) -> str:
    """Interpreter command line whose output has no header terminator."""
    script = tmp_path / "broken_cgi.py"
    script.write_text(BROKEN_INTERPRETER)
    return _python_command(script)


@pytest.fixture
def config(docroot: Path, fake_interpreter: str) -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        root=str(docroot),
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        interpreter=fake_interpreter,
        timeout=5.0,
        log_level="WARNING",
        install_signal_handlers=False,
    )


class FakeSocket:
    """Socket double: hands out scripted chunks, records what is sent."""

    def __init__(self, chunks: Optional[List[bytes]] = None, fail_send: bool = False):
        self.chunks = list(chunks or [])
        self.sent: List[bytes] = []
        self.fail_send = fail_send
        self.closed = False

    def settimeout(self, timeout):
        pass

    def recv(self, size: int) -> bytes:
        if not self.chunks:
            return b""
        chunk = self.chunks.pop(0)
        if isinstance(chunk, Exception):
            raise chunk
        if len(chunk) > size:
            self.chunks.insert(0, chunk[size:])
            chunk = chunk[:size]
        return chunk

    def sendall(self, data: bytes):
        if self.fail_send:
            raise BrokenPipeError("peer gone")
        self.sent.append(bytes(data))

    def shutdown(self, how):
        pass

    def close(self):
        self.closed = True

    @property
    def output(self) -> bytes:
        return b"".join(self.sent)


@pytest.fixture
def make_connection():
    """Build a Connection around a FakeSocket."""
    from fileserver.core import Connection

    def factory(chunks=None, fail_send=False):
        return Connection(
            socket=FakeSocket(chunks, fail_send=fail_send),
            address=("127.0.0.1", 40000),
        )

    return factory


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: FileServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.port

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, data: bytes, shut_write: bool = False) -> bytes:
        """Send raw bytes and read the whole reply (the server closes)."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            sock.sendall(data)
            if shut_write:
                sock.shutdown(socket.SHUT_WR)
            chunks = []
            while True:
                try:
                    chunk = sock.recv(65536)
                except ConnectionResetError:
                    break
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running FileServer on an ephemeral port."""
    test_srv = TestServer(FileServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def start_server() -> Generator:
    """Factory for extra servers with their own config; all stopped at teardown."""
    started = []

    def factory(config: ServerConfig) -> TestServer:
        test_srv = TestServer(FileServer(config))
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield factory

    for test_srv in started:
        test_srv.stop()


def _split_response(raw: bytes):
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


@pytest.fixture
def parse_response():
    """Split a raw response into (status line, headers dict, body)."""
    return _split_response


@pytest.fixture
def as_root() -> bool:
    """True when running with root privileges (permission checks never fail)."""
    return hasattr(os, "geteuid") and os.geteuid() == 0
