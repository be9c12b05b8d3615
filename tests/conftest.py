"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Dict, Generator, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rawhttp import HTTPServer, ServerConfig
from rawhttp.app import build_routes
from rawhttp.http import HTTPRequest


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/hello HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest/1.0\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a file body."""
    body = b"abc123"
    return (
        b"POST /files/notes.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


@pytest.fixture
def served_dir(tmp_path: Path) -> Path:
    """Empty directory served under /files/."""
    root = tmp_path / "files"
    root.mkdir()
    return root


@pytest.fixture
def make_request():
    """Factory for HTTPRequest objects without going through the parser."""
    def _make(method="GET", path="/", headers=None, body=b""):
        return HTTPRequest(
            method=method,
            path=path,
            headers=dict(headers or {}),
            body=body,
            version="HTTP/1.1",
            client_address=("127.0.0.1", 50000),
        )
    return _make


@pytest.fixture
def config(served_dir: Path) -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        directory=str(served_dir),
        log_level="WARNING",
        accept_timeout=0.1,
    )


class ServerRunner:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def connect(self) -> socket.socket:
        """Open a client socket to the running server."""
        sock = socket.create_connection(("127.0.0.1", self.port), timeout=5.0)
        return sock


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[ServerRunner, None, None]:
    """A server with the default routes, listening on an OS-chosen port."""
    runner = ServerRunner(HTTPServer(config, build_routes()))
    runner.start()

    yield runner

    runner.stop()


def read_response(sock: socket.socket) -> Tuple[str, Dict[str, str], bytes]:
    """
    Read one full response from a client socket.

    Returns:
        (status line, headers, body). Raises ConnectionError on EOF
        before a complete response.
    """
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = sock.recv(4096)
        if not chunk:
            raise ConnectionError("Connection closed before headers")
        data += chunk

    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")

    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value

    length = int(headers.get("Content-Length", "0"))
    while len(body) < length:
        chunk = sock.recv(4096)
        if not chunk:
            raise ConnectionError("Connection closed mid-body")
        body += chunk

    return lines[0], headers, body[:length]
