"""
End-to-end tests against a running server over real sockets.
"""

import gzip
import socket
import time
from pathlib import Path

import pytest

from conftest import ServerRunner, read_response
from rawhttp import HTTPServer
from rawhttp.handlers import EndpointHandler
from rawhttp.http.router import Router


def request_bytes(method: str, path: str, headers=None, body: bytes = b"") -> bytes:
    lines = [f"{method} {path} HTTP/1.1", "Host: localhost"]
    for name, value in (headers or {}).items():
        lines.append(f"{name}: {value}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8") + body


def exchange(runner: ServerRunner, raw: bytes):
    """One request on a fresh connection, closed afterwards."""
    with runner.connect() as sock:
        sock.sendall(raw)
        return read_response(sock)


class TestEndpoints:
    """Each route, end to end."""

    def test_root(self, running_server):
        status, headers, body = exchange(running_server, request_bytes("GET", "/"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Length"] == "0"
        assert headers["Access-Control-Allow-Origin"] == "*"
        assert body == b""

    def test_unknown_path(self, running_server):
        status, headers, body = exchange(running_server, request_bytes("GET", "/nope"))

        assert status == "HTTP/1.1 404 Not Found"
        assert body == b""

    def test_echo(self, running_server):
        status, headers, body = exchange(running_server, request_bytes("GET", "/echo/hello"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/plain"
        assert headers["Content-Length"] == "5"
        assert body == b"hello"

    def test_echo_gzip(self, running_server):
        status, headers, body = exchange(
            running_server,
            request_bytes("GET", "/echo/hello", {"Accept-Encoding": "gzip"}),
        )

        assert headers["Content-Encoding"] == "gzip"
        assert headers["Content-Length"] == str(len(body))
        assert gzip.decompress(body) == b"hello"

    def test_user_agent(self, running_server):
        _, _, body = exchange(
            running_server,
            request_bytes("GET", "/user-agent", {"User-Agent": "test-agent/1.0"}),
        )
        assert body == b"test-agent/1.0"

    def test_preflight(self, running_server):
        status, headers, body = exchange(running_server, request_bytes("OPTIONS", "/echo/x"))

        assert status == "HTTP/1.1 204 No Content"
        assert headers["Access-Control-Allow-Methods"] == "GET, POST, OPTIONS"
        assert body == b""

    def test_file_round_trip(self, running_server, served_dir: Path):
        status, _, _ = exchange(
            running_server,
            request_bytes("POST", "/files/sample.txt", {"Content-Length": "6"}, b"abc123"),
        )
        assert status == "HTTP/1.1 201 Created"
        assert (served_dir / "sample.txt").read_bytes() == b"abc123"

        status, headers, body = exchange(running_server, request_bytes("GET", "/files/sample.txt"))
        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "application/octet-stream"
        assert body == b"abc123"

    def test_repeated_reads_identical(self, running_server, served_dir: Path):
        (served_dir / "same.txt").write_bytes(b"stable")

        first = exchange(running_server, request_bytes("GET", "/files/same.txt"))
        second = exchange(running_server, request_bytes("GET", "/files/same.txt"))

        assert first[2] == second[2] == b"stable"

    def test_missing_file(self, running_server):
        status, _, body = exchange(running_server, request_bytes("GET", "/files/absent.txt"))

        assert status == "HTTP/1.1 404 Not Found"
        assert body == b""

    def test_traversal_rejected(self, running_server, tmp_path: Path):
        (tmp_path / "secret.txt").write_bytes(b"secret")

        status, _, body = exchange(running_server, request_bytes("GET", "/files/../secret.txt"))

        assert status == "HTTP/1.1 404 Not Found"
        assert body == b""


class TestConnectionLifecycle:
    """Keep-alive, close and malformed input."""

    def test_keep_alive_two_requests(self, running_server):
        """Two requests on one socket get two responses."""
        with running_server.connect() as sock:
            sock.sendall(request_bytes("GET", "/echo/one"))
            _, headers1, body1 = read_response(sock)

            sock.sendall(request_bytes("GET", "/echo/two"))
            _, headers2, body2 = read_response(sock)

        assert body1 == b"one"
        assert body2 == b"two"
        assert "Connection" not in headers1
        assert "Connection" not in headers2

    def test_connection_close(self, running_server):
        """Connection: close is echoed and the server closes."""
        with running_server.connect() as sock:
            sock.sendall(request_bytes("GET", "/", {"Connection": "close"}))
            _, headers, _ = read_response(sock)

            assert headers["Connection"] == "close"
            assert sock.recv(1024) == b""

    def test_malformed_request_dropped(self, running_server):
        """Garbage gets no response, and the connection stays usable."""
        with running_server.connect() as sock:
            sock.sendall(b"GARBAGE\r\n\r\n")
            time.sleep(0.2)

            sock.sendall(request_bytes("GET", "/echo/after"))
            _, _, body = read_response(sock)

        assert body == b"after"

    def test_concurrent_connections(self, running_server):
        """An idle keep-alive client does not block others."""
        with running_server.connect() as idle:
            idle.sendall(request_bytes("GET", "/"))
            read_response(idle)

            _, _, body = exchange(running_server, request_bytes("GET", "/echo/busy"))

        assert body == b"busy"


class ExplodingHandler(EndpointHandler):
    def handle(self, request, match, directory):
        raise RuntimeError("handler bug")


class TestHandlerFailure:
    """A handler crash becomes a 500, not a dead connection."""

    @pytest.fixture
    def exploding_server(self, config):
        router = Router()
        router.get("/boom", ExplodingHandler())
        runner = ServerRunner(HTTPServer(config, router.build()))
        runner.start()
        yield runner
        runner.stop()

    def test_500_and_keep_alive(self, exploding_server):
        with exploding_server.connect() as sock:
            sock.sendall(request_bytes("GET", "/boom"))
            status, _, body = read_response(sock)
            assert status == "HTTP/1.1 500 Internal Server Error"
            assert body == b""

            sock.sendall(request_bytes("GET", "/nothing"))
            status, _, _ = read_response(sock)
            assert status == "HTTP/1.1 404 Not Found"


class TestServerLifecycle:
    """Startup and shutdown."""

    def test_binds_os_chosen_port(self, running_server):
        assert running_server.port != 0
        assert running_server.server.is_running

    def test_shutdown_stops_accepting(self, config):
        runner = ServerRunner(HTTPServer(config))
        runner.start()
        port = runner.port

        runner.stop()

        assert not runner.server.is_running
        with pytest.raises(OSError):
            socket.create_connection(("127.0.0.1", port), timeout=1.0)
