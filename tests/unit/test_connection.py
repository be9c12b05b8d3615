"""
Unit tests for Connection, using a local socket pair.
"""

import socket

import pytest

from rawhttp.core.connection import Connection, ConnectionState


@pytest.fixture
def pair():
    """(server side, client side) connected sockets."""
    server_sock, client_sock = socket.socketpair()
    client_sock.settimeout(5.0)
    yield server_sock, client_sock
    for s in (server_sock, client_sock):
        try:
            s.close()
        except OSError:
            pass


class TestConnection:
    """Tests for the Connection wrapper."""

    def test_receive_single_read(self, pair):
        """receive() returns what one recv() got."""
        server_sock, client_sock = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1))

        client_sock.sendall(b"GET / HTTP/1.1\r\n\r\n")

        assert conn.receive() == b"GET / HTTP/1.1\r\n\r\n"
        assert conn.state == ConnectionState.READING

    def test_receive_bounded_by_buffer_size(self, pair):
        """Bytes beyond buffer_size are left for the next read."""
        server_sock, client_sock = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1), buffer_size=4)

        client_sock.sendall(b"abcdefgh")

        assert conn.receive() == b"abcd"
        assert conn.receive() == b"efgh"

    def test_receive_eof(self, pair):
        """A closed peer reads as b''."""
        server_sock, client_sock = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1))

        client_sock.close()

        assert conn.receive() == b""

    def test_receive_after_close_is_empty(self, pair):
        """Reading a closed socket does not raise."""
        server_sock, _ = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1))
        conn.close()

        assert conn.receive() == b""

    def test_send_response(self, pair):
        """send_response() delivers everything and counts it."""
        server_sock, client_sock = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1))

        assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n") is True
        assert client_sock.recv(1024) == b"HTTP/1.1 200 OK\r\n\r\n"
        assert conn.requests_handled == 1
        assert conn.state == ConnectionState.RESPONDING

    def test_send_after_close_fails(self, pair):
        """Sending on a closed connection returns False."""
        server_sock, _ = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1))
        conn.close()

        assert conn.send_response(b"x") is False

    def test_close_is_idempotent(self, pair):
        """close() may be called any number of times."""
        server_sock, client_sock = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1))

        conn.close()
        conn.close()

        assert conn.is_closed
        assert client_sock.recv(1) == b""

    def test_context_manager_closes(self, pair):
        """Leaving the with-block closes the socket."""
        server_sock, client_sock = pair

        with Connection(socket=server_sock, address=("127.0.0.1", 1)) as conn:
            assert not conn.is_closed

        assert conn.is_closed
        assert client_sock.recv(1) == b""

    def test_no_socket_timeout(self, pair):
        """Client sockets block indefinitely."""
        server_sock, _ = pair
        server_sock.settimeout(1.0)

        Connection(socket=server_sock, address=("127.0.0.1", 1))

        assert server_sock.gettimeout() is None

    def test_ids_unique(self, pair):
        server_sock, client_sock = pair
        a = Connection(socket=server_sock, address=("127.0.0.1", 1))
        b = Connection(socket=client_sock, address=("127.0.0.1", 2))

        assert a.id != b.id
        assert len(a.id) == 8
        assert a.client_ip == "127.0.0.1"
        assert b.client_port == 2
