"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

This module wraps one accepted client socket with the small API the
keep-alive loop needs: read once, send everything, close.

=============================================================================
ONE READ PER REQUEST
=============================================================================

TCP does NOT preserve message boundaries. A careful server buffers until
it sees "\r\n\r\n" and then reads Content-Length more bytes. This server
deliberately does not:

    ┌─────────────────────────────────────────────────────────────────┐
    │                     receive() contract                           │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   one call  →  one recv(buffer_size)  →  one request             │
    │                                                                  │
    │   b""       →  peer closed (or the read failed)                  │
    │   anything  →  handed to the parser as a whole request           │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

Consequences the caller must live with:
- a request larger than buffer_size is split, and the tail is read as
  the NEXT request (which will usually fail to parse and be dropped)
- two pipelined requests arriving in one segment are parsed as one
- Content-Length from the client is never consulted

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    READING ──► PARSING ──► DISPATCHING ──► RESPONDING ──┐
       ▲           │                                      │
       │           └── parse error: drop, read again ─────┤
       │                                                  │
       └──────────────── keep-alive ◄─────────────────────┘
                              │
                              └── "Connection: close" / EOF / send failure
                                        │
                                        ▼
                                     CLOSED

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Tuple


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Only used for logging and tests; nothing branches on them.
    """
    READING = "reading"          # Waiting in recv()
    PARSING = "parsing"          # Turning bytes into an HTTPRequest
    DISPATCHING = "dispatching"  # Route lookup + handler
    RESPONDING = "responding"    # sendall() in progress
    CLOSED = "closed"            # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. BOUNDED READS                                                    │
    │     └── receive() is exactly one recv(buffer_size)                   │
    │                                                                      │
    │  2. COMPLETE WRITES                                                  │
    │     └── send_response() uses sendall(), one call per response        │
    │                                                                      │
    │  3. STATE / COUNTERS                                                 │
    │     └── state, requests_handled, last_activity for logs              │
    │                                                                      │
    │  4. CLOSE EXACTLY ONCE                                               │
    │     └── close() is idempotent; also a context manager                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    No socket timeout is set: an idle keep-alive client holds its worker
    thread until it disconnects.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Unique connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
        last_activity: Timestamp of last read or write.
        requests_handled: Number of responses sent on this connection.
        buffer_size: Maximum bytes taken by one receive().
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.READING
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)
    requests_handled: int = 0

    buffer_size: int = 1024

    def __post_init__(self):
        # The listening socket has a timeout for its accept loop. Accepted
        # sockets may inherit it on some platforms, so reset explicitly.
        self.socket.setblocking(True)
        self.socket.settimeout(None)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def client_port(self) -> int:
        """Get the client port."""
        return self.address[1]

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def receive(self) -> bytes:
        """
        Read at most buffer_size bytes with a single recv().

        Returns:
            The bytes read, or b"" if the peer closed the connection or
            the read failed (reset, closed from another thread, ...).
        """
        self.state = ConnectionState.READING

        try:
            data = self.socket.recv(self.buffer_size)
        except OSError as e:
            logger.debug(f"[{self.id}] Read failed: {e}")
            return b""

        self.last_activity = time.time()
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response data to the client.

        Uses sendall() so the whole response leaves in one call; a partial
        write is never reported as success.

        Args:
            data: Serialized response bytes.

        Returns:
            True if send succeeded, False if the connection is gone.
        """
        self.state = ConnectionState.RESPONDING

        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

        self.requests_handled += 1
        self.last_activity = time.time()
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_RDWR) sends FIN so the client sees EOF right away,
        then close() releases the descriptor. Errors from either step are
        ignored: the peer may already be gone. Safe to call repeatedly.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.requests_handled} requests")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return (
            f"Connection(id={self.id}, "
            f"client={self.client_ip}:{self.client_port}, "
            f"state={self.state.value}, "
            f"requests={self.requests_handled})"
        )
