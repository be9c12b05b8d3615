"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         HTTPServer                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer ── accept() ──► Thread per connection                 │
    │                                    │                                 │
    │                                    ▼                                 │
    │                             serve_connection(conn)                   │
    │                                    │                                 │
    │       ┌────────────────────────────┼──────────────────────────────┐  │
    │       │  loop:                     ▼                              │  │
    │       │     conn.receive()        one recv(buffer_size)           │  │
    │       │        │  b"" → close                                     │  │
    │       │        ▼                                                  │  │
    │       │     parse_request()       HTTPParseError → drop, loop     │  │
    │       │        ▼                                                  │  │
    │       │     AccessLogMiddleware                                   │  │
    │       │        ▼                                                  │  │
    │       │     routes.dispatch()     handler raised → 500            │  │
    │       │        ▼                                                  │  │
    │       │     response.to_bytes(request) → conn.send_response()     │  │
    │       │        │  send failed → close                             │  │
    │       │        ▼                                                  │  │
    │       │     "Connection: close"? → close, else loop               │  │
    │       └───────────────────────────────────────────────────────────┘  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The route table is passed in and never changes; it is the only state the
worker threads share.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from .config import ServerConfig
from .core.connection import Connection, ConnectionState
from .core.socket_server import SocketServer
from .http.request import HTTPParseError, HTTPRequest, RequestParser
from .http.response import HTTPResponse, internal_error
from .http.router import RouteTable
from .middleware import AccessLogMiddleware, MiddlewarePipeline


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Thread-per-connection HTTP/1.1 server.

    Usage:
        from rawhttp.app import build_routes

        server = HTTPServer(ServerConfig(directory="/tmp"), build_routes())
        server.run()  # Blocks until SIGINT/SIGTERM or shutdown()

    Components:
    - SocketServer: listening socket and accept loop
    - RequestParser: bytes → HTTPRequest
    - RouteTable: request → handler → HTTPResponse
    - MiddlewarePipeline: access logging around dispatch
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        routes: Optional[RouteTable] = None,
        access_log: bool = True,
    ):
        """
        Initialize the HTTP server.

        Args:
            config: Server configuration. Defaults are used if not provided.
            routes: Frozen route table. Empty means every request is a 404.
            access_log: Install AccessLogMiddleware (first in the chain).
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self.routes = routes if routes is not None else RouteTable()
        self.directory: Path = self.config.root

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()
        self._middleware = MiddlewarePipeline()

        if access_log:
            self._middleware.add(AccessLogMiddleware())

        self._handler = None

    @property
    def address(self):
        """The (IP, port) actually bound, once listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the listening address cannot be bound.
        """
        self._handler = self._middleware.wrap(self._dispatch)

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port} "
            f"serving {self.directory}"
        )
        self.routes.describe(write=logger.debug)

        try:
            self._socket_server.start(self.serve_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """
        Stop accepting connections.

        Open keep-alive connections are not interrupted; their daemon
        threads end when the client disconnects or the process exits.
        """
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is bound (for tests/embedding)."""
        return self._socket_server.wait_until_ready(timeout)

    def setup_logging(self):
        """Configure root logging from config.log_level."""
        logging.basicConfig(
            level=self.config.level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("rawhttp").setLevel(self.config.level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _dispatch(self, request: HTTPRequest) -> HTTPResponse:
        return self.routes.dispatch(request, self.directory)

    def serve_connection(self, conn: Connection):
        """
        Serve one connection until it closes (runs in its worker thread).

        =====================================================================
        ERROR HANDLING
        =====================================================================

            EOF / read error       → close
            malformed request      → drop silently, keep reading
            handler raised         → log, answer 500, keep going
            send failed            → close
            anything else          → log, close

        None of these reach the listener or other connections.

        =====================================================================

        Args:
            conn: The client connection. Closed on every exit path.
        """
        if self._handler is None:
            self._handler = self._middleware.wrap(self._dispatch)

        with conn:
            try:
                while True:
                    data = conn.receive()
                    if not data:
                        logger.debug(f"[{conn.id}] Peer closed")
                        break

                    conn.state = ConnectionState.PARSING
                    try:
                        request = self._parser.parse(data, conn.address)
                    except HTTPParseError as e:
                        logger.debug(f"[{conn.id}] Dropping malformed request: {e}")
                        continue

                    conn.state = ConnectionState.DISPATCHING
                    try:
                        response = self._handler(request)
                    except Exception as e:
                        logger.exception(f"[{conn.id}] Handler error: {e}")
                        response = internal_error()

                    if not conn.send_response(response.to_bytes(request)):
                        break

                    if request.wants_close:
                        break

            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")
