"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

The listening half of the server: create the socket, bind, listen, and
hand every accepted client to its own thread.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a TCP socket
    2. bind()      Reserve IP:PORT (fails if the port is taken)
    3. listen()    OS starts queueing incoming connections (backlog)
    4. accept()    Take one queued connection → new client socket
    5. close()     Release the listening socket on shutdown

=============================================================================
THREAD PER CONNECTION
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │                                                                  │
    │   main thread                 worker threads (daemon)            │
    │   ───────────                 ───────────────────────            │
    │   accept() ──► conn #1 ──────► Thread(handler, conn #1)          │
    │   accept() ──► conn #2 ──────► Thread(handler, conn #2)          │
    │   accept() ──► conn #3 ──────► Thread(handler, conn #3)          │
    │      ...                                                         │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

There is no pool and no limit: every accepted connection gets a thread
immediately, and that thread owns the socket until it closes it. Workers
are daemon threads so a shutdown never waits on an idle keep-alive
client.

accept() wakes up every accept_timeout seconds so shutdown() is noticed
without needing a connection to arrive.

=============================================================================
"""

import socket
import signal
import logging
import threading
import time
import errno
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


# accept() failures that mean "out of descriptors", not "listener broken"
RESOURCE_ERRNOS = (errno.EMFILE, errno.ENFILE, errno.ENOBUFS, errno.ENOMEM)
ACCEPT_BACKOFF = 0.1


class SocketServer:
    """
    Low-level TCP socket server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(handler)                                                    │
    │        ├──► _create_socket()   SO_REUSEADDR, TCP_NODELAY, timeout    │
    │        ├──► bind() / listen()                                        │
    │        ├──► _setup_signals()   main thread only                      │
    │        └──► _accept_loop()     BLOCKS until shutdown()               │
    │                 └──► Thread(target=handler, args=(conn,))            │
    │                                                                      │
    │    shutdown()        _running = False; loop exits on next wake-up    │
    │    _cleanup()        restore signals, close listening socket         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        """
        Initialize the socket server.

        Args:
            config: Server configuration containing host, port, backlog, etc.

        The socket is created lazily in start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[Tuple[str, int]] = None

        # Set once listening, so other threads know address is real
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The (IP, port) actually bound.

        Differs from config when port 0 was requested. Before start()
        has bound, falls back to the configured address.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """
        Create and configure the server socket.

        Returns:
            Configured socket ready for binding.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restart without waiting out TIME_WAIT on the old socket
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Every response is a single sendall(); don't hold it back
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(self.config.accept_timeout)

        return sock

    def _setup_signals(self):
        """
        Setup signal handlers for graceful shutdown.

        SIGTERM (docker stop, kill <pid>) and SIGINT (Ctrl+C) both call
        shutdown(). Python only allows installing handlers from the main
        thread, so a server started from a test thread skips this step.
        """
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not in main thread, signal handlers not installed")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Start accepting connections.

        This method BLOCKS until shutdown() is called.

        Args:
            connection_handler: Called with each new Connection on a fresh
                                daemon thread. It owns the connection and
                                must close it.

        Raises:
            OSError: If the address cannot be bound (port in use, no
                     permission). Logged before being re-raised.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True

        self._setup_signals()

        host, port = self._bound_address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Main loop for accepting connections.

        ┌─────────────────────────────────────────────────────────────────┐
        │                     Accept Loop Flow                             │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   while self._running:                                           │
        │       ├──► accept()        (timeout → check _running again)      │
        │       ├──► Connection(client_socket, address, buffer_size)      │
        │       └──► Thread(connection_handler, conn, daemon=True).start() │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘

        Args:
            connection_handler: Callback for each new connection.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._running:
                    break  # Listening socket closed by shutdown()
                logger.error(f"Accept error: {e}")
                if e.errno in RESOURCE_ERRNOS:
                    # Out of descriptors: let open connections release some
                    time.sleep(ACCEPT_BACKOFF)
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            try:
                self._spawn_worker(connection_handler, client_socket, client_address)
            except (OSError, RuntimeError) as e:
                logger.error(f"Could not start worker for {client_address[0]}: {e}")
                try:
                    client_socket.close()
                except OSError:
                    pass

    def _spawn_worker(
        self,
        connection_handler: Callable[[Connection], None],
        client_socket: socket.socket,
        client_address: Tuple[str, int],
    ):
        """Wrap an accepted socket and start its daemon worker thread."""
        conn = Connection(
            socket=client_socket,
            address=client_address,
            buffer_size=self.config.buffer_size,
        )

        worker = threading.Thread(
            target=connection_handler,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()

    def shutdown(self):
        """
        Initiate graceful shutdown.

        Callable from a signal handler or another thread; idempotent.
        Connections already accepted are left to finish on their own.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Clean up resources on shutdown."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None

        self._running = False
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is bound and listening.

        Returns:
            True once ready, False on timeout.
        """
        return self._ready_event.wait(timeout)
