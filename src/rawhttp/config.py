"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the server.

=============================================================================
WHERE SETTINGS COME FROM
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Configuration precedence                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Command-line flags      python -m rawhttp --directory /tmp     │
    │            │                                                         │
    │            ▼  (overrides)                                            │
    │   2. Environment variables   RAWHTTP_DIRECTORY=/tmp                  │
    │            │                                                         │
    │            ▼  (overrides)                                            │
    │   3. Dataclass defaults      directory="."                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The CLI starts from ServerConfig.from_env() and overwrites whatever flags
were given, then calls validate() before anything touches the network.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, accept_timeout

    FILES
    - directory

    LOGGING / IDENTITY
    - log_level, server_name

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.
    - "0.0.0.0" - All interfaces (default, so containers can reach it)
    - "127.0.0.1" - Localhost only
    """

    port: int = 4221
    """
    The port number to listen on. 0 lets the OS pick a free port
    (the test suite relies on this).
    """

    backlog: int = 128
    """
    Maximum number of queued, not-yet-accepted connections.
    """

    buffer_size: int = 1024
    """
    Size of the single recv() per request.

    A request (headers AND body) must fit in one read: bytes beyond this
    are not part of the request and will be read as the next "request"
    on a keep-alive connection.
    """

    accept_timeout: float = 1.0
    """
    How often the accept loop wakes up to check for shutdown, in seconds.
    Client connections themselves never time out.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: str = "."
    """
    Root directory for GET/POST /files/. Paths resolving outside it are
    refused.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    DEBUG also logs every accepted/closed connection and dropped request.
    """

    server_name: str = "rawhttp/1.0"
    """
    Name shown in the startup log line.
    """

    @property
    def root(self) -> Path:
        """The served directory, resolved to an absolute path."""
        return Path(self.directory).resolve()

    @property
    def level(self) -> int:
        """log_level as a logging module constant."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        RAWHTTP_HOST         Server host (default: 0.0.0.0)
        RAWHTTP_PORT         Server port (default: 4221)
        RAWHTTP_DIRECTORY    Served directory (default: .)
        RAWHTTP_BUFFER_SIZE  Bytes per read (default: 1024)
        RAWHTTP_LOG_LEVEL    Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("RAWHTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("RAWHTTP_PORT", "4221")),
            directory=os.getenv("RAWHTTP_DIRECTORY", "."),
            buffer_size=int(os.getenv("RAWHTTP_BUFFER_SIZE", "1024")),
            log_level=os.getenv("RAWHTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Fail fast at startup with a clear message instead of failing on
        the first request.

        Raises:
            ValueError: If any setting is out of range.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.accept_timeout <= 0:
            raise ValueError("accept_timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if not Path(self.directory).is_dir():
            raise ValueError(f"Directory does not exist: {self.directory}")
