"""
=============================================================================
RAWHTTP CLI ENTRY POINT
=============================================================================

=============================================================================
USAGE
=============================================================================

    python -m rawhttp

    python -m rawhttp --directory /tmp/files

    python -m rawhttp --port 8080 --log-level DEBUG

    RAWHTTP_DIRECTORY=/srv rawhttp

Flags override RAWHTTP_* environment variables, which override defaults.

=============================================================================
EXIT STATUS
=============================================================================

    0   stopped by SIGINT / SIGTERM
    1   invalid configuration, or the address could not be bound

=============================================================================
"""

import argparse
import logging
import sys

from . import __version__
from .app import build_routes
from .config import LOG_LEVELS, ServerConfig
from .server import HTTPServer


logger = logging.getLogger("rawhttp")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate from main() for testing)."""
    parser = argparse.ArgumentParser(
        prog="rawhttp",
        description="Minimal HTTP/1.1 server over raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m rawhttp                         # Serve . on 0.0.0.0:4221
  python -m rawhttp --directory /tmp/files  # Serve /tmp/files
  python -m rawhttp --port 0                # Let the OS pick a port
        """
    )

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Directory for /files/ (default: $RAWHTTP_DIRECTORY or .)"
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 4221)"
    )

    parser.add_argument(
        "--buffer-size",
        type=int,
        default=None,
        help="Bytes read per request (default: 1024)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=[level for level in LOG_LEVELS if level != "CRITICAL"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Start from the environment, then apply any flags that were given."""
    config = ServerConfig.from_env()

    if args.directory is not None:
        config.directory = args.directory
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.buffer_size is not None:
        config.buffer_size = args.buffer_size
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv=None):
    """
    Main CLI entry point.

    Parses flags, validates config, configures logging, builds the route
    table and runs the server until interrupted.
    """
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config, build_routes())
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    server.setup_logging()

    try:
        server.run()
    except OSError as e:
        logger.error(f"Server failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
