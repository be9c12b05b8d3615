"""
=============================================================================
RAWHTTP - Minimal HTTP/1.1 Server Over Raw Sockets
=============================================================================

A small HTTP/1.1 server built directly on TCP sockets: one thread per
connection, keep-alive, a frozen route table and a handful of built-in
endpoints (echo, user-agent, file read/write, CORS preflight).

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       RAWHTTP ARCHITECTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   core/          listening socket, accept loop, Connection          │
    │   http/          request parser, response writer, router, CORS,     │
    │                  gzip helpers, status codes                          │
    │   handlers/      the EndpointHandler implementations                 │
    │   middleware/    access logging around dispatch                      │
    │   app.py         build_routes(): the default route table             │
    │   server.py      HTTPServer: the per-connection keep-alive loop      │
    │   config.py      ServerConfig (defaults → env → CLI)                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    python -m rawhttp --directory /tmp/files

    curl -v http://localhost:4221/echo/hello
    curl -v -H "Accept-Encoding: gzip" http://localhost:4221/echo/hello
    curl -v --data-binary @notes.txt http://localhost:4221/files/notes.txt
    curl -v http://localhost:4221/files/notes.txt

Embedding:

    from rawhttp import HTTPServer, ServerConfig
    from rawhttp.app import build_routes

    HTTPServer(ServerConfig(port=8080), build_routes()).run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
