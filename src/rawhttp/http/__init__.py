"""
=============================================================================
HTTP PROTOCOL PACKAGE
=============================================================================

Everything that knows about the HTTP wire format, and nothing that knows
about sockets:

    http/
    ├── request.py       # bytes of one read → HTTPRequest
    ├── response.py      # HTTPResponse → bytes (computed headers added)
    ├── router.py        # Router builder, frozen RouteTable, matching
    ├── status_codes.py  # HTTPStatus enum with reason phrases
    ├── cors.py          # Default CORS header set
    └── compression.py   # gzip content negotiation

=============================================================================
HTTP MESSAGE FORMAT
=============================================================================

    REQUEST:                          RESPONSE:
    ─────────                         ──────────
    GET /echo/hi HTTP/1.1\r\n         HTTP/1.1 200 OK\r\n
    Header: Value\r\n                 Header: Value\r\n
    \r\n                              Content-Length: 2\r\n
    [body]                            \r\n
                                      hi

Key points:
- Lines end with CRLF (\r\n), not just \n
- Headers and body are separated by an empty line (\r\n\r\n)
- Header names are kept exactly as sent (this server is case-sensitive)
- Body length is announced with Content-Length

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ok,                 # 200 OK
    created,            # 201 Created
    no_content,         # 204 No Content
    not_found,          # 404 Not Found
    internal_error,     # 500 Internal Server Error
)
from .router import Router, Route, RouteMatch, RouteTable, MatchMode
from .status_codes import HTTPStatus
from .cors import CORSConfig, DEFAULT_CORS

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Response writing
    "HTTPResponse",
    "ok",
    "created",
    "no_content",
    "not_found",
    "internal_error",

    # Routing
    "Router",
    "Route",
    "RouteMatch",
    "RouteTable",
    "MatchMode",

    # Status codes
    "HTTPStatus",

    # CORS
    "CORSConfig",
    "DEFAULT_CORS",
]
