"""
=============================================================================
ECHO-STYLE ENDPOINTS
=============================================================================

The handlers that answer from the request alone, without touching disk:

    ┌──────────────────┬──────────────┬─────────────────────────────────────┐
    │  Handler         │ Route        │ Response                            │
    ├──────────────────┼──────────────┼─────────────────────────────────────┤
    │  RootHandler     │ GET /        │ 200, empty body                     │
    │  EchoHandler     │ GET /echo/…  │ 200, the path remainder (gzip if    │
    │                  │              │ the client accepts it)              │
    │  UserAgentHandler│ GET /user-agent │ 200, the User-Agent header       │
    │  PreflightHandler│ OPTIONS /…   │ 204, CORS headers only              │
    └──────────────────┴──────────────┴─────────────────────────────────────┘

=============================================================================
"""

from pathlib import Path

from .base import EndpointHandler
from ..http.compression import GZIP, accepts_gzip, gzip_encode
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok, no_content
from ..http.router import RouteMatch


TEXT_PLAIN = "text/plain"


class RootHandler(EndpointHandler):
    """GET / → 200 with an empty body. Handy as a liveness check."""

    def handle(self, request: HTTPRequest, match: RouteMatch, directory: Path) -> HTTPResponse:
        return ok()


class EchoHandler(EndpointHandler):
    """
    GET /echo/<text> → <text> as the body.

    =========================================================================
    FLOW
    =========================================================================

        GET /echo/hello
        Accept-Encoding: gzip, deflate
             │
             ▼
        content = match.remainder            → "hello"
             │
             ├── "gzip" in Accept-Encoding?
             │        yes → gzip_encode(content)
             │              Content-Encoding: gzip
             │        no  → content as is
             ▼
        200 OK, Content-Type: text/plain

    The remainder is taken verbatim from the request line: "/echo/a%20b"
    echoes "a%20b", not "a b".

    =========================================================================
    """

    def handle(self, request: HTTPRequest, match: RouteMatch, directory: Path) -> HTTPResponse:
        content = match.remainder.encode("utf-8")

        if accepts_gzip(request.accept_encoding):
            response = ok(gzip_encode(content), content_type=TEXT_PLAIN)
            response.set_header("Content-Encoding", GZIP)
            return response

        return ok(content, content_type=TEXT_PLAIN)


class UserAgentHandler(EndpointHandler):
    """GET /user-agent → the User-Agent header value ("" when absent)."""

    def handle(self, request: HTTPRequest, match: RouteMatch, directory: Path) -> HTTPResponse:
        return ok(request.user_agent, content_type=TEXT_PLAIN)


class PreflightHandler(EndpointHandler):
    """
    OPTIONS <anything> → 204 No Content.

    The response carries no headers of its own: the writer adds the CORS
    defaults to every response, and that is all a preflight needs.
    """

    def handle(self, request: HTTPRequest, match: RouteMatch, directory: Path) -> HTTPResponse:
        return no_content()
