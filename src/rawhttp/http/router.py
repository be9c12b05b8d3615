"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) to an endpoint handler using an ordered table of
routes. Two kinds of pattern are supported:

- EXACT:  "/user-agent" matches only "/user-agent"
- PREFIX: "/files/" matches anything that STARTS WITH "/files/"

A pattern is a prefix pattern if and only if it ends in "/", unless the
mode is given explicitly at registration (the root route "/" is EXACT).

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Incoming Request                                                   │
    │   GET /echo/hello                                                    │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTE TABLE  (checked top to bottom, first match wins)     │   │
    │   │                                                              │   │
    │   │  GET     /             EXACT   → root                        │   │
    │   │  GET     /echo/        PREFIX  → echo        ← MATCH!        │   │
    │   │  GET     /user-agent   EXACT   → user-agent                  │   │
    │   │  GET     /files/       PREFIX  → file read                   │   │
    │   │  POST    /files/       PREFIX  → file create                 │   │
    │   │  OPTIONS /             PREFIX  → preflight                   │   │
    │   │                                                              │   │
    │   │  remainder = "hello"                                         │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   EchoHandler.handle(request, match, directory)                      │
    │                                                                      │
    │   Nothing matched? → 404, empty body                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PREFIX MATCHING IS BYTE-WISE
=============================================================================

    Pattern "/echo/" vs path:

        /echo/abc           ✓  remainder "abc"
        /echo/              ✓  remainder ""
        /echo/../etc/passwd ✓  remainder "../etc/passwd"
        /echo               ✗  (shorter than the pattern)
        /echoes/x           ✗  ("/echoe" != "/echo/")

The router does NOT look at path segments and does NOT reject "..".
Keeping a handler inside its sandbox is the handler's job (see
handlers/files.py).

=============================================================================
BUILD ONCE, READ FOREVER
=============================================================================

    Router (builder)  ──build()──►  RouteTable (frozen)  ──►  HTTPServer
       add_route()                  tuple of Routes           shared by all
       get()/post()/options()                                 worker threads

The RouteTable is immutable, so every connection thread reads it without
a lock.

=============================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from .request import HTTPRequest
from .response import HTTPResponse, not_found

if TYPE_CHECKING:
    from ..handlers.base import EndpointHandler


logger = logging.getLogger(__name__)


PATH_SEPARATOR = "/"


class MatchMode(Enum):
    """How a route pattern is compared against a request path."""

    EXACT = "exact"    # Full string equality
    PREFIX = "prefix"  # path.startswith(pattern)

    @classmethod
    def for_pattern(cls, pattern: str) -> "MatchMode":
        """Patterns ending in "/" are prefix patterns, all others exact."""
        return cls.PREFIX if pattern.endswith(PATH_SEPARATOR) else cls.EXACT


@dataclass(frozen=True)
class Route:
    """
    A registered route.

        Route(
            method="GET",
            pattern="/files/",
            mode=MatchMode.PREFIX,
            handler=FileReadHandler(),
        )
    """

    method: str                   # Compared case-sensitively
    pattern: str                  # e.g. "/echo/" or "/user-agent"
    mode: MatchMode               # Derived from the pattern
    handler: "EndpointHandler"    # Produces the response

    def matches(self, method: str, path: str) -> bool:
        """Check method and path against this route."""
        if method != self.method:
            return False
        if self.mode is MatchMode.PREFIX:
            return path.startswith(self.pattern)
        return path == self.pattern


@dataclass(frozen=True)
class RouteMatch:
    """
    Result of a successful match.

    Example:
        Route:  GET /files/  (PREFIX)
        Path:   /files/notes/today.txt
        Result: RouteMatch(route=<Route>, remainder="notes/today.txt")

    For EXACT routes the remainder is always "".
    """

    route: Route
    remainder: str


@dataclass(frozen=True)
class RouteTable:
    """
    The immutable, ordered route table.

    Built once by Router.build() before the server starts accepting, then
    shared read-only by every connection thread.
    """

    routes: Tuple[Route, ...] = ()

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        Registration order is the tie-break: "/files/" registered before
        a hypothetical "/files/special" would shadow it.

        Returns:
            RouteMatch if found, None otherwise.
        """
        for route in self.routes:
            if route.matches(method, path):
                remainder = path[len(route.pattern):] if route.mode is MatchMode.PREFIX else ""
                return RouteMatch(route=route, remainder=remainder)
        return None

    def dispatch(self, request: HTTPRequest, directory: Path) -> HTTPResponse:
        """
        Route a request to its handler.

        Args:
            request: The parsed request.
            directory: Root of the served file tree.

        Returns:
            The handler's response, or a bare 404 if no route matched.
        """
        match = self.match(request.method, request.path)
        if match is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return not_found()
        return match.route.handler.handle(request, match, directory)

    def describe(self, write: Callable[[str], None] = logger.info) -> None:
        """
        Write the routes, one per line (useful at startup).

        Example output:
            GET      /              exact
            GET      /echo/         prefix
            POST     /files/        prefix
        """
        for route in self.routes:
            write(f"  {route.method:8} {route.pattern:14} {route.mode.value}")

    def __len__(self) -> int:
        return len(self.routes)

    def __iter__(self):
        return iter(self.routes)


class Router:
    """
    Builder for a RouteTable.

    ==========================================================================
    USAGE
    ==========================================================================

        router = Router()
        router.get("/", RootHandler())
        router.get("/echo/", EchoHandler())      # ends in "/" → PREFIX
        router.post("/files/", FileCreateHandler())
        table = router.build()                   # freeze

    After build() the router refuses further registrations, so nothing can
    sneak a route in once worker threads are reading the table.

    ==========================================================================
    """

    def __init__(self):
        self._routes: List[Route] = []
        self._built = False

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        method: str,
        pattern: str,
        handler: "EndpointHandler",
        mode: Optional[MatchMode] = None,
    ) -> Route:
        """
        Register a route.

        Args:
            method: HTTP method, matched exactly ("GET", not "get").
            pattern: Path pattern. A trailing "/" makes it a prefix route.
            handler: The endpoint handler to call on a match.
            mode: Force a match mode instead of deriving it from the
                  pattern. Needed for an exact "/" route, which would
                  otherwise swallow every path.

        Returns:
            The registered Route.

        Raises:
            RuntimeError: If the table has already been built.
        """
        if self._built:
            raise RuntimeError("Routes cannot be added after the table is built")

        route = Route(
            method=method,
            pattern=pattern,
            mode=mode or MatchMode.for_pattern(pattern),
            handler=handler,
        )
        self._routes.append(route)
        return route

    def get(self, pattern: str, handler: "EndpointHandler", mode: Optional[MatchMode] = None) -> Route:
        """Register a GET route."""
        return self.add_route("GET", pattern, handler, mode)

    def post(self, pattern: str, handler: "EndpointHandler", mode: Optional[MatchMode] = None) -> Route:
        """Register a POST route."""
        return self.add_route("POST", pattern, handler, mode)

    def options(self, pattern: str, handler: "EndpointHandler", mode: Optional[MatchMode] = None) -> Route:
        """Register an OPTIONS route. Used for CORS preflight."""
        return self.add_route("OPTIONS", pattern, handler, mode)

    def build(self) -> RouteTable:
        """Freeze the registered routes into a RouteTable."""
        self._built = True
        return RouteTable(routes=tuple(self._routes))

    def describe(self, write: Callable[[str], None] = logger.info) -> None:
        """Write the routes registered so far."""
        RouteTable(routes=tuple(self._routes)).describe(write)
