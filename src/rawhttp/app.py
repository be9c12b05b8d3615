"""
The application's route table.

    GET      /             EXACT   root
    GET      /echo/        PREFIX  echo (+gzip)
    GET      /user-agent   EXACT   user-agent echo
    GET      /files/       PREFIX  file read
    POST     /files/       PREFIX  file create
    OPTIONS  /             PREFIX  CORS preflight

build_routes() returns a fresh, frozen RouteTable each time it is called;
the server receives it as an argument rather than reading a global.
"""

from typing import Optional

from .handlers import (
    RootHandler,
    EchoHandler,
    UserAgentHandler,
    PreflightHandler,
    FileReadHandler,
    FileCreateHandler,
)
from .http.router import MatchMode, Router, RouteTable


def register_routes(router: Router) -> Router:
    """Register the demo endpoints on a router, in match order."""
    router.get("/", RootHandler(), mode=MatchMode.EXACT)
    router.get("/echo/", EchoHandler())
    router.get("/user-agent", UserAgentHandler())
    router.get("/files/", FileReadHandler())
    router.post("/files/", FileCreateHandler())
    router.options("/", PreflightHandler())
    return router


def build_routes(router: Optional[Router] = None) -> RouteTable:
    """
    Build the frozen route table.

    Args:
        router: Optional router that already holds extra routes. The demo
                routes are appended after them, so earlier registrations
                win ties.

    Returns:
        The immutable RouteTable to hand to HTTPServer.
    """
    return register_routes(router or Router()).build()
