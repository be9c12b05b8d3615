"""
=============================================================================
ENDPOINT HANDLERS
=============================================================================

The closed set of behaviours the route table can point at. Every handler
is an EndpointHandler with the same call shape:

    handler.handle(request, match, directory) -> HTTPResponse

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │  Handler             │ Behaviour                                    │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │  RootHandler         │ 200, empty body                              │
    │  EchoHandler         │ path remainder as text/plain, gzip on demand │
    │  UserAgentHandler    │ User-Agent header as text/plain              │
    │  PreflightHandler    │ 204 + CORS headers                           │
    │  FileReadHandler     │ file bytes or 404                            │
    │  FileCreateHandler   │ write body, 201 or 500                       │
    └──────────────────────┴──────────────────────────────────────────────┘

=============================================================================
"""

from .base import EndpointHandler
from .echo import RootHandler, EchoHandler, UserAgentHandler, PreflightHandler
from .files import FileReadHandler, FileCreateHandler, safe_join

__all__ = [
    "EndpointHandler",
    "RootHandler",
    "EchoHandler",
    "UserAgentHandler",
    "PreflightHandler",
    "FileReadHandler",
    "FileCreateHandler",
    "safe_join",
]
