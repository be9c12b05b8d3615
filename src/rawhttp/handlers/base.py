"""
Base class shared by every endpoint handler.

All handlers have the same call shape, so the route table can hold any of
them and call them the same way:

    response = handler.handle(request, match, directory)

    request    the parsed HTTPRequest (frozen)
    match      the RouteMatch; match.remainder is the path after the
               route pattern ("/echo/abc" → "abc")
    directory  root of the served file tree (only the file handlers use it)
"""

from abc import ABC, abstractmethod
from pathlib import Path

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..http.router import RouteMatch


class EndpointHandler(ABC):
    """
    One endpoint behaviour.

    Subclasses must return exactly one HTTPResponse. They never write to
    the socket themselves: the connection loop serializes and sends what
    they return.
    """

    @abstractmethod
    def handle(self, request: HTTPRequest, match: RouteMatch, directory: Path) -> HTTPResponse:
        """Produce the response for a matched request."""

    @property
    def name(self) -> str:
        """Handler name for logging."""
        return self.__class__.__name__

    def __repr__(self) -> str:
        return f"{self.name}()"
