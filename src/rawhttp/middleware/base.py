"""
=============================================================================
MIDDLEWARE BASE
=============================================================================

A middleware sits between the connection loop and route dispatch:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   connection loop                                                    │
    │        │  request                                                    │
    │        ▼                                                             │
    │   ┌──────────────────────┐                                           │
    │   │ AccessLogMiddleware  │ ──► times the call, logs one line         │
    │   └──────────┬───────────┘                                           │
    │              ▼                                                       │
    │   ┌──────────────────────┐                                           │
    │   │ routes.dispatch()    │ ──► handler or 404                        │
    │   └──────────┬───────────┘                                           │
    │              │  response flows back UP                               │
    │              ▼                                                       │
    │   connection loop writes it                                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every middleware has the same call shape:

    middleware(request, next) -> response

and decides whether (and how) to call next(request).

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Base class for all middleware.

    Subclasses implement __call__; they may inspect the request, call
    next, and inspect or replace the response.
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process a request.

        Args:
            request: The parsed request.
            next: The rest of the chain (eventually route dispatch).

        Returns:
            The response to send.
        """
        pass

    @property
    def name(self) -> str:
        """Name used in logs."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    An ordered list of middleware, folded around a final handler.

    The first middleware added is the outermost:

        pipeline.add(A).add(B)
        pipeline.wrap(handler)   # A → B → handler
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Append a middleware. Returns self for chaining."""
        self._middleware.append(middleware)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap a handler with all middleware in the pipeline.

        We wrap in REVERSE order so that the first-added middleware is
        the outermost wrapper.
        """
        current = handler

        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)

        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler
    ) -> NextHandler:
        # Closure over middleware and next_handler
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)

        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
