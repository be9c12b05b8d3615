"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

One log line per request that reached dispatch:

    127.0.0.1 "GET /echo/hello" 200 5 0.21ms
    └───────┘  └────────────┘  └─┘ └┘ └────┘
    client ip  method + path   status body duration
                               bytes

Lines go to the "rawhttp.access" logger, so they can be silenced or
routed separately from the server's own diagnostics:

    logging.getLogger("rawhttp.access").setLevel(logging.WARNING)

Malformed requests never reach dispatch and so are never access-logged.
The middleware only observes: the response is returned untouched.

=============================================================================
"""

import logging
import time
from dataclasses import dataclass

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("rawhttp.access")


@dataclass
class RequestLog:
    """
    Structured access log entry.

    status_code is a plain int so the line reads "200", not the enum.
    """

    client_ip: str
    method: str
    path: str
    status_code: int
    content_length: int
    duration_ms: float

    def to_text(self) -> str:
        return (
            f'{self.client_ip} "{self.method} {self.path}" '
            f'{self.status_code} {self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogMiddleware(Middleware):
    """
    Request logging middleware.

    Should be FIRST in the pipeline so its timing covers everything
    downstream. If next() raises, the failure is logged and the
    exception propagates unchanged; the connection loop decides what to
    send.

    Usage:
        pipeline.add(AccessLogMiddleware())
        pipeline.add(AccessLogMiddleware(log_level=logging.DEBUG))
    """

    def __init__(self, log_level: int = logging.INFO):
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        entry = RequestLog(
            client_ip=request.client_address[0],
            method=request.method,
            path=request.path,
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
        )
        logger.log(self.log_level, entry.to_text())

        return response
