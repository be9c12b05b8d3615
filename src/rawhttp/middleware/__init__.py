"""
Middleware wrapped around route dispatch.

Only access logging ships here; CORS headers and gzip are applied by the
response writer and the echo handler directly.
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import AccessLogMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "AccessLogMiddleware",
    "RequestLog",
]
