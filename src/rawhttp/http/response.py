"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Handlers describe a response (status, a few headers, a body). This module
turns that description into the exact bytes that go on the wire, adding
the headers that are computed rather than chosen.

=============================================================================
HTTP RESPONSE STRUCTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP RESPONSE ON THE WIRE                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  HTTP/1.1 200 OK\r\n                         ← status line          │
    │                                                                      │
    │  Access-Control-Allow-Origin: *\r\n          ┐                      │
    │  Access-Control-Allow-Methods: ...\r\n       │ CORS defaults        │
    │  Access-Control-Allow-Headers: ...\r\n       ┘ (handler may override)│
    │  Content-Type: text/plain\r\n                ← from the handler     │
    │  Content-Length: 5\r\n                       ← ALWAYS computed      │
    │  Connection: close\r\n                       ← only if the request  │
    │                                                 asked for it        │
    │  \r\n                                        ← end of headers       │
    │                                                                      │
    │  hello                                       ← body (may be binary) │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
COMPUTED HEADERS
=============================================================================

    ┌────────────────────┬────────────────────────────────────────────────┐
    │  Header            │ Rule                                           │
    ├────────────────────┼────────────────────────────────────────────────┤
    │  Access-Control-*  │ Defaults merged in first; a handler value for  │
    │                    │ the same name is kept                          │
    │  Content-Length    │ len(body), overriding anything a handler set   │
    │  Connection        │ "close" echoed iff the request sent exactly    │
    │                    │ "Connection: close"                            │
    └────────────────────┴────────────────────────────────────────────────┘

Header ORDER is not meaningful to HTTP clients, and tests never rely on it.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .cors import CORSConfig, DEFAULT_CORS, with_cors_defaults
from .request import HTTPRequest
from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"


@dataclass
class HTTPResponse:
    """
    A response produced by a handler.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          to_bytes(request)         Connection
        HTTPResponse    ─────►   adds computed    ─────►   sendall()
            │                    headers                       │
        HTTPResponse(            b"HTTP/1.1 200 OK\\r\\n      (one send)
          status=OK,               Content-Length: 5 ..."
          headers={...},
          body=b"hello")

    A response is built, serialized once and thrown away; nothing keeps a
    reference to it after the send.

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def status_line(self) -> str:
        """
        The first line of the response.

        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{HTTP_VERSION} {self.status.text}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a header, returning self for chaining.

        Setting Content-Length here has no effect on the wire: the writer
        always recomputes it from the body.
        """
        self.headers[name] = value
        return self

    def final_headers(
        self,
        request: Optional[HTTPRequest] = None,
        cors: CORSConfig = DEFAULT_CORS,
    ) -> Dict[str, str]:
        """
        Compute the full header set that will be written.

        Args:
            request: The request being answered (for the Connection echo).
            cors: CORS policy supplying the default headers.

        Returns:
            CORS defaults, then handler headers, then Content-Length and,
            if requested, Connection: close.
        """
        headers = with_cors_defaults(self.headers, cors)

        # Content-Length is never trusted from the handler, in any casing
        for name in [n for n in headers if n.lower() == "content-length"]:
            del headers[name]
        headers["Content-Length"] = str(len(self.body))

        if request is not None and request.wants_close:
            headers["Connection"] = "close"

        return headers

    def to_bytes(
        self,
        request: Optional[HTTPRequest] = None,
        cors: CORSConfig = DEFAULT_CORS,
    ) -> bytes:
        """
        Serialize the response for a single socket send.

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 201 Created\\r\\n      ← status line
            Name: Value\\r\\n               ← one line per header
            ...
            \\r\\n                          ← blank line
            <body bytes>

        =====================================================================

        Args:
            request: The originating request, if any.
            cors: CORS policy supplying the default headers.

        Returns:
            Complete response bytes ready for socket.sendall().
        """
        lines = [self.status_line]
        for name, value in self.final_headers(request, cors).items():
            lines.append(f"{name}: {value}")

        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("utf-8") + self.body


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Handlers mostly need one of a handful of shapes. These helpers keep the
# handler code short:
#
#     return ok(content, content_type="text/plain")
#     return not_found()
#
# =============================================================================

def _to_bytes(body: Union[str, bytes]) -> bytes:
    return body.encode("utf-8") if isinstance(body, str) else body


def ok(body: Union[str, bytes] = b"", content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    Args:
        body: Response body (str is encoded as UTF-8).
        content_type: Content-Type header to set, if any.
    """
    response = HTTPResponse(status=HTTPStatus.OK, body=_to_bytes(body))
    if content_type:
        response.set_header("Content-Type", content_type)
    return response


def created() -> HTTPResponse:
    """Create a 201 Created response with an empty body."""
    return HTTPResponse(status=HTTPStatus.CREATED)


def no_content() -> HTTPResponse:
    """Create a 204 No Content response."""
    return HTTPResponse(status=HTTPStatus.NO_CONTENT)


def not_found() -> HTTPResponse:
    """
    Create a 404 Not Found response.

    The body is always empty: the server never explains WHY something
    was not found (missing, unreadable and outside-the-root all look
    the same to the client).
    """
    return HTTPResponse(status=HTTPStatus.NOT_FOUND)


def internal_error() -> HTTPResponse:
    """Create a 500 Internal Server Error response with an empty body."""
    return HTTPResponse(status=HTTPStatus.INTERNAL_SERVER_ERROR)
