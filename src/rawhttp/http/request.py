"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the bytes delivered by ONE recv() call into a structured HTTPRequest.

This parser is deliberately literal. It does not try to be RFC 7230
compliant: it trusts the bytes it was given, keeps header names exactly
as the client spelled them, and never looks at Content-Length.

=============================================================================
WHAT ONE READ LOOKS LIKE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     ONE RECEIVED BUFFER                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ HEADER BLOCK ─────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n    ← request line         │ │
    │  │    ──┬─ ───────┬───────── ───┬────                             │ │
    │  │      │         │             │                                  │ │
    │  │    Method     Path      (ignored)                               │ │
    │  │                                                                 │ │
    │  │    Host: localhost:4221\r\n              ← "Name: Value"        │ │
    │  │    User-Agent: curl/8.4.0\r\n                                  │ │
    │  │    garbage line without separator\r\n   ← silently skipped     │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │    \r\n\r\n                                 ← FIRST occurrence only │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    whatever bytes arrived in the same read (may be binary,     │ │
    │  │    may even contain another \r\n\r\n)                          │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULES
=============================================================================

1. SPLIT ON THE FIRST \r\n\r\n
   - Before: header block. After: body.
   - No separator at all? The whole buffer is the header block and the
     body is empty.

2. REQUEST LINE
   - First line of the header block, split on single spaces.
   - Fewer than two tokens, or an empty method/path → invalid request.
   - The version token is kept if present but never validated.

3. HEADERS
   - A line is a header only if it contains ": " (colon + space).
   - Name = text before the FIRST ": ", value = everything after.
   - Names are CASE-SENSITIVE: "User-Agent" and "user-agent" are
     different keys. Lookups elsewhere use the canonical spellings
     ("User-Agent", "Accept-Encoding", "Connection").
   - Duplicate names: the last line wins.

4. BODY
   - Never validated against Content-Length. A body bigger than one
     read is simply truncated to what arrived.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


HEADER_BODY_SEPARATOR = b"\r\n\r\n"
LINE_SEPARATOR = "\r\n"
HEADER_SEPARATOR = ": "


class HTTPParseError(Exception):
    """
    Raised when the received bytes do not form a usable request.

    The connection loop treats this as "drop these bytes and read again":
    no error response is ever sent for a malformed request.
    """


@dataclass(frozen=True)
class HTTPRequest:
    """
    Represents one parsed HTTP request.

    =========================================================================
    REQUEST LIFECYCLE
    =========================================================================

        recv() bytes             HTTPRequest               Handler
        (one read)   ──parse──►   (frozen)    ──route──►   .handle()
           │                         │                        │
        b"GET /echo/hi ..."    HTTPRequest(              EchoHandler
                                 method="GET",
                                 path="/echo/hi",
                                 headers={...},
                                 body=b"")

    The object is frozen: nothing downstream (router, handlers,
    middleware) can rewrite the request it was given.

    =========================================================================
    """

    method: str                                          # "GET", "POST", ...
    path: str                                            # Raw, not unescaped
    headers: Dict[str, str] = field(default_factory=dict)  # Case-sensitive names
    body: bytes = b""                                    # Bytes from the same read
    version: str = ""                                    # Third token, unchecked
    client_address: Tuple[str, int] = ("", 0)            # Peer (ip, port)

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value by its exact name.

        Unlike most HTTP libraries, this lookup is case-sensitive:

            request.get_header("User-Agent")   # ✓ canonical spelling
            request.get_header("user-agent")   # only if sent that way
        """
        return self.headers.get(name, default)

    @property
    def user_agent(self) -> str:
        """The User-Agent header, or "" if the client did not send one."""
        return self.get_header("User-Agent")

    @property
    def accept_encoding(self) -> str:
        """The Accept-Encoding header, or ""."""
        return self.get_header("Accept-Encoding")

    @property
    def wants_close(self) -> bool:
        """
        Check whether the client asked to close the connection.

        Only the exact value "close" counts. "Close" or "close, TE" keep
        the connection alive, just like a missing header does.
        """
        return self.headers.get("Connection") == "close"


class RequestParser:
    """
    Parses the bytes of a single read into an HTTPRequest.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        Raw bytes (one recv)
              │
              ▼
        ┌───────────────────────────────────────────────────────────────┐
        │  1. Split at first \r\n\r\n  → header block | body             │
        │  2. Decode header block (UTF-8, undecodable bytes replaced)    │
        │  3. Request line → method, path, [version]                     │
        │     └── < 2 tokens or empty method/path → HTTPParseError       │
        │  4. Header lines containing ": " → headers dict (last wins)    │
        │  5. Build the frozen HTTPRequest                               │
        └───────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest

    The parser is stateless, so one instance is shared by every
    connection worker.

    ==========================================================================
    """

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw request bytes.

        Args:
            data: Bytes from one recv() call.
            client_address: Peer (ip, port), carried along for logging.

        Returns:
            The parsed HTTPRequest.

        Raises:
            HTTPParseError: If there is no usable method and path.
        """
        # ─────────────────────────────────────────────────────────────────
        # STEP 1: Header block / body split
        # ─────────────────────────────────────────────────────────────────
        # partition() splits on the FIRST separator only, so a body that
        # itself contains \r\n\r\n stays intact.
        header_block, _, body = data.partition(HEADER_BODY_SEPARATOR)

        lines = header_block.decode("utf-8", errors="replace").split(LINE_SEPARATOR)

        # ─────────────────────────────────────────────────────────────────
        # STEP 2: Request line
        # ─────────────────────────────────────────────────────────────────
        method, path, version = self._parse_request_line(lines[0])

        # ─────────────────────────────────────────────────────────────────
        # STEP 3: Headers
        # ─────────────────────────────────────────────────────────────────
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            path=path,
            headers=headers,
            body=body,
            version=version,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> Tuple[str, str, str]:
        """
        Split the request line on single spaces.

            "GET /echo/abc HTTP/1.1".split(" ")
              → ["GET", "/echo/abc", "HTTP/1.1"]

        Only the first two tokens matter. Note that two consecutive spaces
        produce an empty token, so "GET  /" has an empty path and is
        rejected.
        """
        tokens = line.split(" ")
        if len(tokens) < 2:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, path = tokens[0], tokens[1]
        if not method or not path:
            raise HTTPParseError(f"Missing method or path: {line!r}")

        version = tokens[2] if len(tokens) > 2 else ""
        return method, path, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse "Name: Value" lines into a dict.

        Lines without ": " are skipped. Values are kept verbatim (no
        stripping), names are kept in the client's casing.
        """
        headers: Dict[str, str] = {}

        for line in lines:
            name, separator, value = line.partition(HEADER_SEPARATOR)
            if not separator:
                continue  # Not a header line, ignore it
            headers[name] = value  # Duplicate names: last one wins

        return headers


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

_default_parser = RequestParser()


def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0)
) -> HTTPRequest:
    """
    Parse request bytes with the shared default parser.

    Example:
        request = parse_request(b"GET / HTTP/1.1\\r\\n\\r\\n")
        request.method  # "GET"
    """
    return _default_parser.parse(data, client_address)
