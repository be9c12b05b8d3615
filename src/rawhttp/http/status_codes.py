"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server actually emits, with their reason phrases.

=============================================================================
WHAT THE SERVER SENDS
=============================================================================

    ┌────────┬──────────────────────────────┬──────────────────────────────┐
    │  Code  │ Reason phrase                │ Sent when                    │
    ├────────┼──────────────────────────────┼──────────────────────────────┤
    │  200   │ OK                           │ root, echo, user-agent,      │
    │        │                              │ file read                    │
    │  201   │ Created                      │ file written                 │
    │  204   │ No Content                   │ OPTIONS preflight            │
    │  404   │ Not Found                    │ no route, unreadable file    │
    │  500   │ Internal Server Error        │ file write failed, handler   │
    │        │                              │ crashed                      │
    └────────┴──────────────────────────────┴──────────────────────────────┘

The status line on the wire is "HTTP/1.1 <code> <phrase>", e.g.:

    HTTP/1.1 201 Created\r\n

HTTPStatus.CREATED.text gives "201 Created", which is exactly the part
after the version token.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    Using IntEnum means a status compares equal to its integer code
    (HTTPStatus.NOT_FOUND == 404) while still carrying a readable name.
    """

    # 2xx Success
    OK = 200                     # Standard success response
    CREATED = 201                # File written
    NO_CONTENT = 204             # Preflight answered, nothing else to say

    # 4xx Client Errors
    NOT_FOUND = 404              # No route, or file could not be read

    # 5xx Server Errors
    INTERNAL_SERVER_ERROR = 500  # Write failure or handler crash

    @property
    def phrase(self) -> str:
        """Get the standard reason phrase for this status code."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        """Check if this is a 2xx status."""
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        """Check if this is a 4xx or 5xx status."""
        return self >= 400

    @property
    def text(self) -> str:
        """Code and phrase together, e.g. "201 Created"."""
        return f"{self.value} {self.phrase}"


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
