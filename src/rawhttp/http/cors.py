"""
=============================================================================
CORS DEFAULT HEADERS
=============================================================================

Every response this server writes carries the same three CORS headers,
so a browser page on another origin can call the demo endpoints.

=============================================================================
CORS IN ONE PICTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Cross-origin request from a page                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Browser (https://app.example)          rawhttp (localhost:4221)   │
    │       │                                        │                     │
    │       │  OPTIONS /files/a.txt  (preflight)     │                     │
    │       │ ─────────────────────────────────────► │                     │
    │       │                                        │                     │
    │       │  204 No Content                        │                     │
    │       │  Access-Control-Allow-Origin: *        │                     │
    │       │  Access-Control-Allow-Methods: ...     │                     │
    │       │  Access-Control-Allow-Headers: ...     │                     │
    │       │ ◄───────────────────────────────────── │                     │
    │       │                                        │                     │
    │       │  POST /files/a.txt  (actual request)   │                     │
    │       │ ─────────────────────────────────────► │                     │
    │       │                                        │                     │
    │       │  201 Created  + same CORS headers      │                     │
    │       │ ◄───────────────────────────────────── │                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The defaults are merged UNDER whatever a handler sets: if a handler
supplies its own Access-Control-Allow-Origin, the handler's value wins.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping


@dataclass(frozen=True)
class CORSConfig:
    """
    The CORS policy applied to every response.

    The defaults are wide open, which is what a local demo server wants.
    """

    allow_origin: str = "*"
    allow_methods: List[str] = field(
        default_factory=lambda: ["GET", "POST", "OPTIONS"]
    )
    allow_headers: List[str] = field(
        default_factory=lambda: ["Content-Type", "Accept", "Accept-Encoding", "X-Requested-With"]
    )

    def headers(self) -> Dict[str, str]:
        """Render the policy as response headers."""
        return {
            "Access-Control-Allow-Origin": self.allow_origin,
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
        }


DEFAULT_CORS = CORSConfig()


def with_cors_defaults(
    headers: Mapping[str, str],
    config: CORSConfig = DEFAULT_CORS,
) -> Dict[str, str]:
    """
    Merge caller headers over the CORS defaults.

    Args:
        headers: Headers chosen by the handler.
        config: CORS policy supplying the defaults.

    Returns:
        A new dict: CORS defaults first, then the caller's headers
        (overriding any default with the same name).

    Example:
        with_cors_defaults({"Access-Control-Allow-Origin": "https://a.test"})
        # → Allow-Origin is "https://a.test", the other two are defaults
    """
    merged = config.headers()
    merged.update(headers)
    return merged
