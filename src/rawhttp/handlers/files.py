"""
=============================================================================
FILE READ / FILE CREATE ENDPOINTS
=============================================================================

    GET  /files/<name>   → read <directory>/<name>
    POST /files/<name>   → write the request body to <directory>/<name>

=============================================================================
PATH TRAVERSAL
=============================================================================

The router matches "/files/" byte-wise, so these all reach the handlers:

    GET /files/../../etc/passwd
    GET /files//etc/passwd
    POST /files/../server.py

Keeping the result inside the served directory is done HERE, by
safe_join():

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         safe_join()                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   root     = /srv/files            (resolved once)                  │
    │   name     = "../../etc/passwd"                                     │
    │                                                                      │
    │   (root / name).resolve()  → /etc/passwd                            │
    │   is it inside root?       → NO  → refuse (None)                    │
    │                                                                      │
    │   name     = "notes/today.txt"                                      │
    │   (root / name).resolve()  → /srv/files/notes/today.txt             │
    │   is it inside root?       → yes → use it                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

resolve() also follows symlinks, so a link pointing out of the tree is
refused the same way.

=============================================================================
FAILURE MAPPING
=============================================================================

    GET:   missing, permission denied, is a directory, outside root,
           anything else         → 404, empty body (no distinction)
    POST:  any write failure, outside root
                                 → 500, empty body

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from .base import EndpointHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, created, internal_error, not_found, ok
from ..http.router import RouteMatch


logger = logging.getLogger(__name__)


OCTET_STREAM = "application/octet-stream"


def safe_join(root: Path, name: str) -> Optional[Path]:
    """
    Join a client-supplied name onto root without escaping it.

    Args:
        root: The served directory.
        name: Relative name taken from the request path.

    Returns:
        The resolved path, or None if it would land outside root.

    Example:
        safe_join(Path("/srv"), "a/b.txt")      # Path("/srv/a/b.txt")
        safe_join(Path("/srv"), "../etc/passwd")  # None
    """
    base = root.resolve()

    try:
        # A leading "/" would make pathlib discard base entirely
        candidate = (base / name.lstrip("/")).resolve()
    except (OSError, ValueError, RuntimeError) as e:  # NUL byte, symlink loop
        logger.debug(f"Unresolvable name {name!r}: {e}")
        return None

    try:
        candidate.relative_to(base)
    except ValueError:
        logger.warning(f"Path traversal attempt: {name!r}")
        return None

    return candidate


class FileReadHandler(EndpointHandler):
    """
    GET /files/<name> → the file's raw bytes.

    Every failure becomes 404: a directory, a missing file, a file the
    process may not read and a name outside the root are indistinguishable
    to the client.
    """

    def handle(self, request: HTTPRequest, match: RouteMatch, directory: Path) -> HTTPResponse:
        path = safe_join(directory, match.remainder)
        if path is None:
            return not_found()

        try:
            content = path.read_bytes()
        except OSError as e:
            logger.debug(f"Cannot read {path}: {e}")
            return not_found()

        return ok(content, content_type=OCTET_STREAM)


class FileCreateHandler(EndpointHandler):
    """
    POST /files/<name> → write the body, creating or truncating the file.

    The body is whatever arrived in the same read as the headers. Parent
    directories are NOT created; writing into a missing directory is a
    write failure like any other.
    """

    def handle(self, request: HTTPRequest, match: RouteMatch, directory: Path) -> HTTPResponse:
        path = safe_join(directory, match.remainder)
        if path is None:
            return internal_error()

        try:
            path.write_bytes(request.body)
        except OSError as e:
            logger.warning(f"Cannot write {path}: {e}")
            return internal_error()

        logger.debug(f"Wrote {len(request.body)} bytes to {path}")
        return created()
