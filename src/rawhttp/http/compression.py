"""
=============================================================================
GZIP CONTENT ENCODING
=============================================================================

Content negotiation for the echo endpoint: if the client says it can
decode gzip, the body is compressed before it goes on the wire.

=============================================================================
HOW CONTENT NEGOTIATION WORKS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      Content Negotiation                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Client Request:                                                   │
    │   ───────────────                                                   │
    │   GET /echo/abc HTTP/1.1                                            │
    │   Accept-Encoding: gzip, deflate       ← "I can decode these"       │
    │                                                                      │
    │   Server Response:                                                  │
    │   ────────────────                                                  │
    │   HTTP/1.1 200 OK                                                   │
    │   Content-Encoding: gzip               ← "I used gzip"              │
    │   Content-Length: 23                   ← COMPRESSED size            │
    │                                                                      │
    │   [gzip header | DEFLATE data | CRC32 + size trailer]               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The check is a plain substring test, matching what the demo clients send:
"gzip", "gzip, deflate", "br, gzip" all qualify. Quality values
(q=0) are not interpreted.

Note that gzip adds ~20 bytes of framing, so a tiny body such as "abc"
grows when compressed. The echo endpoint compresses anyway: a client that
asked for gzip gets gzip.

=============================================================================
"""

import gzip


GZIP = "gzip"


def accepts_gzip(accept_encoding: str) -> bool:
    """Check whether an Accept-Encoding value mentions gzip."""
    return GZIP in accept_encoding


def gzip_encode(body: bytes, level: int = 9) -> bytes:
    """
    Compress a body as a complete gzip stream.

    gzip.compress() writes the header, the DEFLATE data and the CRC32/size
    trailer, so the result decodes with any standard gzip reader.

    Args:
        body: Raw bytes to compress.
        level: Compression level 1-9 (9 = smallest output).

    Returns:
        The gzip-encoded bytes.
    """
    return gzip.compress(body, compresslevel=level)
