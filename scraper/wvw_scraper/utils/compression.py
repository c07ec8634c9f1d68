"""Gzip helpers for stored JSON payloads.

History snapshots hold every match of a region and are written every
interval, so they are stored gzip-compressed. Readers accept both forms.
"""

from __future__ import annotations

import gzip

GZIP_MAGIC = b"\x1f\x8b"


def compress_payload(payload: str) -> bytes:
    return gzip.compress(payload.encode("utf-8"))


def decompress_payload(raw: bytes | str) -> str:
    """Return the JSON text of a stored payload, compressed or not."""
    if isinstance(raw, str):
        return raw
    if raw.startswith(GZIP_MAGIC):
        return gzip.decompress(raw).decode("utf-8")
    return raw.decode("utf-8")
