"""
Compression codec for remote payloads.

JSON text is deflated with zlib and wrapped in URL-safe base64 so the result
can sit in a text-only JSON field.

This is not the LZString UTF-16 format the browser client writes. A shared
blob produced by that client cannot be read here and every fetch of it fails
with the decompression SyncError until this client saves over it. Uncompressed
legacy blobs are handled by the sync layer and never reach this module.
"""

import json
import zlib
import base64
import binascii
import logging
from typing import Any

from legal_secretary.config import log_event
from legal_secretary.errors import DecompressionError


def compress(payload: Any) -> str:
    """Serialize a JSON-compatible payload and compress it to text."""
    text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    raw = text.encode("utf-8")
    packed = base64.urlsafe_b64encode(zlib.compress(raw, 9)).decode("ascii")
    log_event(logging.DEBUG, "payload_compressed", raw_bytes=len(raw), packed_chars=len(packed))
    return packed


def decompress(text: str) -> Any:
    """Restore a payload produced by ``compress``."""
    if not isinstance(text, str) or not text.strip():
        raise DecompressionError("Compressed payload is empty")
    try:
        packed = base64.urlsafe_b64decode(text.strip().encode("ascii"))
        raw = zlib.decompress(packed)
        decoded = raw.decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError, zlib.error) as e:
        raise DecompressionError(f"Payload is not a compressed document: {e}") from e

    if not decoded:
        raise DecompressionError("Decompression result is empty")
    try:
        return json.loads(decoded)
    except ValueError as e:
        raise DecompressionError(f"Decompressed payload is not JSON: {e}") from e
