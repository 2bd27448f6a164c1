"""Base64 decoding with an optional output cap."""

from __future__ import annotations

import base64
import binascii
import re

from formula_metrics.errors import InvalidEncoding

_WHITESPACE_RE = re.compile(r"\s+")


def decode_base64(text: str, max_length: int | None = None) -> bytes:
    """Decode standard base64 text into bytes.

    When `max_length` is given only the leading `ceil(max_length / 3) * 4`
    characters are decoded, so a large image is never decoded in full just to
    read its first chunks. Missing `=` padding is tolerated.
    """
    cleaned = _WHITESPACE_RE.sub("", text)
    if max_length is not None:
        if max_length < 0:
            raise ValueError("max_length must be >= 0")
        cleaned = cleaned[: -(-max_length // 3) * 4]

    body = cleaned.rstrip("=")
    if len(cleaned) - len(body) > 2 or len(body) % 4 == 1:
        raise InvalidEncoding(f"invalid base64 length ({len(cleaned)} chars)")
    padded = body + "=" * (-len(body) % 4)

    try:
        decoded = base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidEncoding(f"invalid base64: {e}") from e

    if max_length is not None:
        return decoded[:max_length]
    return decoded
