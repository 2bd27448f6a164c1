"""Metrics extraction from the leading chunks of a rendered formula PNG.

The rendering service stores the formula geometry in three chunks:
`IHDR` (width/height), the private `baSE` chunk (baseline) and `pHYs`
(resolution in pixels per meter). Everything else is skipped by length.
"""

from __future__ import annotations

import logging
import math
from typing import Final

from formula_metrics.metrics import RawMetrics
from formula_metrics.parse.cursor import ByteCursor

# Signature + IHDR + baSE + pHYs all fit within this many bytes.
PNG_METRICS_PREFIX_BYTES: Final[int] = 88

PNG_SIGNATURE_LEN: Final[int] = 8
CRC_LEN: Final[int] = 4

CHUNK_IHDR: Final[int] = 0x49484452
CHUNK_BASELINE: Final[int] = 0x62615345
CHUNK_PHYS: Final[int] = 0x70485973

INCHES_PER_METER: Final[float] = 39.37

_log = logging.getLogger("formula_metrics.png")


def parse_png_metrics(data: bytes) -> RawMetrics:
    """Walk PNG chunks and collect width, height, baseline and DPI.

    `data` may be a prefix of the image. A chunk header or skipped chunk that
    runs past the end of `data` ends the walk; a truncated `IHDR`/`baSE`/`pHYs`
    body raises `OutOfBounds`.
    """
    cur = ByteCursor(data)
    cur.skip(PNG_SIGNATURE_LEN)

    width: int | None = None
    height: int | None = None
    baseline: int | None = None
    dpi: int | None = None

    # A chunk header cut off by the end of `data` ends the walk.
    while cur.remaining >= 8:
        length = cur.read_uint32_be()
        chunk_type = cur.read_uint32_be()
        if chunk_type == CHUNK_IHDR:
            width = cur.read_uint32_be()
            height = cur.read_uint32_be()
            # bit depth, color type, compression, filter, interlace
            cur.skip(5)
        elif chunk_type == CHUNK_BASELINE:
            baseline = cur.read_uint32_be()
        elif chunk_type == CHUNK_PHYS:
            ppm_x = cur.read_uint32_be()
            dpi = math.floor(ppm_x / INCHES_PER_METER + 0.5)
            cur.skip(4)  # Y pixels per unit
            cur.skip(1)  # unit specifier
        else:
            if length + CRC_LEN > cur.remaining:
                _log.debug("png_walk_stopped chunk=0x%08X offset=%d", chunk_type, cur.position)
                break
            cur.skip(length)
        cur.skip(CRC_LEN)

    if width is None:
        return RawMetrics()
    return RawMetrics(width=width, height=height, baseline=baseline, dpi=dpi)
