"""Producing-side helpers: embed formula metrics in images and build data URIs.

These mirror what the rendering service emits, so sized output can be
reproduced locally (fixtures, the CLI, round-trip checks).
"""

from __future__ import annotations

import base64
from io import BytesIO
from typing import Final
from urllib.parse import quote

from PIL import Image
from PIL.PngImagePlugin import PngInfo

from formula_metrics.sizing import PNG_DATA_URI_PREFIX, SVG_DATA_URI_PREFIX

BASELINE_CHUNK: Final[bytes] = b"baSE"
_UINT32_MAX: Final[int] = 0xFFFFFFFF


def stamp_formula_png(image: Image.Image, *, baseline: int, dpi: int | None = None) -> bytes:
    """Encode `image` as PNG with a `baSE` chunk and, optionally, `pHYs`.

    Pillow writes private chunks directly after `IHDR` and `pHYs` after them,
    so all metrics land inside the leading 88 bytes.
    """
    if not 0 <= baseline <= _UINT32_MAX:
        raise ValueError("baseline must fit in an unsigned 32-bit integer")
    info = PngInfo()
    info.add(BASELINE_CHUNK, baseline.to_bytes(4, "big"))

    params: dict[str, object] = {"pnginfo": info}
    if dpi:
        params["dpi"] = (dpi, dpi)

    buf = BytesIO()
    image.save(buf, format="PNG", **params)
    return buf.getvalue()


def blank_formula_png(width: int, height: int, *, baseline: int, dpi: int | None = None) -> bytes:
    """Transparent placeholder of the given size carrying formula metrics."""
    with Image.new("RGBA", (width, height), (0, 0, 0, 0)) as im:
        return stamp_formula_png(im, baseline=baseline, dpi=dpi)


def png_data_uri(png_bytes: bytes) -> str:
    return PNG_DATA_URI_PREFIX + base64.b64encode(png_bytes).decode("ascii")


def svg_data_uri(svg_text: str) -> str:
    return SVG_DATA_URI_PREFIX + quote(svg_text, safe="")
