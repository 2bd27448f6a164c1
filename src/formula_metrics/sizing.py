"""Formula image sizing: payload → parser → normalizer → element attributes.

The parsing branch is resolved once per call into a `PayloadKind` from the
configured image format, save mode and whether the service answered with
image data (JSON response) or a legacy URL.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Final
from urllib.parse import unquote

from formula_metrics.config import SizingConfig
from formula_metrics.element import ImageElement
from formula_metrics.errors import MetricsParseError
from formula_metrics.metrics import FinalGeometry, RawMetrics, normalize_metrics
from formula_metrics.parse.b64 import decode_base64
from formula_metrics.parse.legacy_url import parse_legacy_url_metrics
from formula_metrics.parse.png import PNG_METRICS_PREFIX_BYTES, parse_png_metrics
from formula_metrics.parse.svg import parse_svg_metrics

SVG_DATA_URI_PREFIX: Final[str] = "data:image/svg+xml;charset=utf8,"
PNG_DATA_URI_PREFIX: Final[str] = "data:image/png;base64,"
_BASE64_MARKER: Final[str] = "base64,"


class PayloadKind(Enum):
    LEGACY_URL = "legacy_url"
    SVG_TEXT = "svg_text"
    SVG_BASE64 = "svg_base64"
    PNG_BASE64 = "png_base64"


class SizingState(Enum):
    IDLE = "idle"
    SELECTING_FORMAT = "selecting_format"
    PARSING = "parsing"
    NORMALIZING = "normalizing"
    DONE = "done"


def select_payload_kind(config: SizingConfig, json_response: bool) -> PayloadKind:
    if not json_response:
        return PayloadKind.LEGACY_URL
    if config.is_svg:
        return PayloadKind.SVG_BASE64 if config.is_base64 else PayloadKind.SVG_TEXT
    return PayloadKind.PNG_BASE64


def _strip_base64_header(payload: str) -> str:
    # Accept either bare base64 or a full `data:...;base64,` URI.
    idx = payload.find(_BASE64_MARKER)
    if idx < 0:
        return payload
    return payload[idx + len(_BASE64_MARKER) :]


def extract_metrics(payload: str, kind: PayloadKind) -> RawMetrics:
    """Run the parser for `kind`. Raises `MetricsParseError` on malformed input."""
    if kind is PayloadKind.LEGACY_URL:
        return parse_legacy_url_metrics(payload)
    if kind is PayloadKind.SVG_TEXT:
        return parse_svg_metrics(payload)
    if kind is PayloadKind.SVG_BASE64:
        svg_bytes = decode_base64(_strip_base64_header(payload))
        return parse_svg_metrics(svg_bytes.decode("utf-8", errors="replace"))
    png_prefix = decode_base64(_strip_base64_header(payload), PNG_METRICS_PREFIX_BYTES)
    return parse_png_metrics(png_prefix)


def apply_geometry(element: ImageElement, geometry: FinalGeometry) -> None:
    vertical_align = geometry.vertical_align
    element.set_attribute("width", str(geometry.width_px))
    element.set_attribute("height", str(geometry.height_px))
    if vertical_align is not None:
        element.set_style_property("vertical-align", vertical_align)


class ImageSizer:
    """Sizes formula images from the metrics embedded in their payloads."""

    def __init__(self, config: SizingConfig) -> None:
        self._log = logging.getLogger("formula_metrics.sizing")
        self._cfg = config
        self.state = SizingState.IDLE

    def set_config(self, config: SizingConfig) -> None:
        self._cfg = config

    def _enter(self, state: SizingState) -> None:
        self._log.debug("sizing_state %s -> %s", self.state.value, state.value)
        self.state = state

    def compute_geometry(
        self,
        payload: str,
        json_response: bool = True,
        *,
        kind: PayloadKind | None = None,
    ) -> FinalGeometry | None:
        """Return display geometry, or None when no metrics are available.

        Parse failures are logged and reported as None, the same as a payload
        that simply carries no metrics.
        """
        self.state = SizingState.IDLE
        self._enter(SizingState.SELECTING_FORMAT)
        if kind is None:
            kind = select_payload_kind(self._cfg, json_response)

        self._enter(SizingState.PARSING)
        try:
            raw = extract_metrics(payload, kind)
        except MetricsParseError as e:
            self._log.warning("metrics_parse_failed kind=%s error=%s", kind.value, e)
            self._enter(SizingState.DONE)
            return None

        self._enter(SizingState.NORMALIZING)
        geometry = normalize_metrics(raw)
        if geometry is None:
            self._log.debug("no_metrics_found kind=%s", kind.value)
        self._enter(SizingState.DONE)
        return geometry

    def set_img_size(
        self,
        element: ImageElement,
        payload: str,
        json_response: bool = True,
        *,
        kind: PayloadKind | None = None,
    ) -> FinalGeometry | None:
        geometry = self.compute_geometry(payload, json_response, kind=kind)
        if geometry is None:
            return None
        apply_geometry(element, geometry)
        self._log.debug(
            "geometry_applied width=%s height=%s vertical_align=%s",
            geometry.width_px,
            geometry.height_px,
            geometry.vertical_align,
        )
        return geometry

    def fix_after_resize(self, element: ImageElement) -> FinalGeometry | None:
        """Drop an external resize and re-derive size from the image's own data."""
        element.remove_attribute("style")
        element.remove_attribute("width")
        element.remove_attribute("height")
        # Keep host stylesheets from scaling the image back down.
        element.set_style_property("max-width", "none")

        src = element.src
        if "data:image" not in src:
            return self.set_img_size(element, src, json_response=False)

        if self._cfg.is_svg:
            if self._cfg.is_base64:
                return self.set_img_size(element, src, kind=PayloadKind.SVG_BASE64)
            svg_text = unquote(src[len(SVG_DATA_URI_PREFIX) :])
            return self.set_img_size(element, svg_text, kind=PayloadKind.SVG_TEXT)
        return self.set_img_size(element, src[len(PNG_DATA_URI_PREFIX) :], kind=PayloadKind.PNG_BASE64)
