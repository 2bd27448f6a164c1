"""Raw formula metrics and their normalization to display geometry."""

from __future__ import annotations

import math
from dataclasses import dataclass

Number = int | float

# CSS reference resolution; metrics captured at another DPI are rescaled to it.
REFERENCE_DPI = 96


@dataclass(frozen=True)
class RawMetrics:
    """Fields recovered from a payload. Each one is independently optional.

    Absence of `width` means the payload carried no usable metrics.
    """

    width: Number | None = None
    height: Number | None = None
    baseline: Number | None = None
    dpi: Number | None = None

    @property
    def has_metrics(self) -> bool:
        return self.width is not None


@dataclass(frozen=True)
class FinalGeometry:
    """Display size and vertical alignment for a formula image.

    `vertical_offset` equals `-(height - baseline)` and is None when the payload
    carried no baseline; callers then keep the default vertical alignment.
    """

    width: float
    height: float
    vertical_offset: float | None = None

    @property
    def width_px(self) -> int:
        return int(self.width)

    @property
    def height_px(self) -> int:
        return int(self.height)

    @property
    def vertical_align(self) -> str | None:
        if self.vertical_offset is None:
            return None
        # Literal leading "-": the style carries height - baseline, negated.
        return f"-{format_css_number(-self.vertical_offset)}px"


def parse_number(text: str) -> Number | None:
    """Parse an attribute or query value; None when it is not a finite number."""
    value = text.strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        num = float(value)
    except ValueError:
        return None
    if not math.isfinite(num):
        return None
    return int(num) if num.is_integer() else num


def format_css_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")


def normalize_metrics(raw: RawMetrics) -> FinalGeometry | None:
    """Convert raw metrics into display geometry at the 96 DPI reference.

    Returns None when no width was found.
    """
    if raw.width is None:
        return None

    width = float(raw.width)
    height = float(raw.height) if raw.height is not None else 0.0
    baseline = float(raw.baseline) if raw.baseline is not None else None

    if raw.dpi:
        scale = REFERENCE_DPI / float(raw.dpi)
        width *= scale
        height *= scale
        if baseline is not None:
            baseline *= scale

    offset = -(height - baseline) if baseline is not None else None
    return FinalGeometry(width=width, height=height, vertical_offset=offset)
