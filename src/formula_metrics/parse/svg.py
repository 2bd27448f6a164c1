"""Metrics extraction from rendering-service SVG markup.

This is a first-match substring scan over the service's fixed output, not an
XML parse: the first `width="` anywhere in the text wins.
"""

from __future__ import annotations

from formula_metrics.metrics import Number, RawMetrics, parse_number


def _scan_attr(svg_text: str, name: str) -> Number | None:
    marker = f'{name}="'
    first = svg_text.find(marker)
    if first < 0:
        return None
    start = first + len(marker)
    end = svg_text.find('"', start)
    if end < 0:
        return None
    return parse_number(svg_text[start:end])


def parse_svg_metrics(svg_text: str) -> RawMetrics:
    height = _scan_attr(svg_text, "height")
    width = _scan_attr(svg_text, "width")
    baseline = _scan_attr(svg_text, "wrs:baseline")
    if width is None:
        return RawMetrics()
    return RawMetrics(width=width, height=height, baseline=baseline)
