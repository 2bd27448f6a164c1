"""Metrics from the query string of legacy image-service URLs."""

from __future__ import annotations

from typing import Final
from urllib.parse import unquote

from formula_metrics.metrics import RawMetrics, parse_number

_KEY_TO_FIELD: Final[dict[str, str]] = {
    "cw": "width",
    "ch": "height",
    "cb": "baseline",
    "dpi": "dpi",
}


def url_to_params(url: str) -> dict[str, str]:
    """Split `...?a=1&b=2` into a mapping. Later keys overwrite earlier ones."""
    _, sep, query = url.partition("?")
    if not sep:
        query = url
    params: dict[str, str] = {}
    for pair in query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        params[unquote(key)] = unquote(value)
    return params


def parse_legacy_url_metrics(url: str) -> RawMetrics:
    fields = {}
    for key, value in url_to_params(url).items():
        field = _KEY_TO_FIELD.get(key)
        if field is None:
            continue
        fields[field] = parse_number(value)
    return RawMetrics(**fields)
