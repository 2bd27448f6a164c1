import base64
import logging

import pytest

from formula_metrics.config import SizingConfig
from formula_metrics.element import ImageElement
from formula_metrics.export.stamp import blank_formula_png, png_data_uri, svg_data_uri
from formula_metrics.metrics import FinalGeometry, normalize_metrics
from formula_metrics.parse.png import parse_png_metrics
from formula_metrics.sizing import (
    PNG_DATA_URI_PREFIX,
    SVG_DATA_URI_PREFIX,
    ImageSizer,
    PayloadKind,
    SizingState,
    select_payload_kind,
)

SVG = '<svg xmlns="http://www.w3.org/2000/svg" width="120" height="40" wrs:baseline="30"></svg>'
EXPECTED = FinalGeometry(width=120.0, height=40.0, vertical_offset=-10.0)


@pytest.mark.parametrize(
    "image_format,save_mode,json_response,kind",
    [
        ("png", "xml", False, PayloadKind.LEGACY_URL),
        ("svg", "base64", False, PayloadKind.LEGACY_URL),
        ("svg", "base64", True, PayloadKind.SVG_BASE64),
        ("svg", "xml", True, PayloadKind.SVG_TEXT),
        ("png", "base64", True, PayloadKind.PNG_BASE64),
    ],
)
def test_select_payload_kind(image_format: str, save_mode: str, json_response: bool, kind: PayloadKind) -> None:
    cfg = SizingConfig(image_format=image_format, save_mode=save_mode)
    assert select_payload_kind(cfg, json_response) is kind


def test_data_uri_prefix_lengths() -> None:
    assert len(SVG_DATA_URI_PREFIX) == 32
    assert len(PNG_DATA_URI_PREFIX) == 22


def test_svg_text_payload() -> None:
    sizer = ImageSizer(SizingConfig(image_format="svg"))
    assert sizer.compute_geometry(SVG) == EXPECTED
    assert sizer.state is SizingState.DONE


def test_svg_base64_payload_bare_or_data_uri() -> None:
    sizer = ImageSizer(SizingConfig(image_format="svg", save_mode="base64"))
    encoded = base64.b64encode(SVG.encode("utf-8")).decode("ascii")
    assert sizer.compute_geometry(encoded) == EXPECTED
    assert sizer.compute_geometry("data:image/svg+xml;base64," + encoded) == EXPECTED


def test_png_payload_with_dpi() -> None:
    png = blank_formula_png(240, 80, baseline=60, dpi=192)
    sizer = ImageSizer(SizingConfig(image_format="png"))
    assert sizer.compute_geometry(base64.b64encode(png).decode("ascii")) == EXPECTED


def test_legacy_url_payload() -> None:
    sizer = ImageSizer(SizingConfig())
    geometry = sizer.compute_geometry("http://service/img.png?cw=100&ch=50&cb=40", json_response=False)
    assert geometry == FinalGeometry(width=100.0, height=50.0, vertical_offset=-10.0)


def test_set_img_size_writes_attributes() -> None:
    element = ImageElement({"alt": "formula"})
    ImageSizer(SizingConfig(image_format="svg")).set_img_size(element, SVG)
    assert element.attributes == {
        "alt": "formula",
        "width": "120",
        "height": "40",
        "style": "vertical-align: -10px",
    }


def test_set_img_size_without_baseline_keeps_alignment() -> None:
    element = ImageElement()
    ImageSizer(SizingConfig(image_format="svg")).set_img_size(element, '<svg width="12" height="4"></svg>')
    assert element.attributes == {"width": "12", "height": "4"}


def test_no_metrics_leaves_element_untouched() -> None:
    element = ImageElement({"src": "cat.png", "width": "10"})
    result = ImageSizer(SizingConfig(image_format="svg")).set_img_size(element, "<svg></svg>")
    assert result is None
    assert element.attributes == {"src": "cat.png", "width": "10"}


def test_parse_failure_degrades_to_no_geometry(caplog: pytest.LogCaptureFixture) -> None:
    element = ImageElement({"width": "10"})
    sizer = ImageSizer(SizingConfig(image_format="png"))
    with caplog.at_level(logging.WARNING, logger="formula_metrics.sizing"):
        assert sizer.set_img_size(element, "not*base64") is None
    assert element.attributes == {"width": "10"}
    assert sizer.state is SizingState.DONE
    assert "metrics_parse_failed" in caplog.text


def test_fix_after_resize_png_matches_direct_parse() -> None:
    png = blank_formula_png(240, 80, baseline=60, dpi=192)
    element = ImageElement({"src": png_data_uri(png), "width": "999", "height": "333", "style": "width: 999px"})
    geometry = ImageSizer(SizingConfig(image_format="png")).fix_after_resize(element)

    assert geometry == normalize_metrics(parse_png_metrics(png)) == EXPECTED
    assert element.get_attribute("width") == "120"
    assert element.get_attribute("height") == "40"
    assert element.get_attribute("style") == "max-width: none; vertical-align: -10px"


def test_fix_after_resize_svg_utf8_data_uri() -> None:
    element = ImageElement({"src": svg_data_uri(SVG), "style": "height: 5px"})
    geometry = ImageSizer(SizingConfig(image_format="svg")).fix_after_resize(element)
    assert geometry == EXPECTED
    assert element.get_style_property("height") is None
    assert element.get_style_property("max-width") == "none"


def test_fix_after_resize_svg_base64_data_uri() -> None:
    encoded = base64.b64encode(SVG.encode("utf-8")).decode("ascii")
    element = ImageElement({"src": "data:image/svg+xml;base64," + encoded})
    geometry = ImageSizer(SizingConfig(image_format="svg", save_mode="base64")).fix_after_resize(element)
    assert geometry == EXPECTED


def test_fix_after_resize_legacy_url() -> None:
    element = ImageElement({"src": "http://service/img.png?cw=100&ch=50&cb=40", "width": "7"})
    ImageSizer(SizingConfig()).fix_after_resize(element)
    assert element.attributes["width"] == "100"
    assert element.attributes["height"] == "50"
    assert element.get_style_property("vertical-align") == "-10px"


def test_fix_after_resize_plain_image_only_resets_size() -> None:
    element = ImageElement({"src": "http://example.com/cat.jpg", "width": "7", "style": "border: 0"})
    assert ImageSizer(SizingConfig()).fix_after_resize(element) is None
    assert element.attributes == {"src": "http://example.com/cat.jpg", "style": "max-width: none"}


def test_png_prefix_ending_at_chunk_header_still_sizes() -> None:
    png = blank_formula_png(12, 27, baseline=20)
    sizer = ImageSizer(SizingConfig(image_format="png"))
    geometry = sizer.compute_geometry(base64.b64encode(png).decode("ascii"))
    assert geometry == FinalGeometry(width=12.0, height=27.0, vertical_offset=-7.0)
