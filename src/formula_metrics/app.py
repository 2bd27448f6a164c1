"""CLI wiring: inspect a formula image or legacy URL and print its geometry."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from formula_metrics.config import SizingConfig, get_config_path
from formula_metrics.element import ImageElement
from formula_metrics.export.stamp import png_data_uri, svg_data_uri
from formula_metrics.metrics import FinalGeometry
from formula_metrics.sizing import ImageSizer


def _setup_logging(verbose: bool = False) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_dir = get_config_path().parent
    log_dir.mkdir(parents=True, exist_ok=True)
    handlers.append(logging.FileHandler(log_dir / "app.log", encoding="utf-8"))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=handlers,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formula-metrics",
        description="Print the display geometry embedded in a rendered formula image.",
    )
    parser.add_argument("target", help="PNG/SVG file, image data URI, or legacy image-service URL")
    parser.add_argument("--format", dest="image_format", help="image format when TARGET is a data URI")
    parser.add_argument("--save-mode", dest="save_mode", help="save mode when TARGET is a data URI")
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="persist --format/--save-mode as the defaults for later runs",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def _element_for_target(target: str, cfg: SizingConfig) -> tuple[ImageElement, SizingConfig]:
    path = Path(target)
    suffix = path.suffix.lower()
    if suffix in (".png", ".svg") and path.is_file():
        if suffix == ".png":
            src = png_data_uri(path.read_bytes())
            cfg = replace(cfg, image_format="png")
        else:
            src = svg_data_uri(path.read_text(encoding="utf-8"))
            cfg = replace(cfg, image_format="svg", save_mode="xml")
        return ImageElement({"src": src}), cfg
    return ImageElement({"src": target}), cfg


def _geometry_to_dict(geometry: FinalGeometry) -> dict[str, object]:
    return {
        "width": geometry.width,
        "height": geometry.height,
        "vertical_offset": geometry.vertical_offset,
        "vertical_align": geometry.vertical_align,
    }


def run_app(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    log = logging.getLogger("formula_metrics")

    cfg = SizingConfig.load()
    if args.image_format:
        cfg.image_format = args.image_format
    if args.save_mode:
        cfg.save_mode = args.save_mode
    if args.save_config:
        cfg.save()
        log.info("config_saved path=%s", get_config_path())

    try:
        element, cfg = _element_for_target(args.target, cfg)
    except (OSError, UnicodeDecodeError) as e:
        log.error("read_failed target=%s error=%s", args.target, e)
        return 2
    log.info("config image_format=%s save_mode=%s", cfg.image_format, cfg.save_mode)

    geometry = ImageSizer(cfg).fix_after_resize(element)
    if geometry is None:
        print("null")
        return 1
    json.dump(_geometry_to_dict(geometry), sys.stdout)
    sys.stdout.write("\n")
    return 0
