"""Configuration persistence for formula-metrics.

Settings are stored as JSON at `$FORMULA_METRICS_CONFIG` when set, otherwise
under `$XDG_CONFIG_HOME/FormulaMetrics/config.json` (`~/.config` fallback).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Final

APP_DIR_NAME: Final[str] = "FormulaMetrics"
CONFIG_FILE_NAME: Final[str] = "config.json"
CONFIG_ENV_VAR: Final[str] = "FORMULA_METRICS_CONFIG"


def _default_config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def get_config_path() -> Path:
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return _default_config_dir() / APP_DIR_NAME / CONFIG_FILE_NAME


@dataclass
class SizingConfig:
    """Settings that select how image-service payloads are parsed.

    Notes:
    - `image_format` is `"svg"` or a raster format (`"png"`).
    - `save_mode` of `"base64"` means SVG payloads arrive base64-encoded.
    - `image_mathml_attribute` names the attribute carrying the formula source.
    """

    image_format: str = "png"
    save_mode: str = "xml"
    image_mathml_attribute: str = "data-mathml"

    @property
    def is_svg(self) -> bool:
        return self.image_format == "svg"

    @property
    def is_base64(self) -> bool:
        return self.save_mode == "base64"

    def to_dict(self) -> dict[str, Any]:
        return {
            "image_format": self.image_format,
            "save_mode": self.save_mode,
            "image_mathml_attribute": self.image_mathml_attribute,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "SizingConfig":
        cfg = cls()
        known = {f.name for f in fields(cls)}
        for k, v in raw.items():
            if k in known and isinstance(v, str):
                setattr(cfg, k, v)
        return cfg

    @classmethod
    def load(cls) -> "SizingConfig":
        path = get_config_path()
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls.from_dict(data)

    def save(self) -> None:
        path = get_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
