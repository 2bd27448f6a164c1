"""Minimal image element: an attribute map with inline-style helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

CUSTOM_EDITOR_ATTRIBUTE: Final[str] = "data-custom-editor"


def parse_style(style: str) -> dict[str, str]:
    props: dict[str, str] = {}
    for decl in style.split(";"):
        name, sep, value = decl.partition(":")
        name = name.strip().lower()
        if not sep or not name:
            continue
        props[name] = value.strip()
    return props


def format_style(props: dict[str, str]) -> str:
    return "; ".join(f"{k}: {v}" for k, v in props.items())


@dataclass
class ImageElement:
    """Stand-in for a host document's `<img>` element."""

    attributes: dict[str, str] = field(default_factory=dict)

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        self.attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    @property
    def src(self) -> str:
        return self.attributes.get("src", "")

    def get_style_property(self, name: str) -> str | None:
        return parse_style(self.attributes.get("style", "")).get(name.lower())

    def set_style_property(self, name: str, value: str) -> None:
        props = parse_style(self.attributes.get("style", ""))
        props[name.lower()] = value
        self.attributes["style"] = format_style(props)


def clone_attributes(origin: ImageElement, dest: ImageElement, *, mathml_attribute: str) -> None:
    """Copy formula attributes from `origin` onto `dest` without interpreting them."""
    if not origin.has_attribute(CUSTOM_EDITOR_ATTRIBUTE):
        dest.remove_attribute(CUSTOM_EDITOR_ATTRIBUTE)

    names = (
        mathml_attribute,
        CUSTOM_EDITOR_ATTRIBUTE,
        "alt",
        "height",
        "width",
        "style",
        "src",
        "role",
    )
    for name in names:
        value = origin.get_attribute(name)
        if value:
            dest.set_attribute(name, value)
