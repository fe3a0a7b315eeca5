"""Force a deterministic, print-safe style onto a cloned HTML tree before rasterizing."""
from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from typing import Dict, Optional, Union

from bs4 import BeautifulSoup, Tag

HEADING_PATTERN = re.compile(r"^h[1-6]$")
TASK_CARD_CLASS = "task-card"
MOTION_PROPERTIES = ("animation", "transition")


@dataclass(frozen=True)
class Palette:
    background: str
    text: str
    heading: str
    list_item: str
    task_card_text: str
    task_card_background: str
    task_card_border: str
    code_background: str


PRINT_PALETTE = Palette(
    background="#FFFFFF",
    text="#1F2937",
    heading="#111827",
    list_item="#1F2937",
    task_card_text="#111827",
    task_card_background="#F3F4F6",
    task_card_border="#6B7280",
    code_background="#F3F4F6",
)

# Matches the app's on-screen dark theme for users who want the PDF to look the same.
DARK_PALETTE = Palette(
    background="#1E1E1E",
    text="#D1D5DB",
    heading="#E0E0E0",
    list_item="#D1D5DB",
    task_card_text="#E5E7EB",
    task_card_background="#2A2A2A",
    task_card_border="#6A0DAD",
    code_background="#2A2A2A",
)

PALETTES = {"print": PRINT_PALETTE, "dark": DARK_PALETTE}


def parse_style(value: Optional[str]) -> Dict[str, str]:
    styles: Dict[str, str] = {}
    for declaration in (value or "").split(";"):
        name, sep, prop_value = declaration.partition(":")
        if sep and name.strip():
            styles[name.strip().lower()] = prop_value.strip()
    return styles


def format_style(styles: Dict[str, str]) -> str:
    return "; ".join(f"{name}: {value}" for name, value in styles.items())


def _is_motion_property(name: str) -> bool:
    bare = re.sub(r"^-(webkit|moz|ms|o)-", "", name)
    return any(bare == prop or bare.startswith(f"{prop}-") for prop in MOTION_PROPERTIES)


def _is_task_card(element: Tag) -> bool:
    return TASK_CARD_CLASS in (element.get("class") or [])


def _inherited_color(element: Tag, palette: Palette) -> str:
    parent = element.parent
    if isinstance(parent, Tag) and not isinstance(parent, BeautifulSoup):
        color = parse_style(parent.get("style")).get("color")
        if color:
            return color
    return palette.text


def normalize_for_export(
    root: Union[BeautifulSoup, Tag],
    palette: Palette = PRINT_PALETTE,
) -> Union[BeautifulSoup, Tag]:
    """
    Return a styled deep copy of ``root``; ``root`` itself is left untouched.

    Every element of the copy gets motion disabled, a literal text color, and
    the palette's fixed colors for headings, list items and task cards.
    """
    clone = copy.copy(root)

    # find_all walks in document order, so a parent's color is baked before its children read it.
    for element in clone.find_all(True):
        styles = {name: value for name, value in parse_style(element.get("style")).items() if not _is_motion_property(name)}
        styles["animation"] = "none"
        styles["transition"] = "none"
        styles["color"] = styles.get("color") or _inherited_color(element, palette)

        if HEADING_PATTERN.match(element.name):
            styles["color"] = palette.heading
        elif element.name == "li":
            styles["color"] = palette.list_item
        elif element.name in ("pre", "code"):
            styles["background-color"] = palette.code_background

        if _is_task_card(element):
            styles["color"] = palette.task_card_text
            styles["background-color"] = palette.task_card_background
            styles["border"] = f"1px solid {palette.task_card_border}"

        element["style"] = format_style(styles)

    return clone
