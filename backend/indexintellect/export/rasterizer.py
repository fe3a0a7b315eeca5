"""Paint a normalized HTML tree onto one tall Pillow canvas."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, NavigableString, Tag

from indexintellect.export.capabilities import ExportCapabilities
from indexintellect.export.normalizer import PRINT_PALETTE, Palette, parse_style

logger = logging.getLogger(__name__)

DEFAULT_WIDTH_PX = 700
DEFAULT_SCALE = 2
PADDING_PX = 40

FONT_CANDIDATES: Dict[str, Tuple[str, ...]] = {
    "regular": ("DejaVuSans.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", "Arial.ttf"),
    "bold": ("DejaVuSans-Bold.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", "Arial Bold.ttf"),
    "mono": ("DejaVuSansMono.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf", "Courier New.ttf"),
}

HEADING_SIZES = {"h1": 30, "h2": 24, "h3": 20, "h4": 18, "h5": 16, "h6": 15}
BODY_SIZE = 15
CODE_SIZE = 13
LIST_INDENT = 24
BLOCK_GAP = 10
CARD_PADDING = 12

_WHITESPACE = re.compile(r"\s+")


@dataclass
class _Op:
    kind: str
    args: Tuple[Any, ...]
    options: Dict[str, Any]


class _Layout:
    """Flows block elements top to bottom, recording draw operations."""

    def __init__(self, caps: ExportCapabilities, width: int, scale: int, palette: Palette) -> None:
        self.caps = caps
        self.width = width
        self.scale = scale
        self.palette = palette
        self.padding = PADDING_PX * scale
        self.y = self.padding
        self.ops: List[_Op] = []
        self._fonts: Dict[Tuple[str, int], Any] = {}
        self._measure = caps.pil_draw.Draw(caps.pil_image.new("RGB", (1, 1)))

    def font(self, kind: str, size: int) -> Any:
        key = (kind, size * self.scale)
        if key not in self._fonts:
            self._fonts[key] = self._load_font(kind, size * self.scale)
        return self._fonts[key]

    def _load_font(self, kind: str, size: int) -> Any:
        for candidate in FONT_CANDIDATES[kind]:
            try:
                return self.caps.pil_font.truetype(candidate, size)
            except OSError:
                continue
        logger.debug("No TrueType font for %s; using Pillow default", kind)
        return self.caps.pil_font.load_default(size=size)

    def color(self, element: Tag, fallback: str) -> str:
        value = parse_style(element.get("style")).get("color") or fallback
        try:
            self.caps.pil_color.getrgb(value)
        except ValueError:
            return fallback
        return value

    def wrap(self, text: str, font: Any, max_width: float) -> List[str]:
        lines: List[str] = []
        current = ""
        for word in text.split(" "):
            candidate = f"{current} {word}" if current else word
            if self._measure.textlength(candidate, font=font) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            current = word
            while current and self._measure.textlength(current, font=font) > max_width:
                cut = len(current) - 1
                while cut > 1 and self._measure.textlength(current[:cut], font=font) > max_width:
                    cut -= 1
                lines.append(current[:cut])
                current = current[cut:]
        if current:
            lines.append(current)
        return lines

    def text_block(self, text: str, x: float, max_width: float, font: Any, color: str, line_height: int) -> None:
        for line in self.wrap(text, font, max_width):
            self.ops.append(_Op("text", ((x, self.y), line), {"font": font, "fill": color}))
            self.y += line_height

    def gap(self, size: int = BLOCK_GAP) -> None:
        self.y += size * self.scale

    def line_height(self, size: int) -> int:
        return int(size * self.scale * 1.45)


def _inline_text(element: Union[Tag, NavigableString]) -> str:
    text = element.get_text() if isinstance(element, Tag) else str(element)
    return _WHITESPACE.sub(" ", text).strip()


def _lay_out_children(layout: _Layout, element: Tag, x: float, width: float) -> None:
    for child in element.children:
        if isinstance(child, Tag):
            _lay_out_block(layout, child, x, width)
        elif isinstance(child, NavigableString) and _inline_text(child):
            layout.text_block(
                _inline_text(child), x, width, layout.font("regular", BODY_SIZE), layout.palette.text,
                layout.line_height(BODY_SIZE),
            )


def _lay_out_list(layout: _Layout, element: Tag, x: float, width: float) -> None:
    ordered = element.name == "ol"
    start = int(element.get("start", 1)) if ordered else 1
    indent = LIST_INDENT * layout.scale
    font = layout.font("regular", BODY_SIZE)
    line_height = layout.line_height(BODY_SIZE)

    for number, item in enumerate(element.find_all("li", recursive=False), start=start):
        color = layout.color(item, layout.palette.list_item)
        marker = f"{number}." if ordered else "•"
        layout.ops.append(_Op("text", ((x, layout.y), marker), {"font": font, "fill": color}))

        nested = [child for child in item.children if isinstance(child, Tag) and child.name in ("ul", "ol")]
        own_text = " ".join(_inline_text(child) for child in item.children if not any(child is sub for sub in nested))
        text = _WHITESPACE.sub(" ", own_text).strip()
        if text:
            layout.text_block(text, x + indent, width - indent, font, color, line_height)
        else:
            layout.y += line_height
        for child in nested:
            _lay_out_list(layout, child, x + indent, width - indent)
    layout.gap(4)


def _lay_out_block(layout: _Layout, element: Tag, x: float, width: float) -> None:
    name = element.name
    scale = layout.scale

    if name in HEADING_SIZES:
        size = HEADING_SIZES[name]
        layout.gap(6)
        layout.text_block(
            _inline_text(element), x, width, layout.font("bold", size),
            layout.color(element, layout.palette.heading), layout.line_height(size),
        )
        layout.gap(4)
    elif name == "p":
        layout.text_block(
            _inline_text(element), x, width, layout.font("regular", BODY_SIZE),
            layout.color(element, layout.palette.text), layout.line_height(BODY_SIZE),
        )
        layout.gap()
    elif name in ("ul", "ol"):
        _lay_out_list(layout, element, x, width)
    elif name == "pre":
        font = layout.font("mono", CODE_SIZE)
        line_height = layout.line_height(CODE_SIZE)
        top = layout.y
        background = parse_style(element.get("style")).get("background-color", layout.palette.code_background)
        marker = len(layout.ops)
        layout.y += CARD_PADDING * scale
        for raw_line in element.get_text().rstrip("\n").split("\n"):
            for line in layout.wrap(raw_line.replace("\t", "    "), font, width - 2 * CARD_PADDING * scale) or [""]:
                layout.ops.append(
                    _Op("text", ((x + CARD_PADDING * scale, layout.y), line),
                        {"font": font, "fill": layout.color(element, layout.palette.text)})
                )
                layout.y += line_height
        layout.y += CARD_PADDING * scale
        layout.ops.insert(marker, _Op("rectangle", ((x, top, x + width, layout.y),), {"fill": background}))
        layout.gap()
    elif name == "blockquote":
        top = layout.y
        _lay_out_children(layout, element, x + LIST_INDENT * scale, width - LIST_INDENT * scale)
        layout.ops.append(
            _Op("line", ((x + 4 * scale, top, x + 4 * scale, layout.y),),
                {"fill": layout.palette.task_card_border, "width": 3 * scale})
        )
    elif name == "hr":
        layout.gap(4)
        layout.ops.append(
            _Op("line", ((x, layout.y, x + width, layout.y),), {"fill": layout.palette.task_card_border, "width": scale})
        )
        layout.gap(8)
    elif name == "table":
        font = layout.font("regular", BODY_SIZE)
        for row in element.find_all("tr"):
            cells = [_inline_text(cell) for cell in row.find_all(["th", "td"])]
            layout.text_block(
                " | ".join(cells), x, width, font, layout.color(row, layout.palette.text), layout.line_height(BODY_SIZE)
            )
        layout.gap()
    elif "task-card" in (element.get("class") or []):
        styles = parse_style(element.get("style"))
        top = layout.y
        marker = len(layout.ops)
        pad = CARD_PADDING * scale
        layout.y += pad
        _lay_out_children(layout, element, x + pad, width - 2 * pad)
        layout.y += pad
        layout.ops.insert(
            marker,
            _Op(
                "rectangle",
                ((x, top, x + width, layout.y),),
                {
                    "fill": styles.get("background-color", layout.palette.task_card_background),
                    "outline": layout.palette.task_card_border,
                    "width": scale,
                },
            ),
        )
        layout.gap()
    elif element.find(True) is not None:
        _lay_out_children(layout, element, x, width)
    elif _inline_text(element):
        layout.text_block(
            _inline_text(element), x, width, layout.font("regular", BODY_SIZE),
            layout.color(element, layout.palette.text), layout.line_height(BODY_SIZE),
        )
        layout.gap()


def rasterize(
    root: Union[BeautifulSoup, Tag],
    caps: ExportCapabilities,
    palette: Palette = PRINT_PALETTE,
    width: int = DEFAULT_WIDTH_PX,
    scale: int = DEFAULT_SCALE,
    background: Optional[str] = None,
) -> Any:
    """Render ``root`` (already normalized) into a single static RGB image."""
    pixel_width = width * scale
    layout = _Layout(caps, pixel_width, scale, palette)
    content_width = pixel_width - 2 * layout.padding
    _lay_out_children(layout, root, layout.padding, content_width)

    height = int(layout.y + layout.padding)
    image = caps.pil_image.new("RGB", (pixel_width, height), background or palette.background)
    draw = caps.pil_draw.Draw(image)
    for op in layout.ops:
        getattr(draw, op.kind)(*op.args, **op.options)
    logger.debug("Rasterized plan to %dx%d px (%d draw ops)", pixel_width, height, len(layout.ops))
    return image
