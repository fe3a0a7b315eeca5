"""Split one tall image into page placements for a fixed-size document."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0
DEFAULT_MARGIN_MM = 10.0

# Residue left by repeated float subtraction must not open an empty page.
_EPSILON_MM = 1e-6


@dataclass(frozen=True)
class PagePlacement:
    """Where the full image sits on one page and which band of it is visible.

    ``offset`` is the distance from the page's top edge to the image's top
    edge (negative once earlier bands have scrolled off). ``band_top`` and
    ``band_bottom`` are measured from the image's top edge.
    """

    page_index: int
    offset: float
    band_top: float
    band_bottom: float


def usable_page_height(page_height: float, margin: float = DEFAULT_MARGIN_MM) -> float:
    usable = page_height - 2 * margin
    if usable <= 0:
        raise ValueError("margins leave no usable page height")
    return usable


def scaled_image_height(pixel_width: int, pixel_height: int, page_width: float, margin: float = DEFAULT_MARGIN_MM) -> float:
    """Height in mm of an image scaled to fill the page width between margins."""
    if pixel_width <= 0 or pixel_height < 0:
        raise ValueError("image dimensions must be positive")
    img_width = page_width - 2 * margin
    if img_width <= 0:
        raise ValueError("margins leave no usable page width")
    return img_width * pixel_height / pixel_width


def paginate(img_height: float, page_height: float = A4_HEIGHT_MM, margin: float = DEFAULT_MARGIN_MM) -> List[PagePlacement]:
    """Return one placement per page, shifting the same image up by a usable page height each time."""
    if img_height < 0:
        raise ValueError("img_height must not be negative")
    usable = usable_page_height(page_height, margin)

    offset = margin
    placements = [PagePlacement(0, offset, 0.0, min(img_height, usable))]
    height_left = img_height - usable

    while height_left > _EPSILON_MM:
        offset = offset - usable
        band_top = margin - offset
        placements.append(
            PagePlacement(len(placements), offset, band_top, min(img_height, band_top + usable))
        )
        height_left -= usable

    return placements
