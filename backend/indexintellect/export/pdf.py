"""Write a tall raster image into a paged PDF using the paginator's placements."""
from __future__ import annotations

import logging
from typing import Any, BinaryIO, List, Union

from indexintellect.export.capabilities import ExportCapabilities
from indexintellect.export.paginator import (
    A4_HEIGHT_MM,
    A4_WIDTH_MM,
    DEFAULT_MARGIN_MM,
    PagePlacement,
    paginate,
    scaled_image_height,
)

logger = logging.getLogger(__name__)


def write_pdf(
    image: Any,
    caps: ExportCapabilities,
    target: Union[str, BinaryIO],
    page_width: float = A4_WIDTH_MM,
    page_height: float = A4_HEIGHT_MM,
    margin: float = DEFAULT_MARGIN_MM,
    title: str = "Study Plan",
) -> List[PagePlacement]:
    """Draw ``image`` once per page, shifted up by one usable page height each time."""
    mm = caps.pdf_units.mm
    img_width = page_width - 2 * margin
    img_height = scaled_image_height(image.width, image.height, page_width, margin)
    usable = page_height - 2 * margin
    placements = paginate(img_height, page_height, margin)

    pdf = caps.pdf_canvas.Canvas(target, pagesize=(page_width * mm, page_height * mm))
    pdf.setTitle(title)
    reader = caps.pdf_utils.ImageReader(image)

    for position, placement in enumerate(placements):
        if position:
            pdf.showPage()
        pdf.saveState()
        # Only the usable band is visible, so rows never repeat inside the margins.
        clip = pdf.beginPath()
        clip.rect(margin * mm, margin * mm, img_width * mm, usable * mm)
        pdf.clipPath(clip, stroke=0, fill=0)
        # PDF y grows upward from the bottom edge; offsets are measured from the top.
        bottom = page_height - placement.offset - img_height
        pdf.drawImage(reader, margin * mm, bottom * mm, width=img_width * mm, height=img_height * mm)
        pdf.restoreState()

    pdf.save()
    logger.info("Wrote %d PDF page(s) for a %.1fmm tall image", len(placements), img_height)
    return placements
