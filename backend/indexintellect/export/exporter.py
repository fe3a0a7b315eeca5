"""Export a study plan (and optional roadmap) to PDF."""
from __future__ import annotations

import html
import logging
from typing import BinaryIO, List, Optional, Sequence, Union

from bs4 import BeautifulSoup

from indexintellect.api.schemas.roadmap import Task
from indexintellect.export.capabilities import CapabilityLoader, LoaderStatus
from indexintellect.export.normalizer import PRINT_PALETTE, Palette, normalize_for_export
from indexintellect.export.paginator import PagePlacement
from indexintellect.export.pdf import write_pdf
from indexintellect.export.rasterizer import rasterize

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "Index-Intellect-Study-Plan.pdf"


def render_tasks_html(tasks: Sequence[Task]) -> str:
    cards = []
    for number, task in enumerate(tasks, start=1):
        mark = "[x]" if task.completed else "[ ]"
        cards.append(
            '<div class="task-card">'
            f"<h4>{mark} Sprint {number}: {html.escape(task.title)}</h4>"
            f"<p>{html.escape(task.description)}</p>"
            "</div>"
        )
    return "<h2>Sprint Roadmap</h2>" + "".join(cards)


class PlanExporter:
    """Render, normalize, rasterize and page a plan into a PDF."""

    def __init__(self, loader: Optional[CapabilityLoader] = None, palette: Palette = PRINT_PALETTE) -> None:
        self.loader = loader or CapabilityLoader()
        self.palette = palette

    @property
    def status(self) -> LoaderStatus:
        return self.loader.status

    def render_html(self, plan: str, tasks: Optional[Sequence[Task]] = None) -> str:
        caps = self.loader.require_ready()
        body = caps.render_markdown(plan)
        if tasks:
            body += render_tasks_html(tasks)
        return body

    def export(
        self,
        plan: str,
        target: Union[str, BinaryIO] = DEFAULT_FILENAME,
        tasks: Optional[Sequence[Task]] = None,
    ) -> List[PagePlacement]:
        """Write the PDF to ``target``; refuses while the rendering libraries are not ready."""
        caps = self.loader.require_ready()
        document = BeautifulSoup(self.render_html(plan, tasks), "html.parser")
        snapshot = normalize_for_export(document, self.palette)
        image = rasterize(snapshot, caps, self.palette)
        return write_pdf(image, caps, target)
