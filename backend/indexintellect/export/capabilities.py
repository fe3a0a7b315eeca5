"""Load the markdown, raster and PDF libraries once and hand out a ready handle."""
from __future__ import annotations

import importlib
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from types import ModuleType
from typing import Any, Callable, Dict, Optional, Tuple

from indexintellect.core.errors import CapabilityLoadError

logger = logging.getLogger(__name__)

CAPABILITY_MODULES: Dict[str, Tuple[str, ...]] = {
    "markdown": ("markdown_it",),
    "rasterizer": ("PIL.Image", "PIL.ImageColor", "PIL.ImageDraw", "PIL.ImageFont"),
    "pdf": ("reportlab.pdfgen.canvas", "reportlab.lib.utils", "reportlab.lib.units"),
}


class LoaderStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class ExportCapabilities:
    """Handle over the three rendering libraries consumed by the export action."""

    markdown_it: ModuleType
    pil_image: ModuleType
    pil_color: ModuleType
    pil_draw: ModuleType
    pil_font: ModuleType
    pdf_canvas: ModuleType
    pdf_utils: ModuleType
    pdf_units: ModuleType

    def render_markdown(self, text: str) -> str:
        return self.markdown_it.MarkdownIt("commonmark", {"html": False}).enable("table").render(text)


class CapabilityLoader:
    """Imports each capability group in parallel; the export action waits on :meth:`wait`."""

    def __init__(self, importer: Callable[[str], Any] = importlib.import_module) -> None:
        self._importer = importer
        self._status = LoaderStatus.IDLE
        self._capabilities: Optional[ExportCapabilities] = None
        self._error: Optional[CapabilityLoadError] = None
        self._done = threading.Event()
        self._lock = threading.Lock()

    @property
    def status(self) -> LoaderStatus:
        return self._status

    @property
    def error(self) -> Optional[CapabilityLoadError]:
        return self._error

    def start(self) -> None:
        """Begin loading in the background; calling it again is a no-op."""
        with self._lock:
            if self._status is not LoaderStatus.IDLE:
                return
            self._status = LoaderStatus.LOADING
        threading.Thread(target=self._load, name="export-capabilities", daemon=True).start()

    def wait(self, timeout: Optional[float] = None) -> ExportCapabilities:
        """Block until loading finishes and return the handle or raise the load failure."""
        self.start()
        if not self._done.wait(timeout):
            raise CapabilityLoadError("PDF tools are still loading")
        if self._capabilities is None:
            raise self._error or CapabilityLoadError()
        return self._capabilities

    def require_ready(self) -> ExportCapabilities:
        """Return the handle without waiting; refuse while loading or after a failure."""
        if self._status is LoaderStatus.READY and self._capabilities is not None:
            return self._capabilities
        if self._status is LoaderStatus.FAILED:
            raise self._error or CapabilityLoadError()
        raise CapabilityLoadError("PDF tools are still loading")

    def _load_group(self, group: str) -> Dict[str, ModuleType]:
        loaded: Dict[str, ModuleType] = {}
        for module_name in CAPABILITY_MODULES[group]:
            try:
                loaded[module_name] = self._importer(module_name)
            except ImportError as exc:
                raise CapabilityLoadError(f"Failed to load {group} library ({module_name})") from exc
            except Exception as exc:
                # Broken installs surface as OSError or similar at import time.
                logger.exception("Importing %s raised %s", module_name, type(exc).__name__)
                raise CapabilityLoadError(f"Failed to load {group} library ({module_name})") from exc
        return loaded

    def _load(self) -> None:
        try:
            with ThreadPoolExecutor(max_workers=len(CAPABILITY_MODULES)) as pool:
                futures = {group: pool.submit(self._load_group, group) for group in CAPABILITY_MODULES}
                modules: Dict[str, ModuleType] = {}
                for future in futures.values():
                    modules.update(future.result())
            self._capabilities = ExportCapabilities(
                markdown_it=modules["markdown_it"],
                pil_image=modules["PIL.Image"],
                pil_color=modules["PIL.ImageColor"],
                pil_draw=modules["PIL.ImageDraw"],
                pil_font=modules["PIL.ImageFont"],
                pdf_canvas=modules["reportlab.pdfgen.canvas"],
                pdf_utils=modules["reportlab.lib.utils"],
                pdf_units=modules["reportlab.lib.units"],
            )
            self._status = LoaderStatus.READY
            logger.debug("Export capabilities ready")
        except CapabilityLoadError as exc:
            logger.error("Export capabilities failed to load: %s", exc.message)
            self._error = exc
            self._status = LoaderStatus.FAILED
        finally:
            if self._status is LoaderStatus.LOADING:
                self._status = LoaderStatus.FAILED
            self._done.set()
