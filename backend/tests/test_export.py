from __future__ import annotations

import importlib
import io
import threading

import pytest

from indexintellect.api.schemas.roadmap import Task
from indexintellect.core.errors import CapabilityLoadError
from indexintellect.export.capabilities import CapabilityLoader, LoaderStatus
from indexintellect.export.exporter import PlanExporter, render_tasks_html
from indexintellect.export.paginator import paginate, scaled_image_height

LONG_PLAN = "# Study Plan\n\n" + "\n\n".join(
    f"## Week {week}: Topic {week}\n\n- Read chapter {week}\n- Solve exercises {week}.1 to {week}.9\n\n"
    + "A paragraph of guidance that is long enough to wrap across more than one line on the page. " * 3
    for week in range(1, 13)
)


@pytest.fixture()
def ready_loader():
    loader = CapabilityLoader()
    loader.wait(timeout=30)
    return loader


def test_loader_becomes_ready_with_real_libraries(ready_loader):
    assert ready_loader.status is LoaderStatus.READY
    assert ready_loader.error is None
    caps = ready_loader.require_ready()
    assert "<h1>Title</h1>" in caps.render_markdown("# Title")


def test_loader_failure_is_reported_and_export_refused():
    def importer(name):
        if name.startswith("reportlab"):
            raise ImportError(name)
        return importlib.import_module(name)

    loader = CapabilityLoader(importer=importer)

    with pytest.raises(CapabilityLoadError) as exc_info:
        loader.wait(timeout=30)

    assert loader.status is LoaderStatus.FAILED
    assert "pdf library" in exc_info.value.message
    with pytest.raises(CapabilityLoadError):
        PlanExporter(loader=loader).export("# Plan", io.BytesIO())


def test_non_import_error_during_load_is_captured():
    def importer(name):
        if name == "PIL.ImageFont":
            raise OSError("cannot open shared object file")
        return importlib.import_module(name)

    loader = CapabilityLoader(importer=importer)

    with pytest.raises(CapabilityLoadError, match="rasterizer library"):
        loader.wait(timeout=30)

    assert loader.status is LoaderStatus.FAILED
    assert loader.error is not None
    assert isinstance(loader.error.__cause__, OSError)


def test_export_is_refused_while_loading():
    release = threading.Event()

    def importer(name):
        release.wait(timeout=10)
        return importlib.import_module(name)

    loader = CapabilityLoader(importer=importer)
    loader.start()
    try:
        assert loader.status is LoaderStatus.LOADING
        with pytest.raises(CapabilityLoadError, match="still loading"):
            PlanExporter(loader=loader).export("# Plan", io.BytesIO())
    finally:
        release.set()
    loader.wait(timeout=30)
    assert loader.status is LoaderStatus.READY


def test_start_is_idempotent():
    calls = []

    def importer(name):
        calls.append(name)
        return importlib.import_module(name)

    loader = CapabilityLoader(importer=importer)
    loader.start()
    loader.start()
    loader.wait(timeout=30)

    assert len(calls) == len(set(calls))


def test_render_tasks_html_escapes_and_marks_completion():
    tasks = [
        Task(id="1", title="Arrays <basics>", description="Read & practice", completed=True),
        Task(id="2", title="Graphs", description="BFS"),
    ]

    markup = render_tasks_html(tasks)

    assert markup.startswith("<h2>Sprint Roadmap</h2>")
    assert markup.count('class="task-card"') == 2
    assert "[x] Sprint 1: Arrays &lt;basics&gt;" in markup
    assert "Read &amp; practice" in markup
    assert "[ ] Sprint 2: Graphs" in markup


def test_export_writes_a_paged_pdf(ready_loader):
    exporter = PlanExporter(loader=ready_loader)
    tasks = [Task(id=f"t{n}", title=f"Sprint {n}", description="Work through the chapter") for n in range(1, 5)]
    buffer = io.BytesIO()

    placements = exporter.export(LONG_PLAN, buffer, tasks=tasks)

    data = buffer.getvalue()
    assert data.startswith(b"%PDF")
    assert len(placements) > 1
    assert [p.page_index for p in placements] == list(range(len(placements)))


def test_page_count_matches_rasterized_height(ready_loader, monkeypatch):
    from indexintellect.export import exporter as exporter_module

    captured = {}
    original = exporter_module.rasterize

    def spy(*args, **kwargs):
        image = original(*args, **kwargs)
        captured["size"] = image.size
        return image

    monkeypatch.setattr(exporter_module, "rasterize", spy)

    placements = PlanExporter(loader=ready_loader).export(LONG_PLAN, io.BytesIO())

    width, height = captured["size"]
    assert len(placements) == len(paginate(scaled_image_height(width, height, 210.0)))


def test_export_leaves_rendered_html_unchanged(ready_loader):
    exporter = PlanExporter(loader=ready_loader)
    before = exporter.render_html("# Plan\n\n- one")

    exporter.export("# Plan\n\n- one", io.BytesIO())

    assert exporter.render_html("# Plan\n\n- one") == before
    assert "style=" not in before


def test_nested_list_items_render_without_touching_the_tree(ready_loader):
    from bs4 import BeautifulSoup

    from indexintellect.export.rasterizer import rasterize

    caps = ready_loader.require_ready()
    flat = BeautifulSoup(caps.render_markdown("- Arrays\n- Graphs\n"), "html.parser")
    nested = BeautifulSoup(caps.render_markdown("- Arrays\n  - Two pointers\n  - Sliding window\n- Graphs\n"), "html.parser")
    before = str(nested)

    flat_image = rasterize(flat, caps)
    nested_image = rasterize(nested, caps)

    assert str(nested) == before
    assert nested_image.width == flat_image.width
    assert nested_image.height > flat_image.height
