from __future__ import annotations

from typing import List

import pytest

from indexintellect import cli
from indexintellect.api.schemas.plan import PlanResponse
from indexintellect.api.schemas.roadmap import Task
from indexintellect.core.errors import TransportError


class FakeBackend:
    instances: List["FakeBackend"] = []
    fail = False

    def __init__(self, http=None, base_url=None):
        self.base_url = base_url
        self.closed = False
        self.roadmap_sprints: List[int] = []
        FakeBackend.instances.append(self)

    def close(self):
        self.closed = True

    def generate_plan(self, index, goal):
        if FakeBackend.fail:
            raise TransportError()
        return PlanResponse(plan=f"## Plan for {goal}", suggested_sprints=4)

    def generate_roadmap(self, study_plan, sprints):
        self.roadmap_sprints.append(sprints)
        return [Task(id=str(n), title=f"Topic {n}", description="Read") for n in range(1, sprints + 1)]


@pytest.fixture(autouse=True)
def fake_backend(monkeypatch):
    FakeBackend.instances = []
    FakeBackend.fail = False
    monkeypatch.setattr(cli, "BackendClient", FakeBackend)
    return FakeBackend


@pytest.fixture()
def index_file(tmp_path):
    path = tmp_path / "index.txt"
    path.write_text("Ch1: Arrays\nCh2: Graphs\n", encoding="utf-8")
    return path


def test_prints_plan(index_file, capsys):
    code = cli.main([str(index_file), "--goal", "interviews", "--url", "http://backend"])

    out = capsys.readouterr().out
    assert code == 0
    assert "## Plan for interviews" in out
    assert FakeBackend.instances[0].base_url == "http://backend"
    assert FakeBackend.instances[0].closed is True


def test_roadmap_uses_suggestion_when_no_count_given(index_file, capsys):
    code = cli.main([str(index_file), "--goal", "interviews", "--roadmap"])

    out = capsys.readouterr().out
    assert code == 0
    assert FakeBackend.instances[0].roadmap_sprints == [2]
    assert "Sprint 2: Topic 2" in out


def test_roadmap_with_explicit_count(index_file, capsys):
    cli.main([str(index_file), "--goal", "interviews", "--roadmap", "3"])

    assert FakeBackend.instances[0].roadmap_sprints == [3]


def test_backend_failure_returns_error_code(index_file, capsys):
    FakeBackend.fail = True

    code = cli.main([str(index_file), "--goal", "interviews"])

    assert code == 1
    assert "Could not reach the study plan service" in capsys.readouterr().err


def test_missing_index_file_returns_error_code(tmp_path, capsys):
    code = cli.main([str(tmp_path / "missing.txt"), "--goal", "interviews"])

    assert code == 1
    assert "Error:" in capsys.readouterr().err
