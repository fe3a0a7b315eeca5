"""Session state machine driving plan and roadmap generation."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, Tuple

from indexintellect.api.schemas.plan import PlanResponse
from indexintellect.api.schemas.roadmap import Task
from indexintellect.core.config import settings
from indexintellect.core.errors import (
    IndexIntellectError,
    InvalidTransitionError,
    PlanValidationError,
    SessionBusyError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTED_SPRINT_CAP = 2


class SessionStatus(str, Enum):
    IDLE = "idle"
    GENERATING_PLAN = "generating_plan"
    PLAN_READY = "plan_ready"
    GENERATING_ROADMAP = "generating_roadmap"
    ROADMAP_READY = "roadmap_ready"


class PlanService(Protocol):
    def generate_plan(self, index: str, goal: str) -> PlanResponse: ...

    def generate_roadmap(self, study_plan: str, sprints: int) -> List[Task]: ...


@dataclass
class SessionState:
    status: SessionStatus = SessionStatus.IDLE
    index: str = ""
    goal: str = ""
    plan: Optional[str] = None
    suggested_sprints: Optional[int] = None
    roadmap_visible: bool = False
    sprint_count: int = 1
    tasks: List[Task] = field(default_factory=list)
    error: Optional[str] = None


class StudySession:
    """Owns one user's session state and the transitions between its stages."""

    def __init__(self, service: PlanService, max_sprints: Optional[int] = None) -> None:
        self._service = service
        self.max_sprints = max_sprints or settings.max_sprints
        self._state = SessionState()
        self._plan_lock = threading.Lock()
        self._roadmap_lock = threading.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_plan_trigger_enabled(self) -> bool:
        return self._state.status not in (SessionStatus.GENERATING_PLAN, SessionStatus.GENERATING_ROADMAP)

    @property
    def is_roadmap_trigger_enabled(self) -> bool:
        return self._state.status in (SessionStatus.PLAN_READY, SessionStatus.ROADMAP_READY)

    def submit(self, index: str, goal: str) -> PlanResponse:
        """Validate the form inputs and generate a fresh plan."""
        if not self._plan_lock.acquire(blocking=False):
            raise SessionBusyError("A study plan is already being generated")
        try:
            if self._state.status is SessionStatus.GENERATING_ROADMAP:
                raise InvalidTransitionError("Wait for the roadmap to finish before generating a new plan")
            if not (index or "").strip() or not (goal or "").strip():
                self._state.error = "Please fill in both the book index and your study goal."
                raise PlanValidationError(self._state.error)

            self._state = SessionState(status=SessionStatus.GENERATING_PLAN, index=index, goal=goal)
            logger.info("Generating plan (index=%d chars)", len(index))
            try:
                response = self._service.generate_plan(index, goal)
            except IndexIntellectError as exc:
                self._state = SessionState(index=index, goal=goal, error=exc.message)
                logger.warning("Plan generation failed: %s", exc.message)
                raise
            except Exception:
                self._state = SessionState(index=index, goal=goal, error="Failed to generate study plan.")
                raise

            self._state.plan = response.plan
            self._state.suggested_sprints = response.suggested_sprints
            if response.suggested_sprints is not None:
                self._state.sprint_count = self._clamp(
                    min(response.suggested_sprints, DEFAULT_SUGGESTED_SPRINT_CAP)
                )
                self._state.roadmap_visible = True
            self._state.status = SessionStatus.PLAN_READY
            return response
        finally:
            self._plan_lock.release()

    def show_roadmap_options(self) -> None:
        if self._state.status not in (SessionStatus.PLAN_READY, SessionStatus.ROADMAP_READY):
            raise InvalidTransitionError("Generate a study plan first")
        self._state.roadmap_visible = True

    def request_roadmap(self, sprint_count: Optional[int] = None) -> List[Task]:
        """Generate one task per sprint for the current plan."""
        if not self._roadmap_lock.acquire(blocking=False):
            raise SessionBusyError("A roadmap is already being generated")
        try:
            previous_status = self._state.status
            previous_config = (self._state.sprint_count, self._state.roadmap_visible)
            if previous_status not in (SessionStatus.PLAN_READY, SessionStatus.ROADMAP_READY):
                raise InvalidTransitionError("Generate a study plan first")

            sprints = self._clamp(sprint_count if sprint_count is not None else self._state.sprint_count)
            self._state.sprint_count = sprints
            self._state.roadmap_visible = True
            self._state.error = None
            self._state.status = SessionStatus.GENERATING_ROADMAP
            logger.info("Generating roadmap with %d sprint(s)", sprints)
            try:
                tasks = self._service.generate_roadmap(self._state.plan or "", sprints)
                if len(tasks) != sprints:
                    raise UpstreamError(f"Expected {sprints} tasks but received {len(tasks)}")
            except IndexIntellectError as exc:
                self._restore_roadmap(previous_status, previous_config, exc.message)
                logger.warning("Roadmap generation failed: %s", exc.message)
                raise
            except Exception:
                self._restore_roadmap(previous_status, previous_config, "Failed to generate roadmap.")
                raise

            self._state.tasks = [task.model_copy(update={"completed": False}) for task in tasks]
            self._state.status = SessionStatus.ROADMAP_READY
            return self._state.tasks
        finally:
            self._roadmap_lock.release()

    def toggle_task(self, task_id: str) -> Task:
        """Flip the completed flag of one task locally."""
        if self._state.status is not SessionStatus.ROADMAP_READY:
            raise InvalidTransitionError("No roadmap to update")
        for position, task in enumerate(self._state.tasks):
            if task.id == task_id:
                updated = task.model_copy(update={"completed": not task.completed})
                self._state.tasks[position] = updated
                return updated
        raise KeyError(task_id)

    def _restore_roadmap(self, status: SessionStatus, config: Tuple[int, bool], error: str) -> None:
        self._state.status = status
        self._state.sprint_count, self._state.roadmap_visible = config
        self._state.error = error

    def _clamp(self, sprints: int) -> int:
        return max(1, min(int(sprints), self.max_sprints))
