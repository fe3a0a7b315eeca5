"""Sprint roadmap generation service."""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from indexintellect.api.schemas.roadmap import Task
from indexintellect.core.config import settings
from indexintellect.core.errors import ExtractionFailed, PlanValidationError, UpstreamError
from indexintellect.observability.metrics import log_metric
from indexintellect.observability.tracing import trace
from indexintellect.services import llm_client
from indexintellect.services.prompts import ROADMAP_SYSTEM_PROMPT, build_roadmap_prompt
from indexintellect.services.response_extractor import extract_json

logger = logging.getLogger(__name__)


def generate_roadmap(study_plan: str, sprints: int, request_id: str | None = None) -> List[Task]:
    """Ask the model for exactly ``sprints`` tasks derived from ``study_plan``."""
    if not study_plan.strip():
        raise PlanValidationError("Missing required field: studyPlan")
    if sprints > settings.max_sprints:
        raise PlanValidationError(f"sprints must be between 1 and {settings.max_sprints}")

    metadata = {"route": "/generate-roadmap", "sprints": sprints, "plan_length": len(study_plan)}
    with trace("roadmap.generate", metadata=metadata, request_id=request_id):
        raw = llm_client.request_json_completion(ROADMAP_SYSTEM_PROMPT, build_roadmap_prompt(study_plan, sprints))
        try:
            payload = extract_json(raw, "tasks")
        except ExtractionFailed as exc:
            logger.error("Roadmap reply had no tasks object")
            raise UpstreamError("AI returned an unreadable roadmap") from exc
        tasks = _parse_tasks(payload.get("tasks"))

    if len(tasks) != sprints:
        log_metric("roadmap.task_count_mismatch", 1, metadata={"requested": sprints, "received": len(tasks)})
        logger.error("Roadmap task count mismatch: requested %d, received %d", sprints, len(tasks))
        raise UpstreamError(f"AI returned {len(tasks)} tasks for {sprints} sprints")

    log_metric("roadmap.generate.success", 1, metadata={"sprints": sprints})
    return tasks


def _parse_tasks(raw_tasks: Any) -> List[Task]:
    if not isinstance(raw_tasks, list):
        raise UpstreamError("AI returned an unreadable roadmap")

    tasks: List[Task] = []
    seen_ids: set[str] = set()
    for position, item in enumerate(raw_tasks, start=1):
        if not isinstance(item, dict):
            raise UpstreamError("AI returned an unreadable roadmap")
        task_id = str(item.get("id") or "").strip()
        if not task_id or task_id in seen_ids:
            task_id = f"sprint-{position}"
        seen_ids.add(task_id)
        fields: Dict[str, Any] = {
            "id": task_id,
            "title": item.get("title"),
            "description": item.get("description") or "",
            "completed": False,
        }
        try:
            tasks.append(Task.model_validate(fields))
        except ValidationError as exc:
            raise UpstreamError("AI returned an unreadable roadmap") from exc
    return tasks
