"""Study plan generation service."""
from __future__ import annotations

import logging
from typing import Optional

from indexintellect.api.schemas.plan import PlanResponse
from indexintellect.core.errors import PlanValidationError
from indexintellect.observability.metrics import log_metric
from indexintellect.observability.tracing import annotate, trace
from indexintellect.services import llm_client
from indexintellect.services.prompts import SYSTEM_PROMPT, build_plan_prompt
from indexintellect.services.response_extractor import extract_text

logger = logging.getLogger(__name__)


def generate_plan(index: Optional[str], goal: Optional[str], request_id: str | None = None) -> PlanResponse:
    """Build the prompt, call the model, and reshape its reply into a PlanResponse."""
    if not index or not index.strip():
        raise PlanValidationError("Missing required field: index")

    metadata = {
        "route": "/generate-plan",
        "index_length": len(index),
        "goal_provided": bool(goal and goal.strip()),
    }
    with trace("plan.generate", metadata=metadata, request_id=request_id) as span:
        raw = llm_client.request_json_completion(SYSTEM_PROMPT, build_plan_prompt(index, goal))
        extraction = extract_text(raw)
        annotate(span, **metadata, degraded=extraction.degraded, structured=extraction.structured)

    if extraction.degraded:
        logger.warning("Plan extraction degraded to raw serialization (%d chars)", len(extraction.text))
    elif not extraction.structured:
        logger.info("Model ignored JSON mode; using plain text reply as plan")

    log_metric("plan.generate.success", 1)
    log_metric("plan.generate.length", len(extraction.text))
    return PlanResponse(plan=extraction.text, suggested_sprints=extraction.suggested_sprints)
