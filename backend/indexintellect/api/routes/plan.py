"""Study plan API routes."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from indexintellect.api.schemas.plan import PlanRequest, PlanResponse
from indexintellect.observability.metrics import log_metric
from indexintellect.services.plan_generator import generate_plan

router = APIRouter()


@router.post(
    "/generate-plan",
    response_model=PlanResponse,
    response_model_exclude_none=True,
    tags=["plan"],
)
def create_plan(request: PlanRequest, http_request: Request) -> PlanResponse:
    """Generate a markdown study plan for a book index and an optional goal."""
    request_id = getattr(http_request.state, "request_id", None)
    start_time = datetime.now(timezone.utc)

    response = generate_plan(request.index, request.goal, request_id=request_id)

    latency_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
    log_metric("plan.generate.latency_ms", latency_ms)
    return response
