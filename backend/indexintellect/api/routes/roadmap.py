"""Sprint roadmap API routes."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from indexintellect.api.schemas.roadmap import RoadmapRequest, RoadmapResponse
from indexintellect.observability.metrics import log_metric
from indexintellect.services.roadmap_generator import generate_roadmap

router = APIRouter()


@router.post("/generate-roadmap", response_model=RoadmapResponse, tags=["roadmap"])
def create_roadmap(request: RoadmapRequest, http_request: Request) -> RoadmapResponse:
    """Split an existing study plan into one task per sprint."""
    request_id = getattr(http_request.state, "request_id", None)
    start_time = datetime.now(timezone.utc)

    tasks = generate_roadmap(request.study_plan, request.sprints, request_id=request_id)

    latency_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
    log_metric("roadmap.generate.latency_ms", latency_ms, metadata={"sprints": request.sprints})
    return RoadmapResponse(tasks=tasks)
