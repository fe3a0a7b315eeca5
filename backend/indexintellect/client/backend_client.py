"""HTTP transport from the study session to the backend."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from indexintellect.api.schemas.plan import PlanResponse
from indexintellect.api.schemas.roadmap import RoadmapResponse, Task
from indexintellect.core.config import settings
from indexintellect.core.context import REQUEST_ID_HEADER, get_request_id, new_request_id
from indexintellect.core.errors import PlanValidationError, TransportError, UpstreamError

logger = logging.getLogger(__name__)


class BackendClient:
    """Thin wrapper around the two backend endpoints.

    Any ``httpx.Client`` works as transport, including FastAPI's
    ``TestClient``.
    """

    def __init__(self, http: Optional[httpx.Client] = None, base_url: Optional[str] = None) -> None:
        self._http = http or httpx.Client(
            base_url=base_url or settings.backend_url,
            timeout=settings.backend_timeout_seconds,
        )

    def close(self) -> None:
        self._http.close()

    def generate_plan(self, index: str, goal: str) -> PlanResponse:
        data = self._post("/generate-plan", {"index": index, "goal": goal})
        if not data.get("plan"):
            raise UpstreamError("Received empty plan from server")
        try:
            return PlanResponse.model_validate(data)
        except ValidationError:
            # A bad suggestedSprints value should not cost the user their plan.
            logger.warning("Ignoring malformed suggestedSprints=%r", data.get("suggestedSprints"))
            return PlanResponse(plan=data["plan"])

    def generate_roadmap(self, study_plan: str, sprints: int) -> List[Task]:
        data = self._post("/generate-roadmap", {"studyPlan": study_plan, "sprints": sprints})
        try:
            return RoadmapResponse.model_validate(data).tasks
        except ValidationError as exc:
            raise UpstreamError("Received malformed roadmap from server") from exc

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        request_id = get_request_id() or new_request_id()
        try:
            response = self._http.post(path, json=body, headers={REQUEST_ID_HEADER: request_id})
        except httpx.HTTPError as exc:
            logger.error("Request %s to %s failed: %s", request_id, path, exc)
            raise TransportError() from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.status_code == 400:
            raise PlanValidationError(data.get("error") or "Invalid request")
        if response.is_error:
            raise UpstreamError(data.get("error") or f"Request failed with status {response.status_code}")
        return data
