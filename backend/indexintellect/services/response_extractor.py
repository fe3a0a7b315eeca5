"""Recover generated text from whatever envelope the upstream API returned."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from indexintellect.core.errors import ExtractionFailed
from indexintellect.observability.metrics import log_metric

logger = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


@dataclass(frozen=True)
class Extraction:
    text: str
    suggested_sprints: Optional[int] = None
    structured: bool = False
    degraded: bool = False


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def _get(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        return value.get(key)
    return None


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _candidate_parts_text(data: Any) -> Optional[str]:
    return _as_text(_get(_first(_get(_get(_first(_get(data, "candidates")), "content"), "parts")), "text"))


def _candidate_content_text(data: Any) -> Optional[str]:
    return _as_text(_get(_get(_first(_get(data, "candidates")), "content"), "text"))


def _candidate_text(data: Any) -> Optional[str]:
    return _as_text(_get(_first(_get(data, "candidates")), "text"))


def _candidate_output(data: Any) -> Optional[str]:
    return _as_text(_get(_first(_get(data, "candidates")), "output"))


def _output_content_text(data: Any) -> Optional[str]:
    content = _get(_first(_get(data, "output")), "content")
    if isinstance(content, list):
        return _as_text(_get(_first(content), "text"))
    return _as_text(_get(content, "text"))


def _output_text_camel(data: Any) -> Optional[str]:
    return _as_text(_get(data, "outputText"))


def _output_text_snake(data: Any) -> Optional[str]:
    return _as_text(_get(data, "output_text"))


def _chat_choice_content(data: Any) -> Optional[str]:
    return _as_text(_get(_get(_first(_get(data, "choices")), "message"), "content"))


def _top_level_text(data: Any) -> Optional[str]:
    return _as_text(_get(data, "text"))


# Ordered by priority; the first path that yields text wins.
CANDIDATE_PATHS: List[Callable[[Any], Optional[str]]] = [
    _candidate_parts_text,
    _candidate_content_text,
    _candidate_text,
    _candidate_output,
    _output_content_text,
    _output_text_camel,
    _output_text_snake,
    _chat_choice_content,
    _top_level_text,
]


def _coerce_sprints(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int) and value >= 1:
        return value
    if isinstance(value, float) and value.is_integer() and value >= 1:
        return int(value)
    if isinstance(value, str) and value.strip().isdigit() and int(value.strip()) >= 1:
        return int(value.strip())
    return None


def _from_structured(data: Any) -> Optional[Extraction]:
    plan = _as_text(data.get("plan")) if isinstance(data, dict) else None
    if plan and plan.strip():
        return Extraction(
            text=plan,
            suggested_sprints=_coerce_sprints(data.get("suggestedSprints")),
            structured=True,
        )
    return None


def _loads_object(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return None


def _from_text(raw: str) -> Optional[Extraction]:
    """Try the structured shape on raw text, then on a fenced block inside it."""
    direct = _from_structured(_loads_object(raw.strip()))
    if direct:
        return direct

    match = FENCE_PATTERN.search(raw)
    if match:
        return _from_structured(_loads_object(match.group(1).strip()))
    return None


def extract_text(payload: Any, *, strict: bool = False) -> Extraction:
    """
    Locate the generated plan in an upstream payload.

    ``payload`` may be a decoded JSON object or the raw model text. With
    ``strict`` the raw-serialization fallback is disabled and
    :class:`ExtractionFailed` is raised instead.
    """
    if isinstance(payload, str):
        if not payload.strip():
            raise ExtractionFailed("Upstream returned empty text")
        return _from_text(payload) or Extraction(text=payload)

    structured = _from_structured(payload)
    if structured:
        return structured

    for path in CANDIDATE_PATHS:
        text = path(payload)
        if text is not None:
            return _from_text(text) or Extraction(text=text)

    if strict or payload is None:
        raise ExtractionFailed()

    logger.warning("No known response shape matched; falling back to raw serialization")
    log_metric("plan.extraction.degraded", 1)
    return Extraction(text=json.dumps(payload, ensure_ascii=False, default=str), degraded=True)


def _object_with_key(raw: str, key: str) -> Optional[dict]:
    for candidate in (raw.strip(), *(m.strip() for m in FENCE_PATTERN.findall(raw))):
        data = _loads_object(candidate)
        if isinstance(data, dict) and key in data:
            return data
    return None


def extract_json(payload: Any, key: str) -> dict:
    """Return the first JSON object carrying ``key`` found in the payload or its generated text."""
    if isinstance(payload, dict) and key in payload:
        return payload

    text = payload if isinstance(payload, str) else next(
        (found for found in (path(payload) for path in CANDIDATE_PATHS) if found is not None),
        None,
    )
    if text:
        data = _object_with_key(text, key)
        if data is not None:
            return data
    raise ExtractionFailed(f"No JSON object with '{key}' in upstream response")
