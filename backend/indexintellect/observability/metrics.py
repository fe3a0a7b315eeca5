"""Counters and timings for plan generation, recorded as short Opik traces."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from indexintellect.observability import tracing

logger = logging.getLogger(__name__)

METRIC_PREFIX = "metric:"


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record ``name=value``; silently skipped when tracing is off."""
    client = tracing.get_opik_client()
    if not client:
        return

    payload: Dict[str, Any] = {**(metadata or {}), "value": value}
    try:
        client.trace(name=f"{METRIC_PREFIX}{name}", metadata=payload).end()
    except Exception as exc:  # pragma: no cover - SDK failures must not break generation
        logger.debug("Dropped metric %s: %s", name, exc)
