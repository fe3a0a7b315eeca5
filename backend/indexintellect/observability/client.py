"""Opik client lifecycle for plan and roadmap tracing."""
from __future__ import annotations

import logging
from threading import Lock
from typing import Optional

from indexintellect.core.config import settings

try:
    from opik import Opik
except ImportError:  # pragma: no cover
    Opik = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class _OpikHandle:
    """Holds the one Opik client for this process; initialization is attempted once."""

    def __init__(self) -> None:
        self.client: Optional["Opik"] = None
        self.attempted = False
        self.lock = Lock()

    def reset(self) -> None:
        with self.lock:
            self.client = None
            self.attempted = False


_handle = _OpikHandle()


def _build_client() -> Optional["Opik"]:
    if Opik is None or not settings.opik_enabled:
        return None
    if not settings.opik_api_key:
        logger.warning("OPIK_ENABLED is set without OPIK_API_KEY; plan tracing stays off.")
        return None
    try:
        client = Opik(project_name=settings.opik_project, api_key=settings.opik_api_key)
    except Exception as exc:  # pragma: no cover - SDK raises assorted errors
        logger.warning("Opik init failed, plan tracing disabled: %s", exc)
        return None
    logger.info("Tracing plan generation to Opik project %s", settings.opik_project)
    return client


def init_opik() -> Optional["Opik"]:
    """Create the client on first call; later calls return whatever the first produced."""
    with _handle.lock:
        if not _handle.attempted:
            _handle.attempted = True
            _handle.client = _build_client()
        return _handle.client


def get_opik_client() -> Optional["Opik"]:
    return _handle.client if _handle.attempted else init_opik()


def reset_opik() -> None:
    """Forget the cached client so the next call re-reads settings."""
    _handle.reset()
