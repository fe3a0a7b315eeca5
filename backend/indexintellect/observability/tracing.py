"""Opik spans around generation calls; everything here is a no-op when tracing is off."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from indexintellect.core.context import get_request_id
from indexintellect.observability import client as opik_client

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from opik.api_objects.trace.trace_client import Trace
else:  # pragma: no cover - typing helper
    Trace = object  # type: ignore[assignment]

logger = logging.getLogger(__name__)


def get_opik_client():
    return opik_client.get_opik_client()


def _quietly(span: Optional["Trace"], method: str, **kwargs: Any) -> None:
    if span is None:
        return
    try:
        getattr(span, method)(**kwargs)
    except Exception:  # pragma: no cover - SDK failures must not break generation
        logger.debug("Opik %s failed", method, exc_info=True)


def annotate(span: Optional["Trace"], **metadata: Any) -> None:
    """Attach extra metadata to a span opened by :func:`trace`."""
    if metadata:
        _quietly(span, "update", metadata=metadata)


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None,
) -> Iterator[Optional["Trace"]]:
    """
    Open an Opik trace for the enclosed block and close it on exit.

    ``request_id`` defaults to the id bound for the current HTTP request, so
    spans line up with log records. Exceptions are recorded on the span and
    re-raised.
    """
    client = get_opik_client()
    span: Optional["Trace"] = None

    if client:
        span_metadata = dict(metadata or {})
        request_id = request_id or get_request_id()
        if request_id:
            span_metadata.setdefault("request_id", request_id)
        try:
            span = client.trace(name=name, metadata=span_metadata or None)
        except Exception as exc:  # pragma: no cover - SDK failures must not break generation
            logger.debug("Could not open Opik trace %s: %s", name, exc)

    try:
        yield span
    except Exception as exc:
        _quietly(span, "update", error_info={"exception_type": type(exc).__name__, "message": str(exc)})
        raise
    finally:
        _quietly(span, "end")
