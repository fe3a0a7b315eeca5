"""HTTP middleware for the plan API."""
from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from indexintellect.core.context import REQUEST_ID_HEADER, accept_request_id, bind_request_id, reset_request_id

logger = logging.getLogger("indexintellect.access")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation id, echo it back, and write one access log line."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        request_id = accept_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        token = bind_request_id(request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            # Bodies carry the user's index and the generated plan; only the request line is logged.
            logger.info("%s %s -> %d (%.0f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        finally:
            reset_request_id(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
