"""Main FastAPI application for the Index Intellect backend."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from indexintellect.api.errors import register_exception_handlers
from indexintellect.api.routes.plan import router as plan_router
from indexintellect.api.routes.roadmap import router as roadmap_router
from indexintellect.core.config import settings
from indexintellect.core.logging import configure_logging
from indexintellect.core.middleware import RequestIDMiddleware
from indexintellect.observability.client import init_opik
from indexintellect.observability.tracing import trace

configure_logging(log_level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize observability backends after the event loop starts."""
    init_opik()
    yield


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-Id"],
    expose_headers=["X-Request-Id"],
)
register_exception_handlers(app)
app.include_router(plan_router)
app.include_router(roadmap_router)


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
