from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request

from marquee.infrastructure.config import AppConfig
from marquee.interfaces.app_state import AppState
from marquee.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def build_app(config: AppConfig) -> FastAPI:
    """Build the FastAPI app. Only configuration here; resources live in lifespan()."""
    app = FastAPI(
        title="Marquee",
        description="Catalog search, ranking and playback launcher",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from marquee.interfaces.api.router import router as api_router

    app.include_router(api_router)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
            )

    return app
