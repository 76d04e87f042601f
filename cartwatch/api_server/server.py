"""
FastAPI server: liveness and scheduler status.

The lifespan builds the scheduler and runs its loop as a background asyncio
task next to the API; on shutdown the loop is signalled and drained.

GET /health  -> liveness probe (container HEALTHCHECK)
GET /status  -> scheduler state, counters and the last tick report
"""

from __future__ import annotations

import asyncio
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, Callable

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from cartwatch import __version__
from cartwatch.agent_worker.runner import CartAbandonmentScheduler
from cartwatch.cartwatch_logging import get_logger

logger = get_logger(__name__)

SchedulerProvider = Callable[[], AbstractAsyncContextManager[CartAbandonmentScheduler]]


# -----------------------------------------------------------------------------
# Response models
# -----------------------------------------------------------------------------


class TickReportResponse(BaseModel):
    tick: int
    users: int
    outcomes: dict[str, int] = Field(default_factory=dict)
    duration_sec: float
    finished_at: float


class StatusResponse(BaseModel):
    """GET /status response."""

    state: str = Field(..., description="idle | ticking")
    tick_count: int = Field(..., ge=0, description="Ticks started since boot")
    completed_ticks: int = Field(..., ge=0)
    in_flight_ticks: int = Field(..., ge=0)
    tracked_users: int = Field(..., ge=0, description="Users currently holding a non-empty cart")
    processed_count: int = Field(..., ge=0)
    error_count: int = Field(..., ge=0)
    notified_count: int = Field(..., ge=0)
    last_error: str | None = None
    last_tick: TickReportResponse | None = None


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------


def _default_provider() -> AbstractAsyncContextManager[CartAbandonmentScheduler]:
    from cartwatch.agent_worker.runtime import build_scheduler
    from cartwatch.config.settings import get_settings

    return build_scheduler(get_settings())


def create_app(
    provider: SchedulerProvider | None = None,
    *,
    start_loop: bool = True,
) -> FastAPI:
    """
    Build the API app.

    provider: returns an async context manager yielding the scheduler
        (defaults to HTTP collaborators configured from the environment).
    start_loop: run the polling loop in the background during the app's lifespan.
    """
    scheduler_provider = provider or _default_provider

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with scheduler_provider() as scheduler:
            app.state.scheduler = scheduler
            stop_event = asyncio.Event()
            loop_task: asyncio.Task[None] | None = None
            if start_loop:
                loop_task = asyncio.create_task(scheduler.run(stop_event), name="cartwatch-scheduler")
                logger.info("api_scheduler_started", interval_sec=scheduler.config.interval_sec)
            try:
                yield
            finally:
                stop_event.set()
                if loop_task is not None:
                    try:
                        await loop_task
                    except Exception as e:
                        logger.exception("api_scheduler_crashed", error=str(e))
                    logger.info("api_scheduler_stopped")
                app.state.scheduler = None

    app = FastAPI(
        title="cartwatch",
        description="Cart-abandonment detection agent: liveness and scheduler status.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.scheduler = None

    @app.get("/health")
    def health() -> dict[str, str]:
        """Liveness probe: API is up."""
        return {"status": "ok"}

    @app.get("/status", response_model=StatusResponse)
    def status(request: Request) -> StatusResponse:
        """Scheduler state and counters. 503 until the scheduler is wired."""
        scheduler: CartAbandonmentScheduler | None = request.app.state.scheduler
        if scheduler is None:
            raise HTTPException(status_code=503, detail="scheduler not running")
        return StatusResponse(**scheduler.snapshot())

    @app.exception_handler(HTTPException)
    def http_exception_handler(request: Any, exc: HTTPException) -> JSONResponse:
        """Consistent JSON error response for HTTPException."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    return app
