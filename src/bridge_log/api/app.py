"""FastAPI application factory."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bridge_log.api.logbook import router as logbook_router
from bridge_log.app_logging import configure_logging
from bridge_log.containers import AppContainer
from bridge_log.services.logbook import run_rollover_timer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        rollover_task = asyncio.create_task(
            run_rollover_timer(
                state_container.logbooks,
                state_container.settings.rollover_interval_seconds,
            )
        )
        logger.info(
            "Rollover timer started (every %ss)",
            state_container.settings.rollover_interval_seconds,
        )
        yield
        rollover_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await rollover_task
        flushed = state_container.logbooks.flush_writes()
        if flushed:
            logger.info("Flushed %s pending state write(s) on shutdown", flushed)
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(logbook_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
