"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from cva_enduro import __version__
from cva_enduro.api.routes import health, workflows
from cva_enduro.core.config import AppSettings, load_settings
from cva_enduro.core.protocols import IHistoryBackend, IFileStore
from cva_enduro.worker import create_worker


def create_app(
    settings: AppSettings | None = None,
    *,
    store: IFileStore | None = None,
    history_store: IHistoryBackend | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize and tear down application resources."""
        app_settings = settings or load_settings()
        app.state.settings = app_settings
        app.state.worker = create_worker(app_settings, store=store, history_store=history_store)
        app.state.sessions = asyncio.Semaphore(app_settings.worker.max_concurrent_sessions)
        yield

    app = FastAPI(
        title="CVA Enduro Post-storage Worker",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(workflows.router, prefix="/workflows")
    return app
