"""Health check endpoints."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, HTTPException, Request

from cva_enduro.core.exceptions import HistoryStoreError

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(request: Request) -> dict[str, str]:
    worker = request.app.state.worker
    try:
        await asyncio.to_thread(worker.history_store.ping)
    except HistoryStoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return {"status": "ready", "task_queue": worker.settings.temporal.task_queue}
