"""Workflow execution endpoints."""

from __future__ import annotations

import asyncio

import structlog
from fastapi import APIRouter, HTTPException, Request

from cva_enduro.core.exceptions import (
    ActivityError,
    HistoryMismatchError,
    InvalidInputError,
    WorkflowError,
)
from cva_enduro.models.workflow import BatchPoststorageRequest, BatchPoststorageResult

router = APIRouter(tags=["workflows"])

logger = structlog.get_logger(__name__)


def _status_for(exc: WorkflowError) -> int:
    cause = exc.__cause__
    if isinstance(cause, HistoryMismatchError):
        return 409
    if isinstance(cause, ActivityError) and isinstance(cause.cause, InvalidInputError):
        return 422
    return 503


@router.post("/batch-poststorage", response_model=BatchPoststorageResult)
async def run_batch_poststorage(
    body: BatchPoststorageRequest, request: Request, workflow_id: str | None = None,
) -> BatchPoststorageResult:
    """Run the post-storage workflow for a batch and wait for its result."""
    worker = request.app.state.worker
    async with request.app.state.sessions:
        try:
            return await asyncio.to_thread(worker.run, body, workflow_id)
        except WorkflowError as exc:
            status = _status_for(exc)
            logger.warning("batch_poststorage_rejected", status=status, error=str(exc))
            raise HTTPException(status_code=status, detail=str(exc)) from exc
