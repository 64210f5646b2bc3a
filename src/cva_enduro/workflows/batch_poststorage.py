"""Batch post-storage workflow: builds the AtoM CSV report for a batch."""

from __future__ import annotations

from datetime import timedelta

from cva_enduro.activities.create_csv import CREATE_CSV_NAME
from cva_enduro.core.exceptions import WorkflowError
from cva_enduro.core.protocols import IWorkflowContext
from cva_enduro.models.workflow import (
    ActivityOptions,
    BatchPoststorageRequest,
    BatchPoststorageResult,
    CreateCSVParams,
    CreateCSVResult,
    Outcome,
    RetryPolicy,
)

BATCH_POSTSTORAGE_NAME = "batch-poststorage-workflow"

FILESYS_TIMEOUT = timedelta(minutes=10)
FILESYS_MAX_ATTEMPTS = 1


def filesys_options(timeout: timedelta, maximum_attempts: int) -> ActivityOptions:
    """Options for activities that only touch the report store."""
    return ActivityOptions(
        schedule_to_close_timeout=timeout,
        retry_policy=RetryPolicy(maximum_attempts=maximum_attempts),
    )


class BatchPoststorage:
    """Runs once every SIP of a batch has been stored.

    Only ``Outcome.SUCCESS`` is ever returned; a failed step raises
    WorkflowError instead of producing a SYSTEM_ERROR or CONTENT_ERROR
    result.
    """

    def __init__(
        self,
        *,
        timeout: timedelta = FILESYS_TIMEOUT,
        maximum_attempts: int = FILESYS_MAX_ATTEMPTS,
    ) -> None:
        self._filesys = filesys_options(timeout, maximum_attempts)

    def execute(self, ctx: IWorkflowContext, request: BatchPoststorageRequest) -> BatchPoststorageResult:
        ctx.logger.debug(
            "batch_poststorage_running",
            batch=str(request.batch.uuid),
            sips=len(request.sips),
        )

        # Create an AtoM CSV file for all the SIPs in the batch.
        try:
            csv_result = ctx.execute_activity(
                CREATE_CSV_NAME,
                CreateCSVParams(batch=request.batch, sips=request.sips),
                options=self._filesys,
                result_type=CreateCSVResult,
            )
        except Exception as exc:
            raise WorkflowError(f"Create CSV: {exc}") from exc

        return BatchPoststorageResult(outcome=Outcome.SUCCESS, relative_path=csv_result.key)
