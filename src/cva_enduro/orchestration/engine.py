"""In-process workflow engine.

Runs a workflow function and the named activities it invokes. Each activity
call gets a schedule-to-close budget covering every attempt, a bounded number
of attempts with exponential backoff, and a JSON boundary for its input and
output. While a run is in flight its successful results are recorded in an
ActivityHistory, so a run resumed under the same id after an interruption
reuses them instead of re-running the activity. The entries are cleared when
the run finishes.

A timed-out attempt cannot be killed. Its cancellation event is set instead,
which makes the report stores refuse any write the abandoned thread attempts
afterwards.
"""

from __future__ import annotations

import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

import structlog
from pydantic import BaseModel
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from cva_enduro.core.cancellation import cancellation_scope
from cva_enduro.core.exceptions import (
    ActivityError,
    ActivityNotRegisteredError,
    ActivityTimeoutError,
    HistoryStoreError,
    NonRetryable,
)
from cva_enduro.core.protocols import IWorkflow
from cva_enduro.models.workflow import ActivityOptions
from cva_enduro.orchestration.history import ActivityHistory
from cva_enduro.persistence.memory_backend import MemoryHistoryBackend

logger = structlog.get_logger(__name__)

R = TypeVar("R", bound=BaseModel)


@dataclass(frozen=True)
class _Registration:
    fn: Callable[[Any], BaseModel]
    params_type: type[BaseModel]


def _is_retryable(exc: BaseException) -> bool:
    return not isinstance(exc, NonRetryable)


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempt with structured context."""
    logger.warning(
        "activity_attempt_failed",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else "unknown",
        next_wait=retry_state.next_action.sleep if retry_state.next_action else 0,
    )


class WorkflowContext:
    """Per-execution handle given to a workflow."""

    def __init__(self, engine: LocalEngine, workflow_id: str) -> None:
        self._engine = engine
        self._workflow_id = workflow_id
        self._seq = 0
        self._settled: list[int] = []
        self._logger = structlog.get_logger("cva_enduro.workflow").bind(workflow_id=workflow_id)

    @property
    def workflow_id(self) -> str:
        return self._workflow_id

    @property
    def settled_calls(self) -> list[int]:
        """Sequence numbers of calls whose result this run recorded or replayed."""
        return list(self._settled)

    @property
    def logger(self) -> Any:
        return self._logger

    def execute_activity(
        self,
        name: str,
        params: BaseModel,
        *,
        options: ActivityOptions,
        result_type: type[R],
    ) -> R:
        self._seq += 1
        payload = self._engine.call_activity(
            self._workflow_id, self._seq, name, params.model_dump_json(), options,
        )
        self._settled.append(self._seq)
        return result_type.model_validate_json(payload)


class LocalEngine:
    """IWorkflowEngine running activities in worker threads of this process."""

    def __init__(self, history: ActivityHistory | None = None) -> None:
        self._activities: dict[str, _Registration] = {}
        self._history = history or ActivityHistory(MemoryHistoryBackend())

    def register_activity(
        self, name: str, fn: Callable[[Any], BaseModel], params_type: type[BaseModel]
    ) -> None:
        if name in self._activities:
            raise ValueError(f"activity already registered: {name}")
        self._activities[name] = _Registration(fn=fn, params_type=params_type)

    def run_workflow(self, workflow: IWorkflow, request: Any, *, workflow_id: str | None = None) -> Any:
        ctx = WorkflowContext(self, workflow_id or str(uuid.uuid4()))
        log = logger.bind(workflow_id=ctx.workflow_id, workflow=type(workflow).__name__)
        log.info("workflow_started")
        try:
            result = workflow.execute(ctx, request)
        except Exception as exc:
            log.error("workflow_failed", error=str(exc))
            raise
        finally:
            self._clear_history(ctx, log)
        log.info("workflow_completed")
        return result

    def _clear_history(self, ctx: WorkflowContext, log: Any) -> None:
        try:
            self._history.clear(ctx.workflow_id, ctx.settled_calls)
        except HistoryStoreError as exc:
            # Leftover entries expire; a reused id with other input is rejected meanwhile.
            log.warning("history_clear_failed", error=str(exc))

    def call_activity(
        self, workflow_id: str, seq: int, name: str, params_json: str, options: ActivityOptions,
    ) -> str:
        """Execute one activity call and return its JSON result."""
        registration = self._activities.get(name)
        if registration is None:
            raise ActivityNotRegisteredError(name)

        log = logger.bind(workflow_id=workflow_id, activity=name, seq=seq)
        recorded = self._history.get(workflow_id, seq, params_json)
        if recorded is not None:
            log.info("activity_replayed")
            return recorded

        timeout = options.schedule_to_close_timeout.total_seconds()
        policy = options.retry_policy
        deadline = time.monotonic() + timeout
        retrying = Retrying(
            stop=stop_after_attempt(policy.maximum_attempts) | stop_after_delay(timeout),
            wait=wait_exponential(
                multiplier=policy.initial_interval.total_seconds(),
                exp_base=policy.backoff_coefficient,
                max=policy.maximum_interval.total_seconds(),
            ),
            retry=retry_if_exception(_is_retryable),
            before_sleep=_log_retry,
            reraise=True,
        )

        try:
            for attempt in retrying:
                with attempt:
                    params = registration.params_type.model_validate_json(params_json)
                    result = self._attempt(name, registration.fn, params, deadline, timeout)
        except Exception as exc:
            attempts = retrying.statistics.get("attempt_number", 1)
            log.error("activity_failed", attempts=attempts, error=str(exc))
            raise ActivityError(name, attempts, exc) from exc

        payload = self._history.record(workflow_id, seq, params_json, result.model_dump_json())
        log.debug("activity_completed")
        return payload

    @staticmethod
    def _attempt(
        name: str, fn: Callable[[Any], BaseModel], params: BaseModel, deadline: float, timeout: float,
    ) -> BaseModel:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise ActivityTimeoutError(name, timeout)

        cancel = threading.Event()
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"activity-{name}")
        try:
            future = pool.submit(_run_cancellable, fn, params, cancel)
            done, _ = wait([future], timeout=remaining)
            if not done:
                cancel.set()
                raise ActivityTimeoutError(name, timeout)
            return future.result()
        finally:
            pool.shutdown(wait=False)


def _run_cancellable(
    fn: Callable[[Any], BaseModel], params: BaseModel, cancel: threading.Event,
) -> BaseModel:
    with cancellation_scope(cancel):
        return fn(params)
