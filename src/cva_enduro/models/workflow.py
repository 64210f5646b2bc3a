"""Workflow and activity payloads, outcomes, and execution policy."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum

from pydantic import BaseModel, Field

from cva_enduro.models.batch import SIP, Batch


class Outcome(StrEnum):
    """Business classification of a workflow run."""

    SUCCESS = "success"
    SYSTEM_ERROR = "system_error"
    CONTENT_ERROR = "content_error"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy for a single activity call."""

    maximum_attempts: int
    initial_interval: timedelta = timedelta(seconds=1)
    backoff_coefficient: float = 2.0
    maximum_interval: timedelta = timedelta(seconds=30)

    def __post_init__(self) -> None:
        if self.maximum_attempts < 1:
            raise ValueError(f"maximum_attempts must be >= 1, got {self.maximum_attempts}")


@dataclass(frozen=True)
class ActivityOptions:
    """Execution policy applied by the engine to one activity call."""

    schedule_to_close_timeout: timedelta
    retry_policy: RetryPolicy = RetryPolicy(maximum_attempts=1)


class CreateCSVParams(BaseModel):
    batch: Batch
    sips: list[SIP] = Field(default_factory=list)


class CreateCSVResult(BaseModel):
    key: str


class BatchPoststorageRequest(BaseModel):
    """Input of the batch post-storage workflow."""

    batch: Batch
    sips: list[SIP] = Field(default_factory=list)


class BatchPoststorageResult(BaseModel):
    """Output of the batch post-storage workflow."""

    outcome: Outcome
    relative_path: str = ""
