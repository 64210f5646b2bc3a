"""CVA Enduro exception hierarchy."""

from __future__ import annotations


class CvaEnduroError(Exception):
    """Base exception for all CVA Enduro errors."""


class NonRetryable:
    """Marker mixin: the engine never retries errors carrying it."""


class ConfigError(CvaEnduroError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """An explicitly requested configuration file does not exist."""


class ConfigValidationError(ConfigError):
    """One or more configuration values are missing or invalid."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("\n".join(["invalid configuration:", *errors]))


class StorageError(CvaEnduroError):
    """Report store operation failed."""


class HistoryStoreError(CvaEnduroError):
    """Activity history backend operation failed."""


class InvalidInputError(NonRetryable, CvaEnduroError):
    """Activity input can never succeed as given."""

    def __init__(self, message: str, position: int | None = None) -> None:
        self.position = position
        super().__init__(message)


class ActivityError(CvaEnduroError):
    """An activity failed after its last attempt."""

    def __init__(self, activity: str, attempts: int, cause: BaseException) -> None:
        self.activity = activity
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"activity {activity} failed after {attempts} attempt(s): {cause}")


class ActivityNotRegisteredError(NonRetryable, CvaEnduroError):
    """No activity is registered under the requested name."""

    def __init__(self, activity: str) -> None:
        self.activity = activity
        super().__init__(f"activity not registered: {activity}")


class ActivityTimeoutError(NonRetryable, CvaEnduroError):
    """The schedule-to-close budget of an activity call was exceeded."""

    def __init__(self, activity: str, timeout_seconds: float) -> None:
        self.activity = activity
        self.timeout_seconds = timeout_seconds
        super().__init__(f"activity {activity} timed out after {timeout_seconds:g}s")


class AttemptCancelledError(NonRetryable, CvaEnduroError):
    """The attempt was abandoned by the engine; its side effects must not land."""


class HistoryMismatchError(NonRetryable, CvaEnduroError):
    """A recorded activity result belongs to a different input."""

    def __init__(self, workflow_id: str, seq: int) -> None:
        self.workflow_id = workflow_id
        self.seq = seq
        super().__init__(
            f"workflow {workflow_id!r} call {seq}: recorded result was produced for different input"
        )


class WorkflowError(CvaEnduroError):
    """A workflow aborted because one of its steps failed."""
