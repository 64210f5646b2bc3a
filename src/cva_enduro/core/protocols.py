"""Protocol interfaces for all CVA Enduro abstractions.

Layers talk to each other through these Protocols; implementations
need no common base class.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import IO, TYPE_CHECKING, Any, Callable, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

if TYPE_CHECKING:
    from cva_enduro.models.workflow import ActivityOptions
    from cva_enduro.persistence.blob import BlobWriter

R = TypeVar("R", bound=BaseModel)


# ---------------------------------------------------------------------------
# Persistence: File Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """S3-compatible keyed blob store with a configured key prefix."""

    def key_for(self, path: str) -> str: ...

    def open_writer(
        self, path: str, content_type: str = "application/octet-stream"
    ) -> BlobWriter: ...

    def open_reader(self, path: str) -> AbstractContextManager[IO[bytes]]: ...

    def read(self, path: str) -> bytes: ...

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str: ...


# ---------------------------------------------------------------------------
# Persistence: Activity History Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class IHistoryBackend(Protocol):
    """Expiring write-once entries holding recorded activity results."""

    def get(self, key: str) -> str | None: ...

    def put_if_absent(self, key: str, value: str, ttl: int) -> bool: ...

    def delete_many(self, keys: list[str]) -> int: ...

    def ping(self) -> bool: ...


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------

@runtime_checkable
class IWorkflowContext(Protocol):
    """What a running workflow may ask of its engine."""

    @property
    def workflow_id(self) -> str: ...

    @property
    def logger(self) -> Any: ...

    def execute_activity(
        self,
        name: str,
        params: BaseModel,
        *,
        options: ActivityOptions,
        result_type: type[R],
    ) -> R: ...


@runtime_checkable
class IWorkflow(Protocol):
    """A durable orchestration function."""

    def execute(self, ctx: IWorkflowContext, request: Any) -> Any: ...


@runtime_checkable
class IWorkflowEngine(Protocol):
    """Runs workflows and the named activities they invoke."""

    def register_activity(
        self, name: str, fn: Callable[[Any], BaseModel], params_type: type[BaseModel]
    ) -> None: ...

    def run_workflow(self, workflow: IWorkflow, request: Any, *, workflow_id: str | None = None) -> Any: ...
