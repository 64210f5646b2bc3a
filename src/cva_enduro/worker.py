"""Worker wiring: engine, registered activities and the post-storage workflow."""

from __future__ import annotations

from dataclasses import dataclass

from cva_enduro.activities.create_csv import CREATE_CSV_NAME, CreateCSV
from cva_enduro.core.config import AppSettings
from cva_enduro.core.protocols import IHistoryBackend, IFileStore, IWorkflowEngine
from cva_enduro.models.workflow import BatchPoststorageRequest, BatchPoststorageResult, CreateCSVParams
from cva_enduro.orchestration.engine import LocalEngine
from cva_enduro.orchestration.history import ActivityHistory
from cva_enduro.persistence import create_persistence
from cva_enduro.workflows.batch_poststorage import BatchPoststorage


@dataclass
class Worker:
    """A registered engine plus the workflow it serves."""

    settings: AppSettings
    store: IFileStore
    history_store: IHistoryBackend
    engine: IWorkflowEngine
    workflow: BatchPoststorage

    def run(self, request: BatchPoststorageRequest, workflow_id: str | None = None) -> BatchPoststorageResult:
        return self.engine.run_workflow(self.workflow, request, workflow_id=workflow_id)


def create_worker(
    settings: AppSettings,
    *,
    store: IFileStore | None = None,
    history_store: IHistoryBackend | None = None,
) -> Worker:
    """Build a worker from settings; ``store`` and ``history_store`` override the configured backends."""
    if store is None or history_store is None:
        default_store, default_history = create_persistence(settings)
        if store is None:
            store = default_store
        if history_store is None:
            history_store = default_history

    engine = LocalEngine(history=ActivityHistory(history_store))
    engine.register_activity(CREATE_CSV_NAME, CreateCSV(store).execute, CreateCSVParams)

    return Worker(
        settings=settings,
        store=store,
        history_store=history_store,
        engine=engine,
        workflow=BatchPoststorage(),
    )
