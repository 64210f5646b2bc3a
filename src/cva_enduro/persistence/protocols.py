"""Persistence Protocol interfaces, re-exported from core."""

from __future__ import annotations

from cva_enduro.core.protocols import IFileStore, IHistoryBackend

__all__ = ["IFileStore", "IHistoryBackend"]
