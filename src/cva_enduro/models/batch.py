"""Batch and SIP models handed to the post-storage workflow."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class SIPStatus(StrEnum):
    ERROR = "error"
    PROCESSING = "processing"
    INGESTED = "ingested"
    QUEUED = "queued"
    VALIDATED = "validated"
    FAILED = "failed"
    CANCELED = "canceled"


class Batch(BaseModel):
    """A group of SIPs processed together; one report is produced per batch."""

    model_config = ConfigDict(frozen=True)

    uuid: UUID
    sips_count: int = 0


class SIP(BaseModel):
    """A submission information package within a batch.

    ``aip_id`` stays ``None`` until the package has been stored as an AIP;
    such SIPs are left out of the batch report.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    aip_id: Optional[UUID] = None

    # --- Pass-through metadata, unused by report generation ---
    id: Optional[int] = None
    uuid: Optional[UUID] = None
    status: Optional[SIPStatus] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None  # Set when processing starts
    completed_at: Optional[datetime] = None  # Set when ingest completes
    failed_as: str = ""  # SIP or PIP, when the workflow failed
    failed_key: str = ""  # Object key of the failed package

    @property
    def has_aip(self) -> bool:
        return self.aip_id is not None
