"""AtoM CSV report for the SIPs of a batch."""

from __future__ import annotations

import codecs
import csv
from uuid import UUID

import structlog

from cva_enduro.core.exceptions import InvalidInputError, StorageError
from cva_enduro.models.batch import SIP
from cva_enduro.models.workflow import CreateCSVParams, CreateCSVResult
from cva_enduro.persistence.protocols import IFileStore

logger = structlog.get_logger(__name__)

CREATE_CSV_NAME = "create-csv-activity"

ACCESS_RESTRICTION = (
    "This file has not been reviewed for potential FOIPPA restrictions. "
    "Access is pending review and may be delayed. See archivist for details."
)

HEADER = [
    "title",
    "alternativeIdentifiers",
    "alternativeIdentifierLabels",
    "radGeneralMaterialDesignation",
    "levelOfDescription",
    "culture",
    "publicationStatus",
    "accessRestriction",
]


def report_name(batch_uuid: UUID) -> str:
    """Object name of the report for a batch, before the store prefix."""
    return f"batch_{batch_uuid}.csv"


def atom_row(sip: SIP) -> list[str]:
    """Render one archived SIP as an AtoM description row."""
    return [
        sip.name,            # title
        str(sip.aip_id),     # alternativeIdentifiers
        "AIP UUID",          # alternativeIdentifierLabels
        "Multiple media",    # radGeneralMaterialDesignation
        "File",              # levelOfDescription
        "en",                # culture
        "draft",             # publicationStatus
        ACCESS_RESTRICTION,  # accessRestriction
    ]


class CreateCSV:
    """Writes an AtoM CSV describing every archived SIP of a batch."""

    def __init__(self, store: IFileStore) -> None:
        self._store = store

    def execute(self, params: CreateCSVParams) -> CreateCSVResult:
        if not params.sips:
            raise InvalidInputError("create CSV: no SIPs provided")

        name = report_name(params.batch.uuid)
        rows = 0
        try:
            with self._store.open_writer(name, content_type="text/csv") as bw:
                cw = csv.writer(codecs.getwriter("utf-8")(bw), lineterminator="\n")
                cw.writerow(HEADER)

                for i, sip in enumerate(params.sips, start=1):
                    if not sip.name:
                        raise InvalidInputError(f"create CSV: SIP {i}: missing name", position=i)
                    if not sip.has_aip:
                        continue
                    cw.writerow(atom_row(sip))
                    rows += 1
        except StorageError as exc:
            raise StorageError(f"create CSV: {exc}") from exc

        logger.info(
            "create_csv_written",
            batch=str(params.batch.uuid),
            key=bw.key,
            rows=rows,
            skipped=len(params.sips) - rows,
        )
        return CreateCSVResult(key=bw.key)
