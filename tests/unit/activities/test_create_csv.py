"""Tests for the create-csv activity."""

from __future__ import annotations

from uuid import UUID

import pytest

from cva_enduro.activities.create_csv import ACCESS_RESTRICTION, CreateCSV, report_name
from cva_enduro.core.exceptions import InvalidInputError, StorageError
from cva_enduro.models.batch import SIP, Batch
from cva_enduro.models.workflow import CreateCSVParams
from tests.fakes import FlakyFileStore, MemoryFileStore

BATCH_ID = UUID("33333333-3333-3333-3333-333333333333")
AIP_ID_1 = UUID("11111111-2222-3333-4444-555555555555")
AIP_ID_2 = UUID("22222222-3333-4444-5555-666666666666")
KEY = "reports/batch_33333333-3333-3333-3333-333333333333.csv"

HEADER = (
    "title,alternativeIdentifiers,alternativeIdentifierLabels,"
    "radGeneralMaterialDesignation,levelOfDescription,culture,"
    "publicationStatus,accessRestriction\n"
)


@pytest.fixture
def store():
    return MemoryFileStore(prefix="reports/")


@pytest.fixture
def activity(store):
    return CreateCSV(store)


def _params(*sips: SIP) -> CreateCSVParams:
    return CreateCSVParams(batch=Batch(uuid=BATCH_ID), sips=list(sips))


class TestWritesReport:
    def test_writes_csv_with_two_sips(self, activity, store):
        result = activity.execute(_params(
            SIP(name="Test SIP 1", aip_id=AIP_ID_1),
            SIP(name="Test SIP 2", aip_id=AIP_ID_2),
        ))

        assert result.key == KEY
        assert store.read(report_name(BATCH_ID)).decode("utf-8") == (
            HEADER
            + "Test SIP 1,11111111-2222-3333-4444-555555555555,AIP UUID,Multiple media,File,en,draft,"
            + ACCESS_RESTRICTION + "\n"
            + "Test SIP 2,22222222-3333-4444-5555-666666666666,AIP UUID,Multiple media,File,en,draft,"
            + ACCESS_RESTRICTION + "\n"
        )

    def test_access_restriction_text(self):
        assert ACCESS_RESTRICTION == (
            "This file has not been reviewed for potential FOIPPA restrictions. "
            "Access is pending review and may be delayed. See archivist for details."
        )

    def test_skips_sip_without_aip_id(self, activity, store):
        result = activity.execute(_params(SIP(name="Test SIP 1")))
        assert result.key == KEY
        assert store.read(report_name(BATCH_ID)).decode("utf-8") == HEADER

    def test_mixes_archived_and_unarchived(self, activity, store):
        activity.execute(_params(
            SIP(name="Pending"),
            SIP(name="Stored", aip_id=AIP_ID_1),
        ))
        lines = store.read(report_name(BATCH_ID)).decode("utf-8").splitlines()
        assert len(lines) == 2
        assert lines[1].startswith("Stored,11111111-2222-3333-4444-555555555555,")

    def test_quotes_fields_with_commas_and_quotes(self, activity, store):
        activity.execute(_params(SIP(name='Letters, "personal"', aip_id=AIP_ID_1)))
        row = store.read(report_name(BATCH_ID)).decode("utf-8").splitlines()[1]
        assert row.startswith('"Letters, ""personal""",11111111-2222-3333-4444-555555555555,')

    def test_quotes_fields_with_embedded_newline(self, activity, store):
        activity.execute(_params(SIP(name="Minutes\nDraft", aip_id=AIP_ID_1)))
        content = store.read(report_name(BATCH_ID)).decode("utf-8")
        assert content.split("\n", 1)[1].startswith(
            '"Minutes\nDraft",11111111-2222-3333-4444-555555555555,AIP UUID,'
        )

    def test_encodes_utf8(self, activity, store):
        activity.execute(_params(SIP(name="École publique", aip_id=AIP_ID_1)))
        data = store.read(report_name(BATCH_ID))
        assert "École publique".encode("utf-8") in data

    def test_same_batch_resolves_to_same_key_and_overwrites(self, activity, store):
        first = activity.execute(_params(SIP(name="First", aip_id=AIP_ID_1)))
        second = activity.execute(_params(SIP(name="Second", aip_id=AIP_ID_2)))

        assert first.key == second.key
        assert store.keys == [KEY]
        content = store.read(report_name(BATCH_ID)).decode("utf-8")
        assert "Second" in content
        assert "First" not in content


class TestInvalidInput:
    def test_no_sips_provided(self, activity, store):
        with pytest.raises(InvalidInputError, match="create CSV: no SIPs provided"):
            activity.execute(_params())
        assert store.keys == []

    def test_errors_if_sip_name_is_missing(self, activity, store):
        with pytest.raises(InvalidInputError, match="create CSV: SIP 1: missing name") as exc_info:
            activity.execute(_params(SIP(aip_id=AIP_ID_1)))
        assert exc_info.value.position == 1
        assert store.keys == []

    def test_reports_first_invalid_position(self, activity, store):
        with pytest.raises(InvalidInputError, match="SIP 3: missing name") as exc_info:
            activity.execute(_params(
                SIP(name="ok", aip_id=AIP_ID_1),
                SIP(name="no aip"),
                SIP(name=""),
                SIP(name=""),
            ))
        assert exc_info.value.position == 3

    def test_invalid_name_leaves_previous_report_untouched(self, activity, store):
        activity.execute(_params(SIP(name="Keep me", aip_id=AIP_ID_1)))
        with pytest.raises(InvalidInputError):
            activity.execute(_params(SIP(name="New", aip_id=AIP_ID_2), SIP(name="")))
        assert "Keep me" in store.read(report_name(BATCH_ID)).decode("utf-8")


class TestStorageFailure:
    def test_wraps_commit_failure(self):
        store = FlakyFileStore(failures=1, prefix="reports/")
        with pytest.raises(StorageError, match="create CSV: simulated outage"):
            CreateCSV(store).execute(_params(SIP(name="x", aip_id=AIP_ID_1)))
        assert store.keys == []
