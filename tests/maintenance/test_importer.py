# SPDX-License-Identifier: MIT
"""Tests for the Traveling Tree House stop importer."""

import json
from pathlib import Path

import pytest

from maintenance.exceptions import ImportFileError, StoreError
from maintenance.ingesters import Outcome, TravelingStopImporter, load_json_records

SAMPLE_FILE = Path(__file__).resolve().parents[2] / "scripts" / "sampleTravelingStops.json"


@pytest.fixture
def stop_store(mocker):
    """Mocked TravelingStopStore that remembers what was saved."""
    store = mocker.MagicMock()
    store.saved = []

    def _create(stop):
        store.saved.append(stop)
        return len(store.saved)

    store.create.side_effect = _create
    return store


class TestLoadJsonRecords:
    """Test reading the import file."""

    def test_reads_array(self, tmp_path):
        path = tmp_path / "stops.json"
        path.write_text(json.dumps([{"stopName": "A"}]), encoding="utf-8")

        assert load_json_records(path) == [{"stopName": "A"}]

    def test_rejects_non_array(self, tmp_path):
        """An object at the top level is not a list of stops."""
        path = tmp_path / "stops.json"
        path.write_text(json.dumps({"stopName": "A"}), encoding="utf-8")

        with pytest.raises(ImportFileError):
            load_json_records(path)

    def test_rejects_invalid_json(self, tmp_path):
        path = tmp_path / "stops.json"
        path.write_text("[{not json", encoding="utf-8")

        with pytest.raises(ImportFileError):
            load_json_records(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImportFileError):
            load_json_records(tmp_path / "nope.json")


class TestScreening:
    """Test records that are skipped rather than errored."""

    def test_missing_address_is_skipped_not_saved(self, stop_store, sample_stop_data):
        """A record without stopAddress should be skipped and never persisted."""
        del sample_stop_data["stopAddress"]

        result = TravelingStopImporter(stop_store).run([sample_stop_data])

        assert result.skipped == 1
        assert result.errors == 0
        assert result.imported == 0
        assert stop_store.saved == []
        assert "stopAddress" in result.outcomes[0].reason

    def test_empty_required_string_is_skipped(self, stop_store, sample_stop_data):
        sample_stop_data["stopZipCode"] = ""

        result = TravelingStopImporter(stop_store).run([sample_stop_data])

        assert result.skipped == 1

    def test_missing_books_is_skipped(self, stop_store, sample_stop_data):
        del sample_stop_data["booksDistributed"]

        result = TravelingStopImporter(stop_store).run([sample_stop_data])

        assert result.skipped == 1

    def test_zero_books_is_allowed(self, stop_store, sample_stop_data):
        """Zero books is a real value, not a missing field."""
        sample_stop_data["booksDistributed"] = 0

        result = TravelingStopImporter(stop_store).run([sample_stop_data])

        assert result.imported == 1
        assert stop_store.saved[0].books_distributed == 0

    def test_unknown_stop_type_is_skipped(self, stop_store, sample_stop_data):
        sample_stop_data["stopType"] = "school"

        result = TravelingStopImporter(stop_store).run([sample_stop_data])

        assert result.skipped == 1
        assert 'Invalid stop type "school"' in result.outcomes[0].reason

    def test_non_object_is_skipped(self, stop_store):
        result = TravelingStopImporter(stop_store).run(["just a string"])

        assert result.skipped == 1
        assert result.outcomes[0].label == "Unknown"


class TestImport:
    """Test records that are imported or errored."""

    def test_valid_record_gets_defaults(self, stop_store, sample_stop_data):
        result = TravelingStopImporter(stop_store).run([sample_stop_data])

        assert result.imported == 1
        stop = stop_store.saved[0]
        assert stop.contact_method == ""
        assert stop.did_we_read_to_them is False
        assert stop.community_event_settings.were_we_on_flyer is False
        assert result.outcomes[0].label == "Little Sprouts Daycare (2024-03-02)"

    def test_books_parsed_like_parse_int(self, stop_store, sample_stop_data):
        sample_stop_data["booksDistributed"] = "75 books"

        TravelingStopImporter(stop_store).run([sample_stop_data])

        assert stop_store.saved[0].books_distributed == 75

    def test_non_numeric_books_is_error(self, stop_store, sample_stop_data):
        sample_stop_data["booksDistributed"] = "lots"

        result = TravelingStopImporter(stop_store).run([sample_stop_data])

        assert result.errors == 1
        assert stop_store.saved == []

    def test_invalid_zip_is_error(self, stop_store, sample_stop_data):
        """Model validation failures count as errors with a readable reason."""
        sample_stop_data["stopZipCode"] = "1910"

        result = TravelingStopImporter(stop_store).run([sample_stop_data])

        assert result.errors == 1
        assert result.outcomes[0].reason.startswith("stopZipCode:")

    def test_numeric_text_fields_are_stored_as_strings(self, stop_store, sample_stop_data):
        """Numbers in string fields should be cast, not rejected."""
        sample_stop_data["stopZipCode"] = 19104
        sample_stop_data["stopName"] = 311

        result = TravelingStopImporter(stop_store).run([sample_stop_data])

        assert result.imported == 1
        assert result.errors == 0
        stop = stop_store.saved[0]
        assert stop.stop_zip_code == "19104"
        assert stop.stop_name == "311"

    def test_store_failure_does_not_abort_batch(self, stop_store, sample_stop_data):
        """A failed insert should be recorded and the next record still imported."""
        second = {**sample_stop_data, "stopName": "Second Stop"}
        stop_store.create.side_effect = [StoreError("write failed"), 2]

        result = TravelingStopImporter(stop_store).run([sample_stop_data, second])

        assert result.errors == 1
        assert result.imported == 1
        assert [o.outcome for o in result.outcomes] == [Outcome.ERROR, Outcome.IMPORTED]

    def test_progress_callback_sees_every_record(self, stop_store, sample_stop_data):
        seen = []
        importer = TravelingStopImporter(stop_store, progress_callback=seen.append)

        importer.run([sample_stop_data, {"stopName": "Half a record"}])

        assert [o.outcome for o in seen] == [Outcome.IMPORTED, Outcome.SKIPPED]

    def test_sample_file_imports_cleanly(self, stop_store):
        """The bundled sample file should import every record."""
        result = TravelingStopImporter(stop_store).run_file(SAMPLE_FILE)

        assert result.records_total == 3
        assert result.imported == 3
        assert {stop.stop_type for stop in stop_store.saved} == {"daycare", "branch", "community_event"}
        assert result.duration_seconds is not None
