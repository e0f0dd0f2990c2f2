"""Tests for record ingestion and the finding store."""

from datetime import date, datetime, timezone

from findingscope.findings.models import Severity, UnknownSeverity, parse_severity
from findingscope.findings.sample import sample_store
from findingscope.findings.store import FindingStore, parse_timestamp, synthesize_id

SNAPSHOT = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _store(records) -> FindingStore:
    return FindingStore.from_records(records, fetched_at=SNAPSHOT)


class TestSeverityParsing:
    def test_known_levels_case_insensitive(self):
        assert parse_severity("CRITICAL") is Severity.CRITICAL
        assert parse_severity("high") is Severity.HIGH
        assert parse_severity(" Medium ") is Severity.MEDIUM

    def test_unknown_preserved(self):
        assert parse_severity("INFORMATIONAL") == UnknownSeverity("INFORMATIONAL")
        assert parse_severity(None) == UnknownSeverity("")

    def test_all_is_not_a_sentinel_in_data(self):
        assert parse_severity("ALL") == UnknownSeverity("ALL")


class TestTimestamps:
    def test_zulu_suffix(self):
        ts = parse_timestamp("2026-10-18T08:30:00Z")
        assert ts == datetime(2026, 10, 18, 8, 30, tzinfo=timezone.utc)

    def test_garbage(self):
        assert parse_timestamp("not-a-date") is None
        assert parse_timestamp(12345) is None
        assert parse_timestamp("") is None

    def test_date_only_value(self):
        assert parse_timestamp(date(2026, 10, 18)) == datetime(2026, 10, 18)


class TestIngestion:
    def test_bad_records_skipped_rest_kept(self, malformed_records):
        store = _store(malformed_records)
        titles = [f.title for f in store]
        assert titles == ["No id", "Resource is a dict", "New severity", "Camel case keys"]

    def test_missing_id_synthesized(self, malformed_records):
        store = _store(malformed_records)
        assert store.findings[0].id == synthesize_id(0, SNAPSHOT)
        assert store.findings[0].id == f"finding-0-{int(SNAPSHOT.timestamp() * 1000)}"

    def test_synthesized_ids_are_stable(self, malformed_records):
        first = [f.id for f in _store(malformed_records)]
        second = [f.id for f in _store(malformed_records)]
        assert first == second

    def test_duplicate_id_replaced(self):
        records = [
            {"id": "dup", "title": "a", "description": "a", "severity": "LOW"},
            {"id": "dup", "title": "b", "description": "b", "severity": "LOW"},
        ]
        ids = [f.id for f in _store(records)]
        assert ids[0] == "dup"
        assert ids[1] == synthesize_id(1, SNAPSHOT)

    def test_synthesized_id_avoids_earlier_ids(self):
        taken = synthesize_id(1, SNAPSHOT)
        records = [
            {"id": taken, "title": "a", "description": "a", "severity": "LOW"},
            {"title": "b", "description": "b", "severity": "LOW"},
        ]
        ids = [f.id for f in _store(records)]
        assert ids[0] == taken
        assert ids[1] == f"{taken}-1"
        assert len(set(ids)) == 2

    def test_non_string_resource_is_absent(self, malformed_records):
        finding = _store(malformed_records).findings[1]
        assert finding.resource is None

    def test_unknown_severity_kept(self, malformed_records):
        finding = _store(malformed_records).findings[2]
        assert finding.severity == UnknownSeverity("INFORMATIONAL")
        assert finding.created_at is None

    def test_camel_case_keys(self, malformed_records):
        finding = _store(malformed_records).findings[3]
        assert finding.severity is Severity.CRITICAL
        assert finding.created_at == datetime(2026, 10, 18, 8, 30, tzinfo=timezone.utc)
        assert finding.llm_analysis == "Looks real."

    def test_llm_output_raw(self, raw_records):
        finding = _store(raw_records).findings[0]
        assert finding.llm_analysis is not None
        assert "public access" in finding.llm_analysis.lower()

    def test_empty_batch(self):
        store = _store([])
        assert len(store) == 0
        assert store.loaded is True

    def test_default_store_not_loaded(self):
        assert FindingStore().loaded is False


class TestSampleData:
    def test_three_per_severity(self):
        store = sample_store(SNAPSHOT)
        assert len(store) == 12
        assert store.is_sample is True
        for level in Severity:
            assert sum(1 for f in store if f.severity is level) == 3

    def test_dated_before_snapshot(self):
        store = sample_store(SNAPSHOT)
        assert all(f.created_at is not None and f.created_at < SNAPSHOT for f in store)
