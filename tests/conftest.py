"""Shared test fixtures: sample findings, raw records, data files."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from findingscope.findings.sample import sample_records, sample_store

BASE = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch):
    """Keep config lookups and history writes inside the test's tmp dir."""
    for var in (
        "FINDINGSCOPE_URL",
        "FINDINGSCOPE_TIMEOUT",
        "FINDINGSCOPE_FILE",
        "FINDINGSCOPE_FORMAT",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("FINDINGSCOPE_HISTORY", str(tmp_path / "history.json"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def base_time() -> datetime:
    return BASE


@pytest.fixture
def sample_findings():
    """The built-in 12 findings: 3 per severity, one per day before BASE."""
    return sample_store(BASE).findings


@pytest.fixture
def raw_records() -> list:
    return sample_records(BASE)


@pytest.fixture
def malformed_records() -> list:
    """A batch mixing good records with every tolerated kind of damage."""
    return [
        {"title": "No id", "description": "Missing identifier", "severity": "HIGH"},
        {
            "id": "odd-resource",
            "title": "Resource is a dict",
            "description": "Resource payload is not a string",
            "severity": "LOW",
            "resource": {"arn": "aws:s3:::bucket"},
        },
        {
            "id": "future",
            "title": "New severity",
            "description": "Severity from a newer scanner",
            "severity": "INFORMATIONAL",
            "createdAt": "not-a-date",
        },
        "just a string",
        {"id": "no-title", "description": "Title missing", "severity": "LOW"},
        {
            "id": "camel",
            "title": "Camel case keys",
            "description": "Uses createdAt and llmAnalysis",
            "severity": "critical",
            "createdAt": "2026-10-18T08:30:00Z",
            "llmAnalysis": "Looks real.",
        },
    ]


@pytest.fixture
def findings_json(tmp_path: Path, raw_records) -> Path:
    path = tmp_path / "findings.json"
    path.write_text(json.dumps({"findings": raw_records}), encoding="utf-8")
    return path


@pytest.fixture
def findings_yaml(tmp_path: Path, raw_records) -> Path:
    path = tmp_path / "findings.yaml"
    path.write_text(yaml.safe_dump(raw_records), encoding="utf-8")
    return path
