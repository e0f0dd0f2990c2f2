"""Finding store, one immutable snapshot per successful fetch.

Ingestion is forgiving: a malformed record is skipped (or its bad fields
degraded) so a single bad entry never rejects the whole batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Tuple

from findingscope.findings.models import Finding, SeverityLabel, parse_severity

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string, returning None for anything unusable."""
    if isinstance(value, datetime):
        return value
    # YAML loads bare dates (2026-10-18) as date objects
    if isinstance(value, date):
        return datetime.combine(value, time())
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _pick(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


def _llm_text(record: Mapping[str, Any]) -> Optional[str]:
    value = _pick(record, "llmAnalysis", "llm_analysis")
    if isinstance(value, str):
        return value
    output = _pick(record, "llm_output", "llmOutput")
    if isinstance(output, Mapping) and isinstance(output.get("raw"), str):
        return output["raw"]
    if isinstance(output, str):
        return output
    return None


def synthesize_id(index: int, fetched_at: datetime) -> str:
    """Deterministic id for a record that arrived without one."""
    return f"finding-{index}-{int(fetched_at.timestamp() * 1000)}"


def ingest_record(
    record: Any,
    index: int,
    fetched_at: datetime,
    seen_ids: Optional[set] = None,
) -> Optional[Finding]:
    """Convert one raw record into a Finding, or None if it is unusable."""
    if not isinstance(record, Mapping):
        logger.warning("Skipping record %d: not an object", index)
        return None

    title = record.get("title")
    description = record.get("description")
    if not isinstance(title, str) or not isinstance(description, str):
        logger.warning("Skipping record %d: title and description are required", index)
        return None

    raw_id = record.get("id")
    finding_id = str(raw_id) if isinstance(raw_id, (str, int)) and str(raw_id) else None
    if finding_id is None or (seen_ids is not None and finding_id in seen_ids):
        new_id = base_id = synthesize_id(index, fetched_at)
        suffix = 1
        while seen_ids is not None and new_id in seen_ids:
            new_id = f"{base_id}-{suffix}"
            suffix += 1
        if finding_id is not None:
            logger.info("Duplicate id %r at record %d, using %s", finding_id, index, new_id)
        finding_id = new_id
    if seen_ids is not None:
        seen_ids.add(finding_id)

    resource = record.get("resource")
    severity: SeverityLabel = parse_severity(record.get("severity"))

    return Finding(
        id=finding_id,
        title=title,
        description=description,
        severity=severity,
        resource=resource if isinstance(resource, str) else None,
        created_at=parse_timestamp(_pick(record, "createdAt", "created_at")),
        updated_at=parse_timestamp(_pick(record, "updatedAt", "updated_at")),
        llm_analysis=_llm_text(record),
    )


def ingest(records: Iterable[Any], fetched_at: datetime) -> Tuple[Finding, ...]:
    """Ingest a batch, preserving source order and skipping bad records."""
    findings: List[Finding] = []
    seen: set[str] = set()
    for index, record in enumerate(records):
        finding = ingest_record(record, index, fetched_at, seen)
        if finding is not None:
            findings.append(finding)
    return tuple(findings)


@dataclass(frozen=True)
class FindingStore:
    """Immutable snapshot of the findings from one fetch."""

    findings: Tuple[Finding, ...] = field(default_factory=tuple)
    fetched_at: Optional[datetime] = None
    is_sample: bool = False

    @classmethod
    def from_records(
        cls,
        records: Iterable[Any],
        *,
        fetched_at: Optional[datetime] = None,
        is_sample: bool = False,
    ) -> "FindingStore":
        ts = fetched_at or datetime.now(timezone.utc)
        findings = ingest(records, ts)
        logger.debug("Ingested %d findings (snapshot %s)", len(findings), ts.isoformat())
        return cls(findings=findings, fetched_at=ts, is_sample=is_sample)

    @property
    def loaded(self) -> bool:
        """True once a snapshot (real or sample) has been installed."""
        return self.fetched_at is not None

    def __len__(self) -> int:
        return len(self.findings)

    def __iter__(self) -> Iterator[Finding]:
        return iter(self.findings)
