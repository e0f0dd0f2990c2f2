"""Chart-ready summaries: severity tallies, daily timeline, top services."""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional

from findingscope.findings.models import (
    SEVERITY_ORDER,
    Finding,
    ResourceBucket,
    Severity,
    SeverityShare,
    Stats,
    TimelineBucket,
)

UNKNOWN_SERVICE = "Unknown"
DEFAULT_TIMELINE_DAYS = 7
DEFAULT_TOP_SERVICES = 6
DEFAULT_DATE_FORMAT = "%d %b"


def _severity_counts(findings: Iterable[Finding]) -> Counter:
    counts: Counter = Counter()
    for f in findings:
        counts["total"] += 1
        if isinstance(f.severity, Severity):
            counts[f.severity] += 1
    return counts


def compute_stats(findings: Iterable[Finding]) -> Stats:
    """Exact per-severity tally; unknown severities count toward total only."""
    counts = _severity_counts(findings)
    return Stats(
        total=counts["total"],
        critical=counts[Severity.CRITICAL],
        high=counts[Severity.HIGH],
        medium=counts[Severity.MEDIUM],
        low=counts[Severity.LOW],
    )


def compute_severity_distribution(stats: Stats) -> List[SeverityShare]:
    """Non-zero severities with their share of the total, in percent."""
    denominator = max(stats.total, 1)
    shares = []
    for severity in SEVERITY_ORDER:
        count = stats.count_for(severity)
        if count > 0:
            shares.append(SeverityShare(
                severity=severity,
                count=count,
                percentage=round(count / denominator * 100, 1),
            ))
    return shares


def _calendar_day(ts: datetime) -> date:
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.date()


def compute_timeline(
    findings: Iterable[Finding],
    *,
    days: int = DEFAULT_TIMELINE_DAYS,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> List[TimelineBucket]:
    """One bucket per calendar day, ascending, keeping the latest *days*.

    Findings without ``created_at`` are left out.
    """
    groups: Dict[date, List[Finding]] = {}
    for f in findings:
        if f.created_at is None:
            continue
        groups.setdefault(_calendar_day(f.created_at), []).append(f)

    buckets = []
    for day in sorted(groups)[-days:] if days > 0 else []:
        stats = compute_stats(groups[day])
        buckets.append(TimelineBucket(
            day=day,
            date_label=day.strftime(date_format),
            critical=stats.critical,
            high=stats.high,
            medium=stats.medium,
            low=stats.low,
            total=stats.total,
        ))
    return buckets


def service_name(resource: Optional[str]) -> Optional[str]:
    """Service segment of a resource string, ``Unknown`` when it has none.

    Returns None when there is no string resource at all.
    """
    if not isinstance(resource, str):
        return None
    parts = resource.split(":")
    if len(parts) > 1 and parts[1]:
        return parts[1]
    return UNKNOWN_SERVICE


def compute_resource_distribution(
    findings: Iterable[Finding],
    *,
    top: int = DEFAULT_TOP_SERVICES,
) -> List[ResourceBucket]:
    """Most common services, count descending, ties in first-seen order."""
    tally: Dict[str, int] = {}
    for f in findings:
        service = service_name(f.resource)
        if service is None:
            continue
        tally[service] = tally.get(service, 0) + 1

    # sorted() is stable, so equal counts keep dict insertion (first-seen) order
    ranked = sorted(tally.items(), key=lambda item: -item[1])
    return [ResourceBucket(service=s, count=c) for s, c in ranked[:max(top, 0)]]
