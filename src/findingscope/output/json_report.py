"""JSON reporter for scripting and piping into other tools."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Dict, List, Sequence

from findingscope.findings.models import (
    Finding,
    ResourceBucket,
    SeverityShare,
    Stats,
    Suggestion,
    TimelineBucket,
)
from findingscope.search.index import SearchResult


def finding_to_dict(f: Finding) -> Dict[str, Any]:
    return {
        "id": f.id,
        "title": f.title,
        "description": f.description,
        "severity": f.severity_label,
        **({"resource": f.resource} if f.resource is not None else {}),
        **({"created_at": f.created_at.isoformat()} if f.created_at else {}),
        **({"updated_at": f.updated_at.isoformat()} if f.updated_at else {}),
        **({"llm_analysis": f.llm_analysis} if f.llm_analysis else {}),
    }


def stats_to_dict(stats: Stats, shares: Sequence[SeverityShare] = ()) -> Dict[str, Any]:
    data: Dict[str, Any] = asdict(stats)
    if shares:
        data["distribution"] = [
            {"severity": s.severity.value, "count": s.count, "percentage": s.percentage}
            for s in shares
        ]
    return data


def timeline_to_list(buckets: Sequence[TimelineBucket]) -> List[Dict[str, Any]]:
    return [
        {
            "date": b.day.isoformat(),
            "label": b.date_label,
            "critical": b.critical,
            "high": b.high,
            "medium": b.medium,
            "low": b.low,
            "total": b.total,
        }
        for b in buckets
    ]


def resources_to_list(buckets: Sequence[ResourceBucket]) -> List[Dict[str, Any]]:
    return [asdict(b) for b in buckets]


def search_to_list(results: Sequence[SearchResult]) -> List[Dict[str, Any]]:
    return [
        {
            "finding": finding_to_dict(r.finding),
            "score": r.score,
            "matches": [
                {"field": m.field, "score": m.score, "spans": [list(s) for s in m.spans]}
                for m in r.matches
            ],
        }
        for r in results
    ]


def suggestions_to_list(suggestions: Sequence[Suggestion]) -> List[Dict[str, Any]]:
    items = []
    for s in suggestions:
        item: Dict[str, Any] = {"kind": s.kind.value, "text": s.text}
        if s.count is not None:
            item["count"] = s.count
        if s.finding is not None:
            item["finding_id"] = s.finding.id
        if s.highlight is not None:
            item["highlight"] = s.highlight
            item["spans"] = [list(span) for span in s.spans]
        items.append(item)
    return items


def render(data: Any) -> str:
    """Return formatted JSON string."""
    return json.dumps(data, indent=2, ensure_ascii=False)
