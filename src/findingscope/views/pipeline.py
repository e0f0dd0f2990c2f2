"""The literal filter behind the findings table.

Independent of the fuzzy index: a query here must appear
verbatim (case-insensitively) in a finding for it to pass.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Tuple

from findingscope.findings.models import (
    ALL,
    Finding,
    FilterState,
    SeverityFilter,
)


def matches_severity(finding: Finding, severity: SeverityFilter) -> bool:
    return severity is ALL or finding.severity == severity


def matches_query(finding: Finding, query: str) -> bool:
    if not query:
        return True
    term = query.lower()
    haystacks = [finding.title, finding.description, finding.severity_label]
    if isinstance(finding.resource, str):
        haystacks.append(finding.resource)
    return any(term in h.lower() for h in haystacks)


def derive_view(findings: Iterable[Finding], state: FilterState) -> Tuple[Finding, ...]:
    """Findings passing *state*, in their original order."""
    return tuple(
        f for f in findings
        if matches_severity(f, state.severity) and matches_query(f, state.query)
    )


def severity_options(findings: Iterable[Finding]) -> List[SeverityFilter]:
    """ALL followed by each distinct severity, in first-seen order."""
    options: List[SeverityFilter] = [ALL]
    for f in findings:
        if f.severity not in options:
            options.append(f.severity)
    return options


def update_filter(state: FilterState, **changes) -> FilterState:
    return replace(state, **changes)


def clear_filter() -> FilterState:
    return FilterState()


def is_filtered(state: FilterState) -> bool:
    return state.severity is not ALL or bool(state.query)
