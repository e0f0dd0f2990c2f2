"""Suggestion engine: recent queries, facets, and fuzzy matches.

Empty query:      recent queries, then severity facets, then featured
                  service facets (zero-count facets dropped).
Non-empty query:  top fuzzy finding matches, then any facet whose label
                  contains the query.  Findings always come first.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from findingscope.config.schema import SuggestConfig
from findingscope.findings.models import (
    SEVERITY_ORDER,
    Finding,
    Severity,
    Suggestion,
    SuggestionKind,
)
from findingscope.search.index import FuzzyIndex


class FacetKind(str, Enum):
    SEVERITY = "severity"
    SERVICE = "service"


@dataclass(frozen=True)
class Facet:
    label: str
    kind: FacetKind

    def count(self, findings: Iterable[Finding]) -> int:
        if self.kind is FacetKind.SEVERITY:
            return sum(1 for f in findings if f.severity == Severity(self.label))
        needle = self.label.lower()
        return sum(
            1 for f in findings if f.resource is not None and needle in f.resource.lower()
        )


SEVERITY_FACETS: Tuple[Facet, ...] = tuple(
    Facet(s.value, FacetKind.SEVERITY) for s in SEVERITY_ORDER
)


def service_facets(services: Iterable[str]) -> Tuple[Facet, ...]:
    return tuple(Facet(s, FacetKind.SERVICE) for s in services)


def _facet_suggestions(
    facets: Iterable[Facet],
    findings: Sequence[Finding],
) -> List[Suggestion]:
    suggestions = []
    for facet in facets:
        count = facet.count(findings)
        if count > 0:
            suggestions.append(Suggestion(SuggestionKind.CATEGORY, facet.label, count=count))
    return suggestions


def suggest(
    query: str,
    findings: Sequence[Finding],
    recent: Sequence[str] = (),
    *,
    index: Optional[FuzzyIndex] = None,
    config: Optional[SuggestConfig] = None,
    finding_limit: int = 5,
) -> List[Suggestion]:
    """Build the ordered suggestion list for *query*.

    *index* should be built over *findings*; one is built on the fly when
    omitted.
    """
    cfg = config or SuggestConfig()
    needle = query.strip()

    if not needle:
        recent_suggestions = []
        seen = set()
        for text in recent:
            if text in seen or not text.strip():
                continue
            seen.add(text)
            recent_suggestions.append(Suggestion(SuggestionKind.RECENT, text))
            if len(recent_suggestions) >= cfg.recent_limit:
                break
        facets = SEVERITY_FACETS + service_facets(cfg.featured_services)
        return recent_suggestions + _facet_suggestions(facets, findings)

    fuzzy = index if index is not None else FuzzyIndex.build(findings)
    finding_suggestions = []
    for result in fuzzy.search(query, limit=finding_limit):
        match = result.best_match
        finding_suggestions.append(Suggestion(
            SuggestionKind.FINDING,
            result.finding.title,
            finding=result.finding,
            highlight=match.value,
            spans=match.spans,
        ))

    lowered = needle.lower()
    vocabulary = SEVERITY_FACETS + service_facets(cfg.known_services)
    matching = [f for f in vocabulary if lowered in f.label.lower()]
    return finding_suggestions + _facet_suggestions(matching, findings)


@dataclass(frozen=True)
class SuggestionCursor:
    """Keyboard highlight over a suggestion list; -1 means none."""

    size: int
    index: int = -1

    def down(self) -> "SuggestionCursor":
        if self.size == 0:
            return SuggestionCursor(0)
        return SuggestionCursor(self.size, (self.index + 1) % self.size)

    def up(self) -> "SuggestionCursor":
        if self.size == 0:
            return SuggestionCursor(0)
        if self.index <= 0:
            return SuggestionCursor(self.size, self.size - 1)
        return SuggestionCursor(self.size, self.index - 1)

    def reset(self) -> "SuggestionCursor":
        return SuggestionCursor(self.size)


def resolve_submission(raw: str, suggestions: Sequence[Suggestion], index: int = -1) -> str:
    """Text to submit: the typed text at -1, else the chosen suggestion's."""
    if index < 0:
        return raw
    if index >= len(suggestions):
        raise IndexError(f"suggestion index {index} out of range ({len(suggestions)})")
    return suggestions[index].resolved_text
