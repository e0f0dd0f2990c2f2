"""Finding models, the finding store, and the sample dataset."""

from findingscope.findings.models import (
    ALL,
    Finding,
    FilterState,
    Severity,
    Suggestion,
    SuggestionKind,
    UnknownSeverity,
    parse_severity,
)
from findingscope.findings.store import FindingStore

__all__ = [
    "ALL",
    "Finding",
    "FilterState",
    "FindingStore",
    "Severity",
    "Suggestion",
    "SuggestionKind",
    "UnknownSeverity",
    "parse_severity",
]
