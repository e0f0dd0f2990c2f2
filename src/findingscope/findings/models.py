"""Finding data models and the derived-value records built from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple, Union


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class UnknownSeverity:
    """A severity label we do not recognise, kept verbatim."""

    label: str

    def __str__(self) -> str:
        return self.label


SeverityLabel = Union[Severity, UnknownSeverity]

# Fixed display / facet order for the known levels.
SEVERITY_ORDER: Tuple[Severity, ...] = (
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
)


def parse_severity(value: object) -> SeverityLabel:
    """Map a raw value onto the severity variant. Never raises."""
    text = value if isinstance(value, str) else ("" if value is None else str(value))
    try:
        return Severity(text.strip().upper())
    except ValueError:
        return UnknownSeverity(text)


class AllSeverities(Enum):
    """Filter sentinel meaning "no severity restriction"."""

    ALL = "ALL"


ALL = AllSeverities.ALL

SeverityFilter = Union[AllSeverities, Severity, UnknownSeverity]


@dataclass(frozen=True)
class Finding:
    """One security observation, as held by a FindingStore snapshot."""

    id: str
    title: str
    description: str
    severity: SeverityLabel
    resource: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    llm_analysis: Optional[str] = None

    @property
    def severity_label(self) -> str:
        return self.severity.label


@dataclass(frozen=True)
class FilterState:
    severity: SeverityFilter = ALL
    query: str = ""


@dataclass(frozen=True)
class Stats:
    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    def count_for(self, severity: Severity) -> int:
        return {
            Severity.CRITICAL: self.critical,
            Severity.HIGH: self.high,
            Severity.MEDIUM: self.medium,
            Severity.LOW: self.low,
        }[severity]


@dataclass(frozen=True)
class SeverityShare:
    severity: Severity
    count: int
    percentage: float


@dataclass(frozen=True)
class TimelineBucket:
    day: date
    date_label: str
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    total: int = 0


@dataclass(frozen=True)
class ResourceBucket:
    service: str
    count: int


class SuggestionKind(str, Enum):
    FINDING = "finding"
    CATEGORY = "category"
    RECENT = "recent"


@dataclass(frozen=True)
class Suggestion:
    kind: SuggestionKind
    text: str
    count: Optional[int] = None
    finding: Optional[Finding] = None
    highlight: Optional[str] = None
    spans: Tuple[Tuple[int, int], ...] = field(default_factory=tuple)

    @property
    def resolved_text(self) -> str:
        """The query text submitted when this suggestion is chosen."""
        if self.kind is SuggestionKind.FINDING and self.finding is not None:
            return self.finding.title
        return self.text
