"""Dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

OutputFormat = Literal["terminal", "json"]

OUTPUT_FORMATS = ("terminal", "json")


@dataclass
class SourceConfig:
    url: str = "http://127.0.0.1:5000/findings"
    timeout: float = 10.0  # seconds before a fetch is classified as a timeout
    file: Optional[str] = None  # local JSON/YAML file instead of the URL


@dataclass
class SearchConfig:
    threshold: float = 0.3  # max distance (0 = identical, 1 = unrelated)
    limit: int = 5


@dataclass
class SuggestConfig:
    recent_limit: int = 3
    featured_services: List[str] = field(default_factory=lambda: ["S3", "IAM"])
    known_services: List[str] = field(
        default_factory=lambda: ["S3", "IAM", "EC2", "RDS", "CloudTrail"]
    )


@dataclass
class HistoryConfig:
    path: str = "~/.findingscope/history.json"
    max_entries: int = 5


@dataclass
class AggregationConfig:
    timeline_days: int = 7
    top_services: int = 6
    date_format: str = "%d %b"


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"


@dataclass
class FindingScopeConfig:
    version: str = "1.0"
    source: SourceConfig = field(default_factory=SourceConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    suggest: SuggestConfig = field(default_factory=SuggestConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
