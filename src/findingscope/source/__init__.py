"""Finding sources and fetch error classification."""

from findingscope.source.fetcher import (
    FetchError,
    FetchErrorKind,
    FileFindingSource,
    FindingSource,
    HttpFindingSource,
)

__all__ = [
    "FetchError",
    "FetchErrorKind",
    "FileFindingSource",
    "FindingSource",
    "HttpFindingSource",
]
