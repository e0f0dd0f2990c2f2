"""Fuzzy search, suggestions, and recent-search history."""

from findingscope.search.history import (
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    RecentSearchHistory,
    push_recent,
)
from findingscope.search.index import FieldMatch, FuzzyIndex, SearchResult
from findingscope.search.suggest import SuggestionCursor, resolve_submission, suggest

__all__ = [
    "FieldMatch",
    "FuzzyIndex",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "RecentSearchHistory",
    "SearchResult",
    "SuggestionCursor",
    "push_recent",
    "resolve_submission",
    "suggest",
]
