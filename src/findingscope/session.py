"""Findings session. Owns the current snapshot, filter state and history.

Every derived value (view, stats, buckets, suggestions) is computed on
access from the current store and filter state; nothing is cached behind
an invalidation rule.  The only cached structure is the fuzzy index, which
is rebuilt in full and swapped in together with the store it belongs to.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from findingscope.analytics.aggregator import (
    compute_resource_distribution,
    compute_severity_distribution,
    compute_stats,
    compute_timeline,
)
from findingscope.config.schema import FindingScopeConfig
from findingscope.findings.models import (
    Finding,
    FilterState,
    ResourceBucket,
    SeverityFilter,
    SeverityShare,
    Stats,
    Suggestion,
    TimelineBucket,
)
from findingscope.findings.sample import sample_store
from findingscope.findings.store import FindingStore
from findingscope.search.history import MemoryStore, RecentSearchHistory
from findingscope.search.index import FuzzyIndex, SearchResult
from findingscope.search.suggest import resolve_submission, suggest
from findingscope.source.fetcher import FetchError, FindingSource
from findingscope.views.pipeline import (
    clear_filter,
    derive_view,
    severity_options,
    update_filter,
)

logger = logging.getLogger(__name__)

_UNSET = object()


class FindingsSession:
    """Single-threaded façade the presentation layer talks to."""

    def __init__(
        self,
        config: Optional[FindingScopeConfig] = None,
        *,
        history: Optional[RecentSearchHistory] = None,
    ) -> None:
        self.config = config or FindingScopeConfig()
        self.history = history or RecentSearchHistory(
            MemoryStore(), max_entries=self.config.history.max_entries
        )
        self.filter_state = FilterState()
        self._store = FindingStore()
        self._index = FuzzyIndex.build((), self.config.search.threshold)

    # ---- snapshot ----

    @property
    def store(self) -> FindingStore:
        return self._store

    @property
    def index(self) -> FuzzyIndex:
        return self._index

    def replace_store(self, store: FindingStore) -> None:
        """Install a new snapshot; the index is fully built before the swap."""
        index = FuzzyIndex.build(store.findings, self.config.search.threshold)
        self._store, self._index = store, index
        logger.info(
            "Loaded %d findings%s", len(store), " (sample data)" if store.is_sample else ""
        )

    def load_records(self, records: Sequence[object]) -> None:
        self.replace_store(FindingStore.from_records(records))

    def refresh(self, source: FindingSource) -> Optional[FetchError]:
        """Fetch and install a new snapshot.

        On failure the previous snapshot stays; with no previous snapshot the
        built-in sample data is loaded.  The error is returned, not raised.
        """
        try:
            records = source.fetch()
        except FetchError as exc:
            return self._handle_failure(exc)
        self.load_records(records)
        return None

    async def arefresh(self, source: FindingSource) -> Optional[FetchError]:
        """Async variant of refresh; the current snapshot stays visible meanwhile."""
        try:
            records = await source.afetch()
        except FetchError as exc:
            return self._handle_failure(exc)
        self.load_records(records)
        return None

    def _handle_failure(self, exc: FetchError) -> FetchError:
        logger.warning("Fetch failed (%s): %s", exc.kind.value, exc)
        if self._store.loaded:
            logger.info("Keeping previous snapshot of %d findings", len(self._store))
        else:
            logger.info("No previous snapshot, falling back to sample data")
            self.replace_store(sample_store())
        return exc

    # ---- filter state ----

    def update_filters(self, *, severity=_UNSET, query=_UNSET) -> FilterState:
        changes = {}
        if severity is not _UNSET:
            changes["severity"] = severity
        if query is not _UNSET:
            changes["query"] = query
        self.filter_state = update_filter(self.filter_state, **changes)
        return self.filter_state

    def clear_filters(self) -> FilterState:
        self.filter_state = clear_filter()
        return self.filter_state

    @property
    def severity_options(self) -> List[SeverityFilter]:
        return severity_options(self._store.findings)

    # ---- derived values ----

    @property
    def all_findings(self) -> Tuple[Finding, ...]:
        return self._store.findings

    @property
    def view(self) -> Tuple[Finding, ...]:
        return derive_view(self._store.findings, self.filter_state)

    @property
    def stats(self) -> Stats:
        return compute_stats(self._store.findings)

    @property
    def view_stats(self) -> Stats:
        return compute_stats(self.view)

    @property
    def severity_distribution(self) -> List[SeverityShare]:
        return compute_severity_distribution(self.stats)

    @property
    def timeline(self) -> List[TimelineBucket]:
        agg = self.config.aggregation
        return compute_timeline(
            self.view, days=agg.timeline_days, date_format=agg.date_format
        )

    @property
    def resources(self) -> List[ResourceBucket]:
        return compute_resource_distribution(
            self.view, top=self.config.aggregation.top_services
        )

    # ---- search ----

    def search(self, query: str) -> List[SearchResult]:
        return self._index.search(query)

    def suggest(self, query: str) -> List[Suggestion]:
        return suggest(
            query,
            self._store.findings,
            self.history.entries,
            index=self._index,
            config=self.config.suggest,
            finding_limit=self.config.search.limit,
        )

    def submit(
        self,
        raw: str,
        suggestions: Sequence[Suggestion] = (),
        index: int = -1,
    ) -> FilterState:
        """Apply a typed query or chosen suggestion as the filter query.

        Non-blank submissions are recorded in the recent-search history.
        """
        text = resolve_submission(raw, suggestions, index)
        if text.strip():
            self.history.record(text)
            return self.update_filters(query=text)
        return self.filter_state
