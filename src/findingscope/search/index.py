"""Fuzzy search index over finding title, description, severity and resource.

Scoring works on word tokens. Each query token is compared with every token
of a field and keeps its best similarity, taken as the larger of:

  - whole-token Levenshtein similarity ``1 - distance / max(len)``, which
    absorbs typos (``kritical`` ~ ``critical``);
  - the best approximate window of the field token with the query token's
    length, which absorbs partial tokens (``buck`` ~ ``bucket``).  Prefix
    windows are weighted higher than windows inside the token.

The field similarity blends the mean token similarity with how much of the
query appears in order (longest increasing run of matched positions), so
``"s3 bucket"`` beats ``"bucket ... s3"``.  A finding is kept when any field
reaches ``1 - threshold``; its score is the best field score.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from findingscope.findings.models import Finding

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.3

SEARCH_FIELDS = ("title", "description", "severity", "resource")

TOKEN_WEIGHT = 0.85
ORDER_WEIGHT = 0.15
PREFIX_WEIGHT = 0.95
INFIX_WEIGHT = 0.9
MIN_PARTIAL_LENGTH = 2

_TOKEN_RE = re.compile(r"\w+")

Span = Tuple[int, int]


@dataclass(frozen=True)
class Token:
    text: str  # lowercased
    start: int
    end: int


@dataclass(frozen=True)
class FieldMatch:
    """Where and how well a query matched one field of a finding."""

    field: str
    value: str
    score: float
    spans: Tuple[Span, ...]


@dataclass(frozen=True)
class SearchResult:
    finding: Finding
    score: float
    matches: Tuple[FieldMatch, ...]
    position: int  # index of the finding in the indexed snapshot

    @property
    def distance(self) -> float:
        return 1.0 - self.score

    @property
    def best_match(self) -> FieldMatch:
        return self.matches[0]


def tokenize(value: str) -> Tuple[Token, ...]:
    """Split *value* into lowercased word tokens with source offsets."""
    return tuple(
        Token(m.group(0).lower(), m.start(), m.end()) for m in _TOKEN_RE.finditer(value)
    )


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance (insert, delete, substitute all cost 1)."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Normalised edit similarity in [0, 1]; 1 means identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longest


def token_similarity(query: str, token: str) -> Tuple[float, Span]:
    """Best similarity of *query* against *token*, and the matched span in it."""
    best = similarity(query, token)
    span: Span = (0, len(token))
    width = len(query)
    if width >= MIN_PARTIAL_LENGTH and len(token) > width and best < 1.0:
        for i in range(len(token) - width + 1):
            weight = PREFIX_WEIGHT if i == 0 else INFIX_WEIGHT
            score = weight * similarity(query, token[i:i + width])
            if score > best:
                best = score
                span = (i, i + width)
    return best, span


def _longest_increasing(positions: Sequence[int]) -> int:
    if not positions:
        return 0
    lengths = [1] * len(positions)
    for i in range(1, len(positions)):
        for j in range(i):
            if positions[j] < positions[i] and lengths[j] + 1 > lengths[i]:
                lengths[i] = lengths[j] + 1
    return max(lengths)


def _merge_spans(spans: Iterable[Span]) -> Tuple[Span, ...]:
    merged: List[Span] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(end, merged[-1][1]))
        else:
            merged.append((start, end))
    return tuple(merged)


def score_field(
    query_tokens: Sequence[str],
    field_tokens: Sequence[Token],
    min_similarity: float,
) -> Tuple[float, Tuple[Span, ...]]:
    """Similarity of a tokenised query against one tokenised field."""
    if not query_tokens or not field_tokens:
        return 0.0, ()

    total = 0.0
    positions: List[int] = []
    spans: List[Span] = []
    for q in query_tokens:
        best, best_pos, best_span = 0.0, -1, (0, 0)
        for pos, tok in enumerate(field_tokens):
            score, (start, end) = token_similarity(q, tok.text)
            if score > best:
                best, best_pos = score, pos
                best_span = (tok.start + start, min(tok.start + end, tok.end))
                if best >= 1.0:
                    break
        total += best
        if best >= min_similarity:
            positions.append(best_pos)
            spans.append(best_span)

    n = len(query_tokens)
    token_score = total / n
    order_score = _longest_increasing(positions) / n
    return TOKEN_WEIGHT * token_score + ORDER_WEIGHT * order_score, _merge_spans(spans)


def _field_value(finding: Finding, name: str) -> Optional[str]:
    if name == "severity":
        return finding.severity_label
    value = getattr(finding, name, None)
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class _IndexedField:
    name: str
    value: str
    tokens: Tuple[Token, ...]


class FuzzyIndex:
    """Immutable fuzzy index over one finding snapshot.

    Build a new index whenever the snapshot changes; there is no incremental
    insert.
    """

    def __init__(
        self,
        entries: Sequence[Tuple[Finding, Tuple[_IndexedField, ...]]],
        threshold: float = DEFAULT_THRESHOLD,
    ) -> None:
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be between 0 and 1, got {threshold}")
        self._entries = tuple(entries)
        self.threshold = threshold

    @classmethod
    def build(
        cls,
        findings: Iterable[Finding],
        threshold: float = DEFAULT_THRESHOLD,
    ) -> "FuzzyIndex":
        entries = []
        for finding in findings:
            fields = []
            for name in SEARCH_FIELDS:
                value = _field_value(finding, name)
                if not value:
                    continue
                tokens = tokenize(value)
                if tokens:
                    fields.append(_IndexedField(name, value, tokens))
            entries.append((finding, tuple(fields)))
        logger.debug("Built fuzzy index over %d findings", len(entries))
        return cls(entries, threshold)

    @property
    def min_similarity(self) -> float:
        return 1.0 - self.threshold

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, query: str, limit: Optional[int] = None) -> List[SearchResult]:
        """Ranked matches for *query*, best first, ties in snapshot order."""
        query_tokens = [t.text for t in tokenize(query)]
        if not query_tokens:
            return []

        cutoff = self.min_similarity
        results: List[SearchResult] = []
        for position, (finding, fields) in enumerate(self._entries):
            matches = []
            for field_order, indexed in enumerate(fields):
                score, spans = score_field(query_tokens, indexed.tokens, cutoff)
                if score >= cutoff:
                    matches.append((score, field_order, FieldMatch(
                        field=indexed.name,
                        value=indexed.value,
                        score=round(score, 4),
                        spans=spans,
                    )))
            if not matches:
                continue
            matches.sort(key=lambda m: (-m[0], m[1]))
            results.append(SearchResult(
                finding=finding,
                score=round(matches[0][0], 4),
                matches=tuple(m[2] for m in matches),
                position=position,
            ))

        results.sort(key=lambda r: (-r.score, r.position))
        if limit is not None:
            return results[:limit]
        return results
