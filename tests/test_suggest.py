"""Tests for the suggestion engine and keyboard cursor."""

import pytest

from findingscope.config.schema import SuggestConfig
from findingscope.findings.models import Severity, SuggestionKind
from findingscope.search.index import FuzzyIndex
from findingscope.search.suggest import SuggestionCursor, resolve_submission, suggest


class TestEmptyQuery:
    def test_recent_then_facets(self, sample_findings):
        result = suggest("", sample_findings, ["iam", "s3"])
        assert [(s.kind, s.text, s.count) for s in result] == [
            (SuggestionKind.RECENT, "iam", None),
            (SuggestionKind.RECENT, "s3", None),
            (SuggestionKind.CATEGORY, "CRITICAL", 3),
            (SuggestionKind.CATEGORY, "HIGH", 3),
            (SuggestionKind.CATEGORY, "MEDIUM", 3),
            (SuggestionKind.CATEGORY, "LOW", 3),
            (SuggestionKind.CATEGORY, "S3", 1),
            (SuggestionKind.CATEGORY, "IAM", 3),
        ]

    def test_at_most_three_recent(self, sample_findings):
        result = suggest("  ", sample_findings, ["a", "b", "c", "d", "e"])
        recent = [s.text for s in result if s.kind is SuggestionKind.RECENT]
        assert recent == ["a", "b", "c"]
        assert result[0].kind is SuggestionKind.RECENT

    def test_recent_deduplicated(self, sample_findings):
        result = suggest("", sample_findings, ["a", "a", "b"])
        assert [s.text for s in result if s.kind is SuggestionKind.RECENT] == ["a", "b"]

    def test_zero_count_facets_omitted(self, sample_findings):
        low_only = [f for f in sample_findings if f.severity is Severity.LOW]
        result = suggest("", low_only, [])
        assert [s.text for s in result] == ["LOW"]

    def test_empty_store(self):
        assert suggest("", [], []) == []


class TestNonEmptyQuery:
    def test_findings_before_categories(self, sample_findings):
        result = suggest("iam", sample_findings, [])
        kinds = [s.kind for s in result]
        assert SuggestionKind.FINDING in kinds
        assert kinds[-1] is SuggestionKind.CATEGORY
        first_category = kinds.index(SuggestionKind.CATEGORY)
        assert all(k is SuggestionKind.CATEGORY for k in kinds[first_category:])
        assert result[-1].text == "IAM"
        assert result[-1].count == 3

    def test_at_most_five_findings(self, sample_findings):
        result = suggest("aws", sample_findings, [])
        assert len([s for s in result if s.kind is SuggestionKind.FINDING]) == 5

    def test_severity_facet_substring(self, sample_findings):
        result = suggest("crit", sample_findings, [])
        categories = [s for s in result if s.kind is SuggestionKind.CATEGORY]
        assert [(s.text, s.count) for s in categories] == [("CRITICAL", 3)]

    def test_service_facet_case_insensitive(self, sample_findings):
        result = suggest("Cloud", sample_findings, [])
        categories = [s.text for s in result if s.kind is SuggestionKind.CATEGORY]
        assert categories == ["CloudTrail"]

    def test_zero_count_facet_dropped(self, sample_findings):
        no_rds = [f for f in sample_findings if "rds" not in (f.resource or "")]
        result = suggest("rds", no_rds, [])
        assert all(s.kind is not SuggestionKind.CATEGORY for s in result)

    def test_finding_suggestion_carries_match(self, sample_findings):
        top = suggest("bucket", sample_findings, [])[0]
        assert top.kind is SuggestionKind.FINDING
        assert top.finding is not None and top.finding.id == "finding-1"
        assert top.highlight == top.finding.title
        assert top.spans
        assert top.resolved_text == top.finding.title

    def test_uses_given_index(self, sample_findings):
        index = FuzzyIndex.build(sample_findings[:1])
        result = suggest("public", sample_findings, [], index=index)
        found = [s.finding.id for s in result if s.kind is SuggestionKind.FINDING]
        assert found == ["finding-1"]

    def test_custom_vocabulary(self, sample_findings):
        cfg = SuggestConfig(known_services=["Lambda"])
        result = suggest("lamb", sample_findings, [], config=cfg)
        assert result[-1].text == "Lambda"
        assert result[-1].count == 1

    def test_deterministic(self, sample_findings):
        assert suggest("ec2", sample_findings, []) == suggest("ec2", sample_findings, [])


class TestCursor:
    def test_down_from_none(self):
        assert SuggestionCursor(3).down().index == 0

    def test_down_wraps(self):
        assert SuggestionCursor(3, 2).down().index == 0

    def test_up_from_none_and_top(self):
        assert SuggestionCursor(3).up().index == 2
        assert SuggestionCursor(3, 0).up().index == 2
        assert SuggestionCursor(3, 2).up().index == 1

    def test_empty_list(self):
        assert SuggestionCursor(0).down().index == -1
        assert SuggestionCursor(0).up().index == -1

    def test_reset(self):
        assert SuggestionCursor(3, 1).reset().index == -1


class TestSubmission:
    def test_raw_text_without_selection(self, sample_findings):
        suggestions = suggest("s3", sample_findings, [])
        assert resolve_submission("s3", suggestions, -1) == "s3"

    def test_selected_finding_submits_title(self, sample_findings):
        suggestions = suggest("s3", sample_findings, [])
        assert resolve_submission("s3", suggestions, 0) == "S3 Bucket Public Access"

    def test_selected_category_submits_label(self, sample_findings):
        suggestions = suggest("", sample_findings, [])
        assert resolve_submission("", suggestions, 0) == "CRITICAL"

    def test_out_of_range(self):
        with pytest.raises(IndexError):
            resolve_submission("x", [], 0)
