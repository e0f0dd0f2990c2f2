"""Tests for finding sources and fetch error classification."""

import asyncio
from datetime import date
from pathlib import Path

import httpx
import pytest

from findingscope.source.fetcher import (
    FetchError,
    FetchErrorKind,
    FileFindingSource,
    HttpFindingSource,
    extract_records,
)

URL = "http://findings.test/findings"


def _source(handler) -> HttpFindingSource:
    transport = httpx.MockTransport(handler)
    return HttpFindingSource(URL, transport=transport, async_transport=transport)


def _kind_of(source: HttpFindingSource) -> FetchErrorKind:
    with pytest.raises(FetchError) as exc_info:
        source.fetch()
    return exc_info.value.kind


class TestExtractRecords:
    def test_bare_list(self):
        assert extract_records([{"a": 1}]) == [{"a": 1}]

    def test_wrapped(self):
        assert extract_records({"findings": []}) == []

    def test_bad_payload(self):
        with pytest.raises(FetchError) as exc_info:
            extract_records({"items": []})
        assert exc_info.value.kind is FetchErrorKind.UNKNOWN


class TestHttpSource:
    def test_success(self, raw_records):
        source = _source(lambda request: httpx.Response(200, json={"findings": raw_records}))
        assert len(source.fetch()) == 12

    def test_not_found(self):
        assert _kind_of(_source(lambda request: httpx.Response(404))) is FetchErrorKind.NOT_FOUND

    def test_server_error(self):
        assert _kind_of(_source(lambda request: httpx.Response(503))) is FetchErrorKind.SERVER_ERROR

    def test_other_status_unknown(self):
        assert _kind_of(_source(lambda request: httpx.Response(401))) is FetchErrorKind.UNKNOWN

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        assert _kind_of(_source(handler)) is FetchErrorKind.TIMEOUT

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert _kind_of(_source(handler)) is FetchErrorKind.NETWORK_ERROR

    def test_not_json(self):
        source = _source(lambda request: httpx.Response(200, text="<html>"))
        assert _kind_of(source) is FetchErrorKind.UNKNOWN

    def test_async_fetch(self, raw_records):
        source = _source(lambda request: httpx.Response(200, json=raw_records))
        assert len(asyncio.run(source.afetch())) == 12

    def test_async_failure(self):
        source = _source(lambda request: httpx.Response(500))
        with pytest.raises(FetchError) as exc_info:
            asyncio.run(source.afetch())
        assert exc_info.value.kind is FetchErrorKind.SERVER_ERROR

    def test_default_timeout(self):
        assert HttpFindingSource(URL).timeout == 10.0


class TestFileSource:
    def test_json(self, findings_json: Path):
        assert len(FileFindingSource(findings_json).fetch()) == 12

    def test_yaml(self, findings_yaml: Path):
        records = FileFindingSource(findings_yaml).fetch()
        assert records[0]["id"] == "finding-1"

    def test_missing(self, tmp_path: Path):
        with pytest.raises(FetchError) as exc_info:
            FileFindingSource(tmp_path / "missing.json").fetch()
        assert exc_info.value.kind is FetchErrorKind.NOT_FOUND

    def test_unparseable(self, tmp_path: Path):
        path = tmp_path / "broken.json"
        path.write_text("{nope")
        with pytest.raises(FetchError) as exc_info:
            FileFindingSource(path).fetch()
        assert exc_info.value.kind is FetchErrorKind.UNKNOWN

    def test_not_utf8(self, tmp_path: Path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'[{"title": "\xff\xfe", "description": "x", "severity": "LOW"}]')
        with pytest.raises(FetchError) as exc_info:
            FileFindingSource(path).fetch()
        assert exc_info.value.kind is FetchErrorKind.UNKNOWN

    def test_yaml_date_only_values(self, tmp_path: Path):
        path = tmp_path / "dated.yaml"
        path.write_text(
            "- id: d1\n"
            "  title: Dated\n"
            "  description: Bare YAML date\n"
            "  severity: HIGH\n"
            "  createdAt: 2026-10-18\n"
        )
        records = FileFindingSource(path).fetch()
        assert records[0]["createdAt"] == date(2026, 10, 18)
