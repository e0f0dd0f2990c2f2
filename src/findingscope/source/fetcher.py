"""Finding sources: the HTTP API (httpx) or a local JSON/YAML export.

Every failure surfaces as a FetchError carrying a FetchErrorKind so callers
can tell a slow server from a missing endpoint without inspecting httpx.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Protocol

import httpx
import yaml

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class FetchErrorKind(str, Enum):
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"


_KIND_MESSAGES = {
    FetchErrorKind.TIMEOUT: "The request timed out; the server may not be responding.",
    FetchErrorKind.NOT_FOUND: "Findings endpoint or file not found.",
    FetchErrorKind.SERVER_ERROR: "The server reported an error; try again later.",
    FetchErrorKind.NETWORK_ERROR: "Network error; check that the server is running.",
    FetchErrorKind.UNKNOWN: "Unexpected error while loading findings.",
}


class FetchError(Exception):
    """Raised when findings could not be loaded from a source."""

    def __init__(self, kind: FetchErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        message = _KIND_MESSAGES[kind]
        super().__init__(f"{message} ({detail})" if detail else message)


class FindingSource(Protocol):
    def fetch(self) -> List[Any]: ...

    async def afetch(self) -> List[Any]: ...


def extract_records(payload: Any) -> List[Any]:
    """Accept either a bare list or an object with a ``findings`` list."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("findings"), list):
        return payload["findings"]
    raise FetchError(FetchErrorKind.UNKNOWN, "payload has no findings list")


def classify_http_error(exc: Exception) -> FetchError:
    """Map an httpx exception onto the fetch error taxonomy."""
    if isinstance(exc, httpx.TimeoutException):
        return FetchError(FetchErrorKind.TIMEOUT, str(exc) or type(exc).__name__)
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 404:
            return FetchError(FetchErrorKind.NOT_FOUND, f"HTTP {status}")
        if status >= 500:
            return FetchError(FetchErrorKind.SERVER_ERROR, f"HTTP {status}")
        return FetchError(FetchErrorKind.UNKNOWN, f"HTTP {status}")
    if isinstance(exc, httpx.TransportError):
        return FetchError(FetchErrorKind.NETWORK_ERROR, str(exc) or type(exc).__name__)
    return FetchError(FetchErrorKind.UNKNOWN, str(exc) or type(exc).__name__)


def _decode(response: httpx.Response) -> List[Any]:
    response.raise_for_status()
    try:
        payload = response.json()
    except ValueError as exc:
        raise FetchError(FetchErrorKind.UNKNOWN, "response is not JSON") from exc
    return extract_records(payload)


class HttpFindingSource:
    """GET findings from an HTTP endpoint with a bounded timeout."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport
        self._async_transport = async_transport

    def fetch(self) -> List[Any]:
        logger.info("Fetching findings from %s", self.url)
        try:
            with httpx.Client(
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            ) as client:
                return _decode(client.get(self.url))
        except FetchError:
            raise
        except Exception as exc:
            raise classify_http_error(exc) from exc

    async def afetch(self) -> List[Any]:
        logger.info("Fetching findings from %s", self.url)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._async_transport,
            ) as client:
                return _decode(await client.get(self.url))
        except FetchError:
            raise
        except Exception as exc:
            raise classify_http_error(exc) from exc


class FileFindingSource:
    """Read findings from a JSON or YAML file on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def fetch(self) -> List[Any]:
        logger.info("Loading findings from %s", self.path)
        if not self.path.is_file():
            raise FetchError(FetchErrorKind.NOT_FOUND, str(self.path))
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FetchError(FetchErrorKind.UNKNOWN, str(exc)) from exc
        except UnicodeDecodeError as exc:
            raise FetchError(FetchErrorKind.UNKNOWN, f"{self.path} is not UTF-8 text") from exc
        try:
            if self.path.suffix.lower() in (".yaml", ".yml"):
                payload = yaml.safe_load(text)
            else:
                payload = json.loads(text)
        except (ValueError, yaml.YAMLError) as exc:
            raise FetchError(FetchErrorKind.UNKNOWN, f"cannot parse {self.path}") from exc
        return extract_records(payload)

    async def afetch(self) -> List[Any]:
        return self.fetch()
