"""Recent-search history backed by an injected key/value store."""

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)

HISTORY_KEY = "findingscope-recent-searches"
DEFAULT_MAX_ENTRIES = 5


class KeyValueStore(Protocol):
    """Minimal persistence capability: ordered string lists under a key."""

    def get(self, key: str) -> List[str]: ...

    def set(self, key: str, values: Sequence[str]) -> None: ...


class MemoryStore:
    """In-process store; nothing survives the process."""

    def __init__(self) -> None:
        self._data: Dict[str, List[str]] = {}

    def get(self, key: str) -> List[str]:
        return list(self._data.get(key, []))

    def set(self, key: str, values: Sequence[str]) -> None:
        self._data[key] = list(values)


class JsonFileStore:
    """All keys in one JSON object file. Unreadable files read as empty."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> Dict[str, List[str]]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable history file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed history file %s", self.path)
            return {}
        return data

    def get(self, key: str) -> List[str]:
        values = self._load().get(key, [])
        if not isinstance(values, list):
            return []
        return [v for v in values if isinstance(v, str)]

    def set(self, key: str, values: Sequence[str]) -> None:
        data = self._load()
        data[key] = list(values)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            temp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            os.replace(temp_path, self.path)
        except OSError:
            with contextlib.suppress(OSError):
                temp_path.unlink()
            raise


def push_recent(
    history: Sequence[str],
    query: str,
    limit: int = DEFAULT_MAX_ENTRIES,
) -> Tuple[str, ...]:
    """Return *history* with *query* moved to the front, capped at *limit*.

    Blank queries leave the history unchanged.
    """
    if not query.strip():
        return tuple(history)[:limit]
    return tuple([query, *(h for h in history if h != query)][:limit])


class RecentSearchHistory:
    """Most-recent-first query history persisted under HISTORY_KEY."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = HISTORY_KEY,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        self._store = store
        self._key = key
        self.max_entries = max_entries

    @property
    def entries(self) -> Tuple[str, ...]:
        return tuple(self._store.get(self._key))[: self.max_entries]

    def record(self, query: str) -> Tuple[str, ...]:
        updated = push_recent(self.entries, query, self.max_entries)
        if query.strip():
            self._store.set(self._key, updated)
        return updated

    def clear(self) -> None:
        self._store.set(self._key, [])
