"""Load and merge configuration from .findingscope.toml and env vars."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from findingscope.config.schema import (
    OUTPUT_FORMATS,
    AggregationConfig,
    FindingScopeConfig,
    HistoryConfig,
    OutputConfig,
    SearchConfig,
    SourceConfig,
    SuggestConfig,
)

CONFIG_FILENAME = ".findingscope.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(base_dir: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = base_dir / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _merge_env_overrides(cfg: FindingScopeConfig) -> None:
    """Apply FINDINGSCOPE_* environment variable overrides."""
    if val := os.environ.get("FINDINGSCOPE_URL"):
        cfg.source.url = val
    if val := os.environ.get("FINDINGSCOPE_TIMEOUT"):
        try:
            timeout = float(val)
        except ValueError:
            timeout = 0.0
        if timeout > 0:
            cfg.source.timeout = timeout
    if val := os.environ.get("FINDINGSCOPE_FILE"):
        cfg.source.file = val
    if val := os.environ.get("FINDINGSCOPE_FORMAT"):
        if val in OUTPUT_FORMATS:
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("FINDINGSCOPE_HISTORY"):
        cfg.history.path = val


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    import dataclasses

    raw_section = data.get(section, {})
    if not isinstance(raw_section, dict):
        raise ConfigError(f"[{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in raw_section.items() if k in valid_fields}
    return cls(**filtered)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_types(cfg: FindingScopeConfig) -> None:
    """Reject values of the wrong TOML type before range checks compare them."""
    for name, value in (
        ("search.threshold", cfg.search.threshold),
        ("source.timeout", cfg.source.timeout),
    ):
        if not _is_number(value):
            raise ConfigError(f"{name} must be a number, got {value!r}")
    for name, value in (
        ("search.limit", cfg.search.limit),
        ("suggest.recent_limit", cfg.suggest.recent_limit),
        ("history.max_entries", cfg.history.max_entries),
        ("aggregation.timeline_days", cfg.aggregation.timeline_days),
        ("aggregation.top_services", cfg.aggregation.top_services),
    ):
        if not isinstance(value, int) or isinstance(value, bool):
            raise ConfigError(f"{name} must be an integer, got {value!r}")
    for name, value in (
        ("source.url", cfg.source.url),
        ("history.path", cfg.history.path),
        ("aggregation.date_format", cfg.aggregation.date_format),
        ("output.format", cfg.output.format),
    ):
        if not isinstance(value, str):
            raise ConfigError(f"{name} must be a string, got {value!r}")
    if cfg.source.file is not None and not isinstance(cfg.source.file, str):
        raise ConfigError(f"source.file must be a string, got {cfg.source.file!r}")
    for name, values in (
        ("suggest.featured_services", cfg.suggest.featured_services),
        ("suggest.known_services", cfg.suggest.known_services),
    ):
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise ConfigError(f"{name} must be a list of strings")


def _validate(cfg: FindingScopeConfig) -> None:
    _check_types(cfg)
    if not 0.0 <= cfg.search.threshold <= 1.0:
        raise ConfigError(
            f"search.threshold must be between 0 and 1, got {cfg.search.threshold}"
        )
    if cfg.output.format not in OUTPUT_FORMATS:
        raise ConfigError(f"Unknown output format: {cfg.output.format}")
    if cfg.source.timeout <= 0:
        raise ConfigError("source.timeout must be positive")
    for name, value in (
        ("search.limit", cfg.search.limit),
        ("history.max_entries", cfg.history.max_entries),
        ("aggregation.timeline_days", cfg.aggregation.timeline_days),
        ("aggregation.top_services", cfg.aggregation.top_services),
    ):
        if value < 1:
            raise ConfigError(f"{name} must be at least 1, got {value}")


def load_config(
    base_dir: Path,
    config_override: Optional[str] = None,
) -> FindingScopeConfig:
    """Load, validate, and return a FindingScopeConfig."""
    config_path = find_config_file(base_dir, config_override)

    if config_path is None:
        cfg = FindingScopeConfig()
    else:
        raw = _parse_toml(config_path)
        cfg = FindingScopeConfig(
            version=raw.get("version", "1.0"),
            source=_build_section(raw, SourceConfig, "source"),
            search=_build_section(raw, SearchConfig, "search"),
            suggest=_build_section(raw, SuggestConfig, "suggest"),
            history=_build_section(raw, HistoryConfig, "history"),
            aggregation=_build_section(raw, AggregationConfig, "aggregation"),
            output=_build_section(raw, OutputConfig, "output"),
        )

    _merge_env_overrides(cfg)
    _validate(cfg)
    return cfg
