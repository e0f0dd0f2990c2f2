"""Configuration loading, schema, and defaults."""

from findingscope.config.loader import ConfigError, load_config
from findingscope.config.schema import FindingScopeConfig

__all__ = [
    "ConfigError",
    "FindingScopeConfig",
    "load_config",
]
