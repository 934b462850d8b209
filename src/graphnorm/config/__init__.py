"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag
from .errors import ConfigurationError
from .logging import configure_logging, resolve_log_level
from .normalizer import NormalizerConfig, get_normalizer_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "NormalizerConfig",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "get_database_config",
    "get_normalizer_config",
    "get_storage_config",
    "resolve_log_level",
]
