"""Logging setup for the graphnorm command line."""

from __future__ import annotations

import logging
import os
import sys
from typing import Final

from .errors import ConfigurationError

LOG_LEVEL_ENV: Final[str] = "GRAPHNORM_LOG_LEVEL"


def resolve_log_level(default: int = logging.INFO) -> int:
    """Return the level named by ``GRAPHNORM_LOG_LEVEL`` (``DEBUG``, ``warning``, ``10``...)."""

    value = os.getenv(LOG_LEVEL_ENV)
    if value is None or not value.strip():
        return default
    name = value.strip().upper()
    if name.isdigit():
        return int(name)
    level = logging.getLevelNamesMapping().get(name)
    if level is None:
        raise ConfigurationError(f"Invalid log level for {LOG_LEVEL_ENV}: {value!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Send log records to stderr so stdout stays free for the JSON report.

    ``level`` falls back to ``GRAPHNORM_LOG_LEVEL`` and then INFO. Diagnostics from
    a development run arrive as WARNING records and therefore stay visible at the
    default level.
    """

    logging.basicConfig(
        level=resolve_log_level() if level is None else level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=force,
    )
