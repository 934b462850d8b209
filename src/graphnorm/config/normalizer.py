"""Normalizer runtime configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import env_flag

TREAT_MISSING_FIELDS_AS_NULL_ENV: Final[str] = "GRAPHNORM_TREAT_MISSING_FIELDS_AS_NULL"
DEVELOPMENT_ENV: Final[str] = "GRAPHNORM_DEV"


@dataclass(frozen=True, slots=True)
class NormalizerConfig:
    """Options recognised by the response normalizer.

    ``treat_missing_fields_as_null`` writes ``null`` for fields absent from the
    payload instead of leaving them unset. ``development`` enables the data
    consistency diagnostics.
    """

    treat_missing_fields_as_null: bool = False
    development: bool = False


def get_normalizer_config() -> NormalizerConfig:
    return NormalizerConfig(
        treat_missing_fields_as_null=env_flag(TREAT_MISSING_FIELDS_AS_NULL_ENV),
        development=env_flag(DEVELOPMENT_ENV),
    )
