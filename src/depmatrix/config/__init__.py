"""Application configuration helpers."""

from __future__ import annotations

from .errors import ConfigurationError
from .logging import configure_logging
from .resolution import ResolutionConfig, get_resolution_config
from .scoring import ScoringConfig, ScoringStrategy, get_scoring_config
from .storage import StorageConfig, get_storage_config

__all__ = [
    "ConfigurationError",
    "ResolutionConfig",
    "ScoringConfig",
    "ScoringStrategy",
    "StorageConfig",
    "configure_logging",
    "get_resolution_config",
    "get_scoring_config",
    "get_storage_config",
]
