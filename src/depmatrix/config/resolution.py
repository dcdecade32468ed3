"""Tunables for conflict resolution and dependency inference."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from .env import ENV_PREFIX, float_from_env
from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_RECENCY_THRESHOLD_HOURS: Final[float] = 24.0
DEFAULT_RECENCY_DECAY_FACTOR: Final[float] = 0.8
DEFAULT_RECENCY_FLOOR: Final[float] = 0.1
DEFAULT_CLAIM_CONFIDENCE: Final[float] = 0.5
DEFAULT_RESOLVED_CONFIDENCE_FLOOR: Final[float] = 0.1
DEFAULT_LOW_CONFIDENCE_THRESHOLD: Final[float] = 0.4
DEFAULT_UNKNOWN_SOURCE_PRIORITY: Final[float] = 0.5

DEFAULT_SOURCE_PRIORITIES: Final[Mapping[str, float]] = MappingProxyType(
    {
        "CODEBASE": 0.95,
        "ROUTER_LOG": 0.85,
        "API_GATEWAY": 0.80,
        "CI_CD": 0.75,
        "TELEMETRY": 0.70,
        "NETWORK": 0.60,
    }
)


def _unit_interval(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be within [0, 1], got {value}")


@dataclass(frozen=True, slots=True)
class ResolutionConfig:
    recency_threshold_hours: float = DEFAULT_RECENCY_THRESHOLD_HOURS
    recency_decay_factor: float = DEFAULT_RECENCY_DECAY_FACTOR
    recency_floor: float = DEFAULT_RECENCY_FLOOR
    default_confidence: float = DEFAULT_CLAIM_CONFIDENCE
    resolved_confidence_floor: float = DEFAULT_RESOLVED_CONFIDENCE_FLOOR
    low_confidence_threshold: float = DEFAULT_LOW_CONFIDENCE_THRESHOLD
    unknown_source_priority: float = DEFAULT_UNKNOWN_SOURCE_PRIORITY
    source_priorities: Mapping[str, float] = field(
        default_factory=lambda: DEFAULT_SOURCE_PRIORITIES
    )

    def __post_init__(self) -> None:
        if self.recency_threshold_hours < 0:
            raise ConfigurationError("Recency threshold hours must be non-negative")
        if not 0.0 < self.recency_decay_factor <= 1.0:
            raise ConfigurationError(
                f"Recency decay factor must be within (0, 1], got {self.recency_decay_factor}"
            )
        _unit_interval("Recency floor", self.recency_floor)
        _unit_interval("Default confidence", self.default_confidence)
        _unit_interval("Resolved confidence floor", self.resolved_confidence_floor)
        _unit_interval("Low confidence threshold", self.low_confidence_threshold)
        _unit_interval("Unknown source priority", self.unknown_source_priority)
        object.__setattr__(
            self,
            "source_priorities",
            MappingProxyType(
                {key.upper(): value for key, value in self.source_priorities.items()}
            ),
        )

    def source_priority(self, source_type: str | None) -> float:
        return self.source_priorities.get(
            (source_type or "").upper(), self.unknown_source_priority
        )


def get_resolution_config() -> ResolutionConfig:
    return ResolutionConfig(
        recency_threshold_hours=float_from_env(
            f"{ENV_PREFIX}RECENCY_THRESHOLD_HOURS", DEFAULT_RECENCY_THRESHOLD_HOURS
        ),
        recency_decay_factor=float_from_env(
            f"{ENV_PREFIX}RECENCY_DECAY_FACTOR", DEFAULT_RECENCY_DECAY_FACTOR
        ),
        low_confidence_threshold=float_from_env(
            f"{ENV_PREFIX}LOW_CONFIDENCE_THRESHOLD", DEFAULT_LOW_CONFIDENCE_THRESHOLD
        ),
    )
