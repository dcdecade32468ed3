"""Scoring strategy configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from .env import ENV_PREFIX, float_from_env, int_from_env, optional_env_var
from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_SCORE: Final[float] = 0.5
DEFAULT_PROCESSED_DATA_PENALTY: Final[float] = 0.15
DEFAULT_MIN_PROCESSED_DATA_LENGTH: Final[int] = 5

DEFAULT_SOURCE_BASE_SCORES: Final[Mapping[str, float]] = MappingProxyType(
    {
        "CODEBASE": 0.95,
        "ROUTER_LOG": 0.85,
        "API_GATEWAY": 0.80,
    }
)


class ScoringStrategy(StrEnum):
    DEFAULT = "default"
    DYNAMIC = "dynamic"


@dataclass(frozen=True, slots=True)
class ScoringConfig:
    """Holds the static scoring table and the selected strategy."""

    strategy: ScoringStrategy = ScoringStrategy.DEFAULT
    default_score: float = DEFAULT_SCORE
    source_base_scores: Mapping[str, float] = field(
        default_factory=lambda: DEFAULT_SOURCE_BASE_SCORES
    )
    processed_data_penalty: float = DEFAULT_PROCESSED_DATA_PENALTY
    min_processed_data_length: int = DEFAULT_MIN_PROCESSED_DATA_LENGTH
    min_score: float = 0.0
    max_score: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_score <= self.max_score <= 1.0:
            raise ConfigurationError(
                f"Score bounds must satisfy 0 <= min <= max <= 1, "
                f"got [{self.min_score}, {self.max_score}]"
            )
        object.__setattr__(
            self,
            "source_base_scores",
            MappingProxyType(
                {key.upper(): value for key, value in self.source_base_scores.items()}
            ),
        )


def get_scoring_config() -> ScoringConfig:
    raw_strategy = optional_env_var(f"{ENV_PREFIX}SCORING_STRATEGY")
    try:
        strategy = (
            ScoringStrategy(raw_strategy.lower()) if raw_strategy else ScoringStrategy.DEFAULT
        )
    except ValueError as exc:
        raise ConfigurationError(f"Unknown scoring strategy: {raw_strategy!r}") from exc
    return ScoringConfig(
        strategy=strategy,
        default_score=float_from_env(f"{ENV_PREFIX}DEFAULT_SCORE", DEFAULT_SCORE),
        processed_data_penalty=float_from_env(
            f"{ENV_PREFIX}PROCESSED_DATA_PENALTY", DEFAULT_PROCESSED_DATA_PENALTY
        ),
        min_processed_data_length=int_from_env(
            f"{ENV_PREFIX}MIN_PROCESSED_DATA_LENGTH", DEFAULT_MIN_PROCESSED_DATA_LENGTH
        ),
    )
