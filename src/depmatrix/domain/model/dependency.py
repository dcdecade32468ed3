"""Accepted, typed relationships between two applications."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .claims import ConfidenceScore
    from .enums import DependencyType


type DependencyKey = tuple[str, str, DependencyType]


@dataclass(frozen=True, slots=True, kw_only=True)
class Dependency:
    """Directed dependency ``source_app_id -> target_app_id``.

    Identity ignores the confidence so two observations of the same typed
    relationship compare equal.
    """

    source_app_id: str
    target_app_id: str
    type: DependencyType
    confidence_score: ConfidenceScore = field(compare=False)

    def __post_init__(self) -> None:
        if not self.source_app_id or not self.source_app_id.strip():
            raise ValueError("Dependency source_app_id must not be blank")
        if not self.target_app_id or not self.target_app_id.strip():
            raise ValueError("Dependency target_app_id must not be blank")

    @property
    def key(self) -> DependencyKey:
        return (self.source_app_id, self.target_app_id, self.type)

    @property
    def confidence(self) -> float:
        return self.confidence_score.value

    def __str__(self) -> str:
        return (
            f"{self.source_app_id} -> {self.target_app_id} "
            f"[{self.type}] ({self.confidence_score})"
        )
