"""Claim primitives used by the dependency pipeline.

A claim is one source-attributed observation asserting that one application
talks to another. Adapters create claims from source-specific formats; every
pipeline stage returns *new* claims rather than mutating the ones it receives.

``processed_data`` follows the convention ``"<source-app> -> <target-app>"``.
Claims that do not follow it are carried through the pipeline but can never be
merged with other claims or turned into dependencies.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime

from depmatrix.domain.clock import as_utc, utcnow


@dataclass(frozen=True, slots=True)
class ConfidenceScore:
    """Bounded trust measure in ``[0.0, 1.0]``."""

    value: float

    def __post_init__(self) -> None:
        if math.isnan(self.value) or not 0.0 <= self.value <= 1.0:
            raise ValueError(f"Confidence score must be between 0.0 and 1.0, got {self.value}")

    @classmethod
    def of(cls, value: float) -> ConfidenceScore:
        return cls(float(value))

    @classmethod
    def clamped(cls, value: float, *, lower: float = 0.0, upper: float = 1.0) -> ConfidenceScore:
        """Clamp ``value`` into ``[lower, upper]`` before constructing the score."""

        if math.isnan(value):
            raise ValueError("Cannot clamp NaN into a confidence score")
        return cls(max(lower, min(upper, float(value))))

    def __float__(self) -> float:
        return self.value

    def __str__(self) -> str:
        return f"{self.value:.2f}"


class ClaimValidationError(ValueError):
    """Raised when a claim violates its field invariants."""

    def __init__(self, claim_id: str | None, problems: tuple[str, ...]) -> None:
        self.claim_id = claim_id
        self.problems = problems
        super().__init__(f"Invalid claim {claim_id!r}: {'; '.join(problems)}")


@dataclass(frozen=True, slots=True, kw_only=True)
class Claim:
    """Immutable envelope for one observed relationship."""

    id: str
    source_type: str
    raw_data: str
    processed_data: str
    timestamp: datetime | None
    confidence_score: ConfidenceScore | None = None

    @property
    def confidence(self) -> float | None:
        if self.confidence_score is None:
            return None
        return self.confidence_score.value

    def with_confidence(self, score: ConfidenceScore) -> Claim:
        return replace(self, confidence_score=score)


_REQUIRED_TEXT_FIELDS = ("id", "source_type", "raw_data", "processed_data")


def claim_problems(claim: Claim, *, now: datetime | None = None) -> tuple[str, ...]:
    """List every invariant ``claim`` violates; empty when the claim is valid."""

    problems: list[str] = []
    for name in _REQUIRED_TEXT_FIELDS:
        value = getattr(claim, name)
        if value is None:
            problems.append(f"{name} is required")
        elif not isinstance(value, str) or not value.strip():
            problems.append(f"{name} must not be blank")

    if claim.timestamp is None:
        problems.append("timestamp is required")
    elif not isinstance(claim.timestamp, datetime):
        problems.append(f"timestamp must be a datetime, got {type(claim.timestamp).__name__}")
    elif as_utc(claim.timestamp) > as_utc(now or utcnow()):
        problems.append(f"timestamp cannot be in the future: {claim.timestamp.isoformat()}")

    return tuple(problems)


def build_claim(  # noqa: PLR0913
    *,
    id: str,  # noqa: A002
    source_type: str,
    raw_data: str,
    processed_data: str,
    timestamp: datetime | None,
    confidence: float | None = None,
    now: datetime | None = None,
) -> tuple[Claim | None, tuple[str, ...]]:
    """Build a claim eagerly, returning ``(claim, ())`` or ``(None, problems)``."""

    score: ConfidenceScore | None = None
    score_problems: tuple[str, ...] = ()
    if confidence is not None:
        try:
            score = ConfidenceScore.of(confidence)
        except ValueError as exc:
            score_problems = (str(exc),)

    claim = Claim(
        id=id,
        source_type=source_type,
        raw_data=raw_data,
        processed_data=processed_data,
        timestamp=timestamp,
        confidence_score=score,
    )
    problems = claim_problems(claim, now=now) + score_problems
    if problems:
        return None, problems
    return claim, ()
