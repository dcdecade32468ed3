"""Scoring strategy contract.

Strategies are injected into ``ClaimProcessingEngine`` at construction, so a
table-driven engine can be swapped for a dynamically configured one without
touching the pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from depmatrix.domain.model import Claim


class ScoringError(ValueError):
    """Raised when a strategy produces something that is not a usable score."""


class ScoringRuleEngine(Protocol):
    """Compute a confidence in ``[0, 1]`` for a single claim."""

    def score(self, claim: Claim) -> float: ...
