"""Static, table-driven scoring strategy."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from depmatrix.config.scoring import ScoringConfig

if TYPE_CHECKING:
    from depmatrix.domain.model import Claim

log = getLogger(__name__)


@dataclass(slots=True)
class DefaultScoringRuleEngine:
    """Score claims from a per-source base table with a short-data penalty."""

    config: ScoringConfig = field(default_factory=ScoringConfig)

    def score(self, claim: Claim) -> float:
        config = self.config
        base = config.default_score
        if claim.source_type:
            base = config.source_base_scores.get(claim.source_type.upper(), config.default_score)

        if not claim.processed_data or len(claim.processed_data) < config.min_processed_data_length:
            base -= config.processed_data_penalty
            log.warning("Processed data penalty applied for claim %s", claim.id)

        return max(config.min_score, min(config.max_score, base))
