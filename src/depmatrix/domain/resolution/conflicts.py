"""Conflict resolution by weighted voting.

Claims describing the same relationship are grouped; each multi-claim group
elects one winner by

    weight = base_confidence * source_priority * recency_weight * frequency_weight

and only the winner continues downstream, re-tagged ``CONFLICT_RESOLVED``.

Frequency is counted over the whole input batch rather than over the group
being resolved. Because all claims sharing a key land in the same group the two
counts coincide today; keep the batch-wide count until the intended scope is
confirmed.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from depmatrix.config.resolution import ResolutionConfig
from depmatrix.domain.clock import Clock, age_in_hours, utcnow
from depmatrix.domain.model import Claim, ConfidenceScore, SourceType

from .keys import group_claims, group_key, key_frequencies

if TYPE_CHECKING:
    from collections import Counter
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from .keys import ClaimKey

log = getLogger(__name__)

type BusinessRule = Callable[[Claim], Claim]

RESOLVED_ID_SUFFIX = "_resolved"


@dataclass(slots=True)
class ConflictResolutionEngine:
    config: ResolutionConfig = field(default_factory=ResolutionConfig)
    business_rules: tuple[BusinessRule, ...] = ()
    clock: Clock = utcnow

    def resolve_claims(self, claims: Iterable[Claim]) -> list[Claim]:
        """Return one resolved claim per distinct relationship, in first-seen order."""

        batch = list(claims)
        if not batch:
            log.warning("No claims provided for conflict resolution")
            return []

        frequencies = key_frequencies(batch)
        groups = group_claims(batch)
        now = self.clock()

        resolved: list[Claim] = []
        for key, group in groups.items():
            if len(group) == 1:
                winner = self._with_default_confidence(group[0])
            else:
                log.debug("Resolving %s conflicting claims for dependency: %s", len(group), key[1])
                winner = self._resolve_group(group, frequencies=frequencies, now=now)
            resolved.append(self.apply_business_rules(winner))

        log.info("Resolved %s claims into %s final claims", len(batch), len(resolved))
        return resolved

    def claim_weight(
        self,
        claim: Claim,
        *,
        frequencies: Counter[ClaimKey],
        now: datetime,
    ) -> float:
        base_confidence = (
            claim.confidence if claim.confidence is not None else self.config.default_confidence
        )
        source_priority = self.config.source_priority(claim.source_type)
        recency = self.recency_weight(claim, now=now)
        frequency = self.frequency_weight(frequencies[group_key(claim)])
        weight = base_confidence * source_priority * recency * frequency
        log.debug(
            "Claim %s weights - base: %.3f, source: %.3f, recency: %.3f, frequency: %.3f, "
            "final: %.3f",
            claim.id,
            base_confidence,
            source_priority,
            recency,
            frequency,
            weight,
        )
        return weight

    def recency_weight(self, claim: Claim, *, now: datetime) -> float:
        if claim.timestamp is None:
            return self.config.recency_decay_factor
        hours = age_in_hours(claim.timestamp, now)
        threshold = self.config.recency_threshold_hours
        if hours <= threshold:
            return 1.0
        decay = self.config.recency_decay_factor ** ((hours - threshold) / 24.0)
        return max(self.config.recency_floor, decay)

    @staticmethod
    def frequency_weight(occurrences: int) -> float:
        if occurrences <= 1:
            return 1.0
        if occurrences <= 3:  # noqa: PLR2004
            return 1.1
        return 1.2

    def apply_business_rules(self, claim: Claim) -> Claim:
        for rule in self.business_rules:
            claim = rule(claim)
        return claim

    def _with_default_confidence(self, claim: Claim) -> Claim:
        if claim.confidence_score is not None:
            return claim
        return claim.with_confidence(ConfidenceScore.of(self.config.default_confidence))

    def _resolve_group(
        self,
        group: Sequence[Claim],
        *,
        frequencies: Counter[ClaimKey],
        now: datetime,
    ) -> Claim:
        weighted = [
            (self.claim_weight(claim, frequencies=frequencies, now=now), claim) for claim in group
        ]
        # max() keeps the first of equal weights, so ties go to the earliest claim
        weight, winner = max(weighted, key=lambda item: item[0])
        log.info("Resolved conflict: selected claim %s with confidence %.3f", winner.id, weight)

        return Claim(
            id=f"{winner.id}{RESOLVED_ID_SUFFIX}",
            source_type=SourceType.CONFLICT_RESOLVED,
            raw_data=winner.raw_data,
            processed_data=winner.processed_data,
            timestamp=now,
            confidence_score=ConfidenceScore.clamped(
                weight, lower=self.config.resolved_confidence_floor, upper=1.0
            ),
        )

