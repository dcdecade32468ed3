"""Dependency inference from resolved claims.

For every relationship group the engine parses ``source -> target``, picks a
``DependencyType`` by heuristic precedence, and blends six factors into a final
confidence:

=====================  ======  ==============================================
factor                 weight  term
=====================  ======  ==============================================
baseline               0.05    constant 0.5
claim frequency        0.30    ``min(1, n / 3)``, +0.3 when ``n > 1``, capped
source diversity       0.20    ``min(1, distinct_sources / 3)``
claim confidence       0.25    mean of ``confidence * source_reliability``
source quality         0.10    ``min(0.3, 0.15 * high_reliability_claims)``
type specificity       0.05    DATABASE/API 0.2, BUILD/RUNTIME 0.1, else 0
recency                0.05    mean age bucket (1h, 24h, 1 week, older)
=====================  ======  ==============================================

Groups under the low-confidence threshold are dropped and the survivors are
deduplicated by ``(source, target, type)``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from depmatrix.config.resolution import ResolutionConfig
from depmatrix.domain.clock import Clock, age_in_hours, utcnow
from depmatrix.domain.model import Claim, ConfidenceScore, Dependency, DependencyType

from .contracts import InferenceReport
from .keys import group_claims, split_relationship_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from depmatrix.domain.model import DependencyKey

log = getLogger(__name__)

type InferenceStrategy = Callable[[Sequence[Claim]], list[Dependency]]

DATABASE_PATTERN: Final = re.compile(
    r"db|database|cache|redis|mongo|postgres|mysql|oracle", re.IGNORECASE
)
API_MARKERS: Final[tuple[str, ...]] = (
    "/api/",
    "GET ",
    "POST ",
    "PUT ",
    "PATCH ",
    "DELETE ",
)

SOURCE_RELIABILITY: Final[Mapping[str, float]] = MappingProxyType(
    {
        "CODEBASE": 1.3,
        "ROUTER_LOG": 1.1,
        "API_GATEWAY": 1.1,
        "NETWORK": 0.9,
    }
)
HIGH_RELIABILITY_SOURCES: Final = frozenset({"CODEBASE", "API_GATEWAY"})

TYPE_SPECIFICITY: Final[Mapping[DependencyType, float]] = MappingProxyType(
    {
        DependencyType.DATABASE: 0.2,
        DependencyType.API: 0.2,
        DependencyType.BUILD: 0.1,
        DependencyType.RUNTIME: 0.1,
    }
)

BASELINE_CONFIDENCE: Final = 0.5
WEIGHT_BASELINE: Final = 0.05
WEIGHT_CLAIM_FREQUENCY: Final = 0.30
WEIGHT_SOURCE_DIVERSITY: Final = 0.20
WEIGHT_CLAIM_CONFIDENCE: Final = 0.25
WEIGHT_SOURCE_QUALITY: Final = 0.10
WEIGHT_TYPE_SPECIFICITY: Final = 0.05
WEIGHT_RECENCY: Final = 0.05


def infer_cross_dependency_patterns(claims: Sequence[Claim]) -> list[Dependency]:
    """Transitive and shared-dependency patterns; no patterns are recognised yet."""

    return []


def infer_temporal_correlations(claims: Sequence[Claim]) -> list[Dependency]:
    """Cascading call patterns correlated in time; no correlations are derived yet."""

    return []


DEFAULT_STRATEGIES: Final[tuple[InferenceStrategy, ...]] = (
    infer_cross_dependency_patterns,
    infer_temporal_correlations,
)


@dataclass(slots=True)
class InferenceEngine:
    config: ResolutionConfig = field(default_factory=ResolutionConfig)
    strategies: tuple[InferenceStrategy, ...] = DEFAULT_STRATEGIES
    clock: Clock = utcnow

    def infer_dependencies(self, claims: Iterable[Claim]) -> list[Dependency]:
        return list(self.infer_batch(claims).dependencies)

    def infer_batch(self, claims: Iterable[Claim]) -> InferenceReport:
        batch = list(claims)
        if not batch:
            log.warning("No claims provided for dependency inference")
            return InferenceReport()

        log.info("Starting dependency inference on %s claims", len(batch))
        now = self.clock()
        inferred: list[Dependency] = []
        skipped: list[str] = []
        low_confidence: list[str] = []

        groups = group_claims(batch)
        for (kind, key), related in groups.items():
            if kind != "relationship":
                log.debug("Skipping claim without relationship convention: %s", key)
                skipped.append(key)
                continue

            endpoints = split_relationship_key(key)
            if endpoints is None:
                log.debug("Unable to parse dependency key: %s", key)
                skipped.append(key)
                continue

            source_app, target_app = endpoints
            dependency_type = self.infer_dependency_type(target_app, related)
            confidence = self.inference_confidence(related, dependency_type, now=now)
            if confidence < self.config.low_confidence_threshold:
                log.debug("Confidence too low for dependency: %s (%.3f)", key, confidence)
                low_confidence.append(key)
                continue

            dependency = Dependency(
                source_app_id=source_app,
                target_app_id=target_app,
                type=dependency_type,
                confidence_score=ConfidenceScore.of(confidence),
            )
            log.debug("Inferred dependency: %s", dependency)
            inferred.append(dependency)

        for strategy in self.strategies:
            inferred.extend(strategy(batch))

        log.info("Inferred %s dependencies from %s claim groups", len(inferred), len(groups))
        return InferenceReport(
            dependencies=tuple(deduplicate_dependencies(inferred)),
            skipped_keys=tuple(skipped),
            low_confidence_keys=tuple(low_confidence),
        )

    @staticmethod
    def infer_dependency_type(target_app: str, claims: Sequence[Claim]) -> DependencyType:
        if DATABASE_PATTERN.search(target_app):
            return DependencyType.DATABASE
        if any(
            claim.raw_data and any(marker in claim.raw_data for marker in API_MARKERS)
            for claim in claims
        ):
            return DependencyType.API
        if any((claim.source_type or "").upper() == "CODEBASE" for claim in claims):
            return DependencyType.BUILD
        return DependencyType.RUNTIME

    def inference_confidence(
        self,
        claims: Sequence[Claim],
        dependency_type: DependencyType,
        *,
        now: datetime,
    ) -> float:
        count = len(claims)
        claim_frequency = min(1.0, count / 3.0)
        if count > 1:
            claim_frequency = min(1.0, claim_frequency + 0.3)

        distinct_sources = {(claim.source_type or "").upper() for claim in claims}
        source_diversity = min(1.0, len(distinct_sources) / 3.0)

        weighted_confidences = [
            claim.confidence * source_reliability(claim.source_type)
            for claim in claims
            if claim.confidence is not None
        ]
        claim_confidence = (
            sum(weighted_confidences) / len(weighted_confidences)
            if weighted_confidences
            else BASELINE_CONFIDENCE
        )

        high_reliability = sum(
            1 for claim in claims if (claim.source_type or "").upper() in HIGH_RELIABILITY_SOURCES
        )
        source_quality = min(0.3, high_reliability * 0.15)

        type_specificity = TYPE_SPECIFICITY.get(dependency_type, 0.0)
        recency = recency_factor(claims, now=now)

        confidence = (
            BASELINE_CONFIDENCE * WEIGHT_BASELINE
            + claim_frequency * WEIGHT_CLAIM_FREQUENCY
            + source_diversity * WEIGHT_SOURCE_DIVERSITY
            + claim_confidence * WEIGHT_CLAIM_CONFIDENCE
            + source_quality * WEIGHT_SOURCE_QUALITY
            + type_specificity * WEIGHT_TYPE_SPECIFICITY
            + recency * WEIGHT_RECENCY
        )
        return min(1.0, max(0.0, confidence))


def source_reliability(source_type: str | None) -> float:
    if not source_type:
        return 1.0
    return SOURCE_RELIABILITY.get(source_type.upper(), 1.0)


def recency_factor(claims: Sequence[Claim], *, now: datetime) -> float:
    buckets: list[float] = []
    for claim in claims:
        if claim.timestamp is None:
            continue
        hours = age_in_hours(claim.timestamp, now)
        if hours <= 1:
            buckets.append(1.0)
        elif hours <= 24:  # noqa: PLR2004
            buckets.append(0.8)
        elif hours <= 168:  # noqa: PLR2004
            buckets.append(0.6)
        else:
            buckets.append(0.3)
    if not buckets:
        return BASELINE_CONFIDENCE
    return sum(buckets) / len(buckets)


def deduplicate_dependencies(dependencies: Iterable[Dependency]) -> list[Dependency]:
    """Collapse dependencies sharing ``(source, target, type)`` onto the most confident one."""

    unique: dict[DependencyKey, Dependency] = {}
    total = 0
    for dependency in dependencies:
        total += 1
        existing = unique.get(dependency.key)
        if existing is None or dependency.confidence > existing.confidence:
            unique[dependency.key] = dependency

    if len(unique) < total:
        log.info("Deduplicated %s dependencies to %s unique dependencies", total, len(unique))
    return list(unique.values())
