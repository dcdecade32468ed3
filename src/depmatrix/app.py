"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from depmatrix.adapters.claims_json import load_claims
from depmatrix.config import (
    ScoringStrategy,
    get_resolution_config,
    get_scoring_config,
    get_storage_config,
)
from depmatrix.domain.clock import Clock, utcnow
from depmatrix.domain.resolution import (
    ClaimProcessingEngine,
    ConflictResolutionEngine,
    DependencyPipeline,
    InferenceEngine,
)
from depmatrix.domain.scoring import DefaultScoringRuleEngine, DynamicRuleEngine, RuleStore

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

    from depmatrix.config import ResolutionConfig, ScoringConfig, StorageConfig
    from depmatrix.domain.model import Claim
    from depmatrix.domain.resolution import DependencyMatrix
    from depmatrix.domain.scoring import RuleConfig, ScoringRuleEngine


log = getLogger(__name__)


def rule_store(
    *,
    storage_config: StorageConfig | None = None,
    rules_path: Path | None = None,
) -> RuleStore:
    if rules_path is not None:
        return RuleStore(rules_path)
    return RuleStore((storage_config or get_storage_config()).rules_path())


def build_scoring_engine(
    *,
    scoring_config: ScoringConfig | None = None,
    storage_config: StorageConfig | None = None,
    rules_path: Path | None = None,
    clock: Clock = utcnow,
) -> ScoringRuleEngine:
    """Return the scoring strategy selected by ``scoring_config``."""

    config = scoring_config or get_scoring_config()
    if config.strategy is ScoringStrategy.DYNAMIC:
        store = rule_store(storage_config=storage_config, rules_path=rules_path)
        return DynamicRuleEngine.from_store(store, clock=clock)
    return DefaultScoringRuleEngine(config)


def build_pipeline(
    *,
    scoring_config: ScoringConfig | None = None,
    resolution_config: ResolutionConfig | None = None,
    storage_config: StorageConfig | None = None,
    rules_path: Path | None = None,
    clock: Clock = utcnow,
) -> DependencyPipeline:
    resolution = resolution_config or get_resolution_config()
    scoring = build_scoring_engine(
        scoring_config=scoring_config,
        storage_config=storage_config,
        rules_path=rules_path,
        clock=clock,
    )
    return DependencyPipeline(
        processing=ClaimProcessingEngine(scoring, clock=clock),
        resolution=ConflictResolutionEngine(config=resolution, clock=clock),
        inference=InferenceEngine(config=resolution, clock=clock),
        clock=clock,
    )


def analyze_claims(
    claims: Iterable[Claim],
    *,
    pipeline: DependencyPipeline | None = None,
) -> DependencyMatrix:
    """Run ``claims`` through the configured pipeline."""

    batch = list(claims)
    effective_pipeline = pipeline or build_pipeline()
    log.info("Starting dependency analysis of %s claims", len(batch))

    matrix = effective_pipeline.run(batch)

    log.info(
        f"Finished dependency analysis: applications={matrix.application_count}, "
        f"dependencies={matrix.dependency_count}, cycles={len(matrix.cycles)}, "
        f"failed_claims={matrix.processing.failure_count}, "
        f"time={matrix.processing_time_formatted}"
    )
    return matrix


def analyze_claims_file(
    path: Path | str,
    *,
    pipeline: DependencyPipeline | None = None,
) -> DependencyMatrix:
    return analyze_claims(load_claims(path), pipeline=pipeline)


def show_rules(*, rules_path: Path | None = None) -> RuleConfig:
    return rule_store(rules_path=rules_path).load()


def update_rules(updates: Mapping[str, object], *, rules_path: Path | None = None) -> RuleConfig:
    """Validate ``updates`` against the stored rules and persist the result."""

    engine = DynamicRuleEngine.from_store(rule_store(rules_path=rules_path))
    return engine.update_rules(updates)
