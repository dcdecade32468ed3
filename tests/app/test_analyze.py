from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from depmatrix.app import (
    analyze_claims,
    analyze_claims_file,
    build_pipeline,
    show_rules,
    update_rules,
)
from depmatrix.config import ResolutionConfig, ScoringConfig, ScoringStrategy, StorageConfig
from depmatrix.domain.scoring import DefaultScoringRuleEngine, DynamicRuleEngine, RuleConfigError

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from pathlib import Path

    from depmatrix.domain.model import Claim


def test_build_pipeline_uses_default_scoring(clock: Callable[[], datetime]) -> None:
    pipeline = build_pipeline(
        scoring_config=ScoringConfig(),
        resolution_config=ResolutionConfig(low_confidence_threshold=0.3),
        clock=clock,
    )

    assert isinstance(pipeline.processing.scoring, DefaultScoringRuleEngine)
    assert pipeline.inference.config.low_confidence_threshold == 0.3
    assert pipeline.resolution.config.low_confidence_threshold == 0.3


def test_build_pipeline_uses_dynamic_rules_from_data_dir(
    tmp_path: Path, clock: Callable[[], datetime]
) -> None:
    update_rules({"codebase_boost": 0.2}, rules_path=tmp_path / "dynamic-rules.json")

    pipeline = build_pipeline(
        scoring_config=ScoringConfig(strategy=ScoringStrategy.DYNAMIC),
        resolution_config=ResolutionConfig(),
        storage_config=StorageConfig(data_dir=tmp_path),
        clock=clock,
    )

    scoring = pipeline.processing.scoring
    assert isinstance(scoring, DynamicRuleEngine)
    assert scoring.rule_config.codebase_boost == 0.2


def test_analyze_claims_runs_pipeline(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    pipeline = build_pipeline(
        scoring_config=ScoringConfig(), resolution_config=ResolutionConfig(), clock=clock
    )

    matrix = analyze_claims(
        [make_claim("web-app -> orders-db"), make_claim("web-app -> billing")],
        pipeline=pipeline,
    )

    assert matrix.dependency_count == 2
    assert matrix.application_count == 3


def test_analyze_claims_file(tmp_path: Path, clock: Callable[[], datetime], now: datetime) -> None:
    path = tmp_path / "claims.jsonl"
    records = [
        {
            "id": "c1",
            "sourceType": "CODEBASE",
            "rawData": "import orders",
            "processedData": "web-app -> orders",
            "timestamp": now.isoformat(),
        },
        {"id": "c2", "sourceType": "CODEBASE", "processedData": "web-app -> audit"},
    ]
    path.write_text("\n".join(json.dumps(record) for record in records), encoding="utf-8")
    pipeline = build_pipeline(
        scoring_config=ScoringConfig(), resolution_config=ResolutionConfig(), clock=clock
    )

    matrix = analyze_claims_file(path, pipeline=pipeline)

    assert [dependency.target_app_id for dependency in matrix.dependencies] == ["orders"]
    assert matrix.processing.failure_count == 1


def test_show_and_update_rules(tmp_path: Path) -> None:
    rules_path = tmp_path / "rules.json"

    assert show_rules(rules_path=rules_path).codebase_boost == 0.3
    update_rules({"old_claim_days": 10}, rules_path=rules_path)
    assert show_rules(rules_path=rules_path).old_claim_days == 10

    with pytest.raises(RuleConfigError):
        update_rules({"old_claim_days": -1}, rules_path=rules_path)
    assert show_rules(rules_path=rules_path).old_claim_days == 10
