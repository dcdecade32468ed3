from __future__ import annotations

import math
from dataclasses import replace
from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from depmatrix.domain.resolution import ClaimProcessingEngine, ProcessingStage
from depmatrix.domain.scoring import DefaultScoringRuleEngine

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from depmatrix.domain.model import Claim


class _FixedScore:
    def __init__(self, value: float) -> None:
        self.value = value

    def score(self, claim: Claim) -> float:
        return self.value


class _BrokenScore:
    def score(self, claim: Claim) -> float:
        raise RuntimeError("rule table unavailable")


def test_process_claims_scores_valid_claims(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = ClaimProcessingEngine(DefaultScoringRuleEngine(), clock=clock)
    claims = [make_claim(source_type="CODEBASE"), make_claim(source_type="ROUTER_LOG")]

    processed = engine.process_claims(claims)

    assert [claim.id for claim in processed] == [claim.id for claim in claims]
    assert processed[0].confidence == pytest.approx(0.95)
    assert processed[1].confidence == pytest.approx(0.85)
    assert all(claim.confidence is None for claim in claims)


def test_process_batch_excludes_invalid_claims(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = ClaimProcessingEngine(DefaultScoringRuleEngine(), clock=clock)
    valid = make_claim(claim_id="ok")
    blank_id = make_claim(claim_id="  ")
    missing_timestamp = make_claim(claim_id="no-ts", hours_ago=None)
    future = make_claim(claim_id="future", timestamp=clock() + timedelta(hours=1))

    report = engine.process_batch([blank_id, valid, missing_timestamp, future])

    assert [claim.id for claim in report.claims] == ["ok"]
    assert report.success_count == 1
    assert report.failure_count == 3
    assert {failure.stage for failure in report.errors} == {ProcessingStage.VALIDATE}
    assert [failure.claim_id for failure in report.errors] == ["  ", "no-ts", "future"]


def test_process_batch_handles_empty_input(clock: Callable[[], datetime]) -> None:
    engine = ClaimProcessingEngine(DefaultScoringRuleEngine(), clock=clock)

    report = engine.process_batch([])

    assert report.claims == ()
    assert report.errors == ()


def test_out_of_range_scores_are_clamped_with_warning(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = ClaimProcessingEngine(_FixedScore(1.5), clock=clock)

    report = engine.process_batch([make_claim(claim_id="hot")])

    assert report.claims[0].confidence == 1.0
    assert len(report.warnings) == 1
    assert "hot" in report.warnings[0]


def test_nan_scores_fail_the_claim(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = ClaimProcessingEngine(_FixedScore(math.nan), clock=clock)

    report = engine.process_batch([make_claim(claim_id="nan")])

    assert report.claims == ()
    assert report.errors[0].stage is ProcessingStage.SCORE
    assert "NaN" in report.errors[0].message


def test_strategy_errors_fail_only_that_claim(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = ClaimProcessingEngine(_BrokenScore(), clock=clock)

    report = engine.process_batch([make_claim(claim_id="x"), make_claim(claim_id="y")])

    assert report.claims == ()
    assert [failure.claim_id for failure in report.errors] == ["x", "y"]
    assert "rule table unavailable" in report.errors[0].message


def test_non_claim_items_fail_only_themselves(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = ClaimProcessingEngine(DefaultScoringRuleEngine(), clock=clock)

    report = engine.process_batch(
        [make_claim(claim_id="a"), None, make_claim(claim_id="b")]  # type: ignore[list-item]
    )

    assert [claim.id for claim in report.claims] == ["a", "b"]
    assert report.failure_count == 1
    assert report.errors[0].claim_id is None
    assert report.errors[0].stage is ProcessingStage.VALIDATE
    assert "AttributeError" in report.errors[0].message


def test_string_timestamp_fails_validation(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = ClaimProcessingEngine(DefaultScoringRuleEngine(), clock=clock)
    text_timestamp = replace(make_claim(claim_id="text-ts"), timestamp="2025-01-01T00:00:00")

    report = engine.process_batch([make_claim(claim_id="a"), text_timestamp, make_claim()])

    assert report.success_count == 2
    assert [failure.claim_id for failure in report.errors] == ["text-ts"]
    assert report.errors[0].stage is ProcessingStage.VALIDATE
    assert "timestamp must be a datetime" in report.errors[0].message
