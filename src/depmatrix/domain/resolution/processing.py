"""Claim processing: normalize, validate, and score a batch of raw claims.

Each claim runs through the three stages in order. A failure in any stage
excludes only that claim; the batch carries on and the failure is recorded in
the returned ``ProcessingReport``.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from depmatrix.domain.clock import Clock, utcnow
from depmatrix.domain.model import ClaimValidationError, ConfidenceScore, claim_problems
from depmatrix.domain.scoring import ScoringError

from .contracts import ClaimFailure, ProcessingReport, ProcessingStage

if TYPE_CHECKING:
    from collections.abc import Iterable

    from depmatrix.domain.model import Claim
    from depmatrix.domain.scoring import ScoringRuleEngine

log = getLogger(__name__)


@dataclass(slots=True)
class ClaimProcessingEngine:
    scoring: ScoringRuleEngine
    clock: Clock = utcnow

    def process_claims(self, raw_claims: Iterable[Claim]) -> list[Claim]:
        """Return the claims that survived all stages, in input order."""

        return list(self.process_batch(raw_claims).claims)

    def process_batch(self, raw_claims: Iterable[Claim]) -> ProcessingReport:
        started = time.perf_counter()
        claims: list[Claim] = []
        errors: list[ClaimFailure] = []
        warnings: list[str] = []

        for claim in raw_claims:
            stage = ProcessingStage.NORMALIZE
            try:
                normalized = self.normalize(claim)
                stage = ProcessingStage.VALIDATE
                self.validate(normalized)
                stage = ProcessingStage.SCORE
                scored, warning = self._score(normalized)
            except (ClaimValidationError, ScoringError) as exc:
                claim_id = getattr(claim, "id", None)
                log.warning(
                    "Claim processing failed for claim ID %s at %s: %s", claim_id, stage, exc
                )
                errors.append(ClaimFailure(claim_id=claim_id, stage=stage, message=str(exc)))
                continue
            except Exception as exc:
                claim_id = getattr(claim, "id", None)
                log.warning(
                    "Unexpected error processing claim ID %s at %s",
                    claim_id,
                    stage,
                    exc_info=True,
                )
                errors.append(
                    ClaimFailure(
                        claim_id=claim_id,
                        stage=stage,
                        message=f"{type(exc).__name__}: {exc}",
                    )
                )
                continue

            if warning is not None:
                warnings.append(warning)
            claims.append(scored)
            log.debug("Successfully processed claim: %s", scored.id)

        elapsed_ms = (time.perf_counter() - started) * 1000
        log.info(
            "Claim processing completed: %s successful, %s failed, took %.1f ms",
            len(claims),
            len(errors),
            elapsed_ms,
        )
        return ProcessingReport(
            claims=tuple(claims), errors=tuple(errors), warnings=tuple(warnings)
        )

    def normalize(self, claim: Claim) -> Claim:
        """Canonicalize claim fields.

        Currently the identity. Trimming, casing and application-id
        canonicalization belong here.
        """

        return claim

    def validate(self, claim: Claim) -> None:
        problems = claim_problems(claim, now=self.clock())
        if problems:
            raise ClaimValidationError(getattr(claim, "id", None), problems)

    def score(self, claim: Claim) -> Claim:
        scored, _warning = self._score(claim)
        return scored

    def _score(self, claim: Claim) -> tuple[Claim, str | None]:
        try:
            raw_score = float(self.scoring.score(claim))
        except ScoringError:
            raise
        except Exception as exc:
            raise ScoringError(f"Scoring failed for claim {claim.id}: {exc}") from exc

        if math.isnan(raw_score):
            raise ScoringError(f"Scoring engine returned NaN for claim {claim.id}")

        warning: str | None = None
        if not 0.0 <= raw_score <= 1.0:
            warning = (
                f"Scoring engine returned out-of-range score {raw_score} for claim {claim.id}; "
                "clamped to [0, 1]"
            )
            log.warning(warning)

        score = ConfidenceScore.clamped(raw_score)
        log.debug("Assigned confidence score %s to claim: %s", score, claim.id)
        return claim.with_confidence(score), warning
