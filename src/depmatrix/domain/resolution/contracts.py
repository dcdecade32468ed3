"""Report values returned by the pipeline stages.

Stages log as they go, but callers (and tests) read outcomes from these
records instead of from log output.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from depmatrix.domain.model import Claim, Dependency


class ProcessingStage(StrEnum):
    NORMALIZE = "normalize"
    VALIDATE = "validate"
    SCORE = "score"


@dataclass(frozen=True, slots=True, kw_only=True)
class ClaimFailure:
    """One claim excluded from a batch."""

    claim_id: str | None
    stage: ProcessingStage
    message: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ProcessingReport:
    """Outcome of ``ClaimProcessingEngine.process_batch``."""

    claims: tuple[Claim, ...] = ()
    errors: tuple[ClaimFailure, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def success_count(self) -> int:
        return len(self.claims)

    @property
    def failure_count(self) -> int:
        return len(self.errors)


@dataclass(frozen=True, slots=True, kw_only=True)
class InferenceReport:
    """Outcome of ``InferenceEngine.infer_batch``."""

    dependencies: tuple[Dependency, ...] = ()
    skipped_keys: tuple[str, ...] = ()
    low_confidence_keys: tuple[str, ...] = ()
