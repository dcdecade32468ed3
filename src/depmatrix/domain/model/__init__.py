"""Value types forming the depmatrix data model."""

from __future__ import annotations

from .claims import (
    Claim,
    ClaimValidationError,
    ConfidenceScore,
    build_claim,
    claim_problems,
)
from .dependency import Dependency, DependencyKey
from .enums import DependencyType, SourceType

__all__ = [
    "Claim",
    "ClaimValidationError",
    "ConfidenceScore",
    "Dependency",
    "DependencyKey",
    "DependencyType",
    "SourceType",
    "build_claim",
    "claim_problems",
]
