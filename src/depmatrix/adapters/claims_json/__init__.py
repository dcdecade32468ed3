"""Public interface for the JSON claims adapter."""

from __future__ import annotations

from .schema import ClaimPayload
from .translator import ClaimInputError, claims_from_records, load_claims, parse_claim, parse_claims

__all__ = [
    "ClaimInputError",
    "ClaimPayload",
    "claims_from_records",
    "load_claims",
    "parse_claim",
    "parse_claims",
]
