"""Relationship keys shared by conflict resolution and inference.

Both stages group claims by the relationship they describe. Claims whose
``processed_data`` lacks the ``"->"`` convention get a per-claim key so they
are never merged with anything else.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable

    from depmatrix.domain.model import Claim

RELATIONSHIP_ARROW = "->"
_ARROW_SPLIT = re.compile(r"\s*->\s*")

type ClaimKey = tuple[Literal["relationship", "claim"], str]


def relationship_key(claim: Claim) -> str | None:
    processed = claim.processed_data
    if processed and RELATIONSHIP_ARROW in processed:
        return processed.strip().lower()
    return None


def group_key(claim: Claim) -> ClaimKey:
    key = relationship_key(claim)
    if key is None:
        return ("claim", claim.id)
    return ("relationship", key)


def split_relationship_key(key: str) -> tuple[str, str] | None:
    """Return ``(source, target)`` when ``key`` holds exactly two non-empty parts."""

    parts = [part.strip() for part in _ARROW_SPLIT.split(key.strip())]
    if len(parts) != 2 or not all(parts):  # noqa: PLR2004
        return None
    return parts[0], parts[1]


def group_claims(claims: Iterable[Claim]) -> dict[ClaimKey, list[Claim]]:
    """Group claims by key, preserving first-seen key order and claim order."""

    groups: dict[ClaimKey, list[Claim]] = {}
    for claim in claims:
        groups.setdefault(group_key(claim), []).append(claim)
    return groups


def key_frequencies(claims: Iterable[Claim]) -> Counter[ClaimKey]:
    return Counter(group_key(claim) for claim in claims)
