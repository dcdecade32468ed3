"""Read claim records from JSON or JSON Lines and translate them into claims.

Records that do not match ``ClaimPayload`` are skipped with a warning. Records
that match are translated as-is; field invariants are checked later by the
processing engine so they show up in its report.
"""

from __future__ import annotations

import json
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from depmatrix.domain.model import Claim, ConfidenceScore

from .schema import ClaimPayload

if TYPE_CHECKING:
    from collections.abc import Iterable

log = getLogger(__name__)


class ClaimInputError(ValueError):
    """Raised when a claims document cannot be read at all."""


def parse_claim(payload: ClaimPayload) -> Claim:
    return Claim(
        id=payload.id,
        source_type=payload.source_type,
        raw_data=payload.raw_data,
        processed_data=payload.processed_data,
        timestamp=payload.timestamp,
        confidence_score=(
            ConfidenceScore.of(payload.confidence) if payload.confidence is not None else None
        ),
    )


def claims_from_records(records: Iterable[object]) -> list[Claim]:
    claims: list[Claim] = []
    for position, record in enumerate(records):
        try:
            payload = ClaimPayload.model_validate(record)
        except ValidationError as exc:
            log.warning(
                "Skipping claim record %s: %s error(s): %s",
                position,
                exc.error_count(),
                "; ".join(error["msg"] for error in exc.errors()),
            )
            continue
        claims.append(parse_claim(payload))
    return claims


def parse_claims(text: str) -> list[Claim]:
    """Parse a JSON array of claim objects, or one JSON object per line."""

    stripped = text.strip()
    if not stripped:
        return []
    if stripped.startswith("["):
        try:
            records = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ClaimInputError(f"Claims document is not valid JSON: {exc}") from exc
        return claims_from_records(records)
    return claims_from_records(_json_lines(stripped))


def load_claims(path: Path | str) -> list[Claim]:
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ClaimInputError(f"Unable to read claims from {source}: {exc}") from exc
    claims = parse_claims(text)
    log.info("Loaded %s claims from %s", len(claims), source)
    return claims


def _json_lines(text: str) -> list[object]:
    records: list[object] = []
    for number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as exc:
            log.warning("Skipping malformed JSON on line %s: %s", number, exc)
    return records
