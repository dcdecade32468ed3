from __future__ import annotations

from datetime import UTC, datetime, timedelta
from itertools import count
from typing import TYPE_CHECKING

import pytest

from depmatrix.domain.model import Claim, ConfidenceScore

if TYPE_CHECKING:
    from collections.abc import Callable

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

type ClaimFactory = Callable[..., Claim]


def fixed_clock() -> datetime:
    return NOW


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return fixed_clock


@pytest.fixture
def make_claim() -> ClaimFactory:
    ids = count(1)

    def factory(  # noqa: PLR0913
        processed_data: str = "web-app -> user-service",
        *,
        source_type: str = "CODEBASE",
        raw_data: str = "import user_service.client",
        claim_id: str | None = None,
        hours_ago: float | None = 1,
        timestamp: datetime | None = None,
        confidence: float | None = None,
    ) -> Claim:
        if timestamp is None and hours_ago is not None:
            timestamp = NOW - timedelta(hours=hours_ago)
        return Claim(
            id=claim_id if claim_id is not None else f"claim-{next(ids)}",
            source_type=source_type,
            raw_data=raw_data,
            processed_data=processed_data,
            timestamp=timestamp,
            confidence_score=ConfidenceScore.of(confidence) if confidence is not None else None,
        )

    return factory
