"""Pydantic models describing claim records exchanged as JSON."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class ClaimPayload(BaseModel):
    """One claim record; keys may be camelCase or snake_case."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        frozen=True,
    )

    id: str = ""
    source_type: str = ""
    raw_data: str = ""
    processed_data: str = ""
    timestamp: datetime | None = None
    confidence: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("confidence", "confidenceScore", "confidence_score"),
    )

    _normalize_timestamp = field_validator("timestamp", mode="before")(_blank_to_none)
