"""Versioned rule configuration for the dynamic scoring strategy.

The configuration is an explicit record serialized as JSON. Writes go through
a temporary file in the target directory followed by ``os.replace`` so readers
never observe a half-written file.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)

RULE_CONFIG_SCHEMA_VERSION = 1


class RuleConfigError(ValueError):
    """Raised when rule updates do not form a valid configuration."""


class RuleConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    schema_version: Literal[1] = RULE_CONFIG_SCHEMA_VERSION
    critical_app_pattern: str = "critical-app"
    critical_app_boost: float = 0.2
    test_data_penalty: float = -0.15
    codebase_boost: float = 0.3
    router_log_boost: float = 0.15
    api_gateway_boost: float = 0.10
    processed_data_penalty: float = -0.15
    min_processed_data_length: int = Field(default=5, ge=0)
    id_penalty: float = -0.1
    old_claim_penalty: float = -0.1
    old_claim_days: int = Field(default=30, ge=0)

    def with_updates(self, updates: Mapping[str, object]) -> RuleConfig:
        """Return a validated copy with ``updates`` applied."""

        try:
            return RuleConfig.model_validate({**self.model_dump(), **updates})
        except ValidationError as exc:
            raise RuleConfigError(f"Invalid rule update: {exc}") from exc

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)


@dataclass(frozen=True, slots=True)
class RuleStore:
    """File-backed persistence for ``RuleConfig``."""

    path: Path

    def load(self) -> RuleConfig:
        try:
            document = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            log.info("No rules file at %s, using defaults", self.path)
            return RuleConfig()
        except (OSError, UnicodeDecodeError):
            log.warning("Could not read rules file %s, using defaults", self.path, exc_info=True)
            return RuleConfig()

        try:
            config = RuleConfig.model_validate_json(document)
        except ValidationError:
            log.warning("Could not parse rules file %s, using defaults", self.path, exc_info=True)
            return RuleConfig()

        log.info("Loaded rules from file: %s", self.path)
        return config

    def save(self, config: RuleConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        handle = tempfile.NamedTemporaryFile(  # noqa: SIM115
            "w",
            encoding="utf-8",
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
            delete=False,
        )
        tmp_path = Path(handle.name)
        try:
            with handle:
                handle.write(config.to_json())
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        log.info("Saved rules to file: %s", self.path)


def parse_rule_assignments(assignments: list[str] | tuple[str, ...]) -> dict[str, object]:
    """Parse ``KEY=VALUE`` strings, decoding values as JSON where possible."""

    updates: dict[str, object] = {}
    for assignment in assignments:
        key, sep, raw_value = assignment.partition("=")
        if not sep or not key.strip():
            raise RuleConfigError(f"Expected KEY=VALUE, got {assignment!r}")
        try:
            value: object = json.loads(raw_value)
        except json.JSONDecodeError:
            value = raw_value
        updates[key.strip()] = value
    return updates
