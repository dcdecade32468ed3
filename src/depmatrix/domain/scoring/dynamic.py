"""Rule-driven scoring strategy with a hot-swappable configuration.

Scoring calls read one immutable ``RuleConfig`` snapshot per claim; updates
build a new snapshot, persist it, and only then replace the reference. Readers
therefore never lock, and concurrent updates are serialized by a writer lock.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from depmatrix.domain.clock import Clock, as_utc, utcnow

from .rules import RuleConfig

if TYPE_CHECKING:
    from collections.abc import Mapping

    from depmatrix.domain.model import Claim

    from .rules import RuleStore

log = getLogger(__name__)


@dataclass(slots=True)
class DynamicRuleEngine:
    store: RuleStore | None = None
    clock: Clock = utcnow
    _config: RuleConfig = field(default_factory=RuleConfig, repr=False)
    _write_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def from_store(cls, store: RuleStore, *, clock: Clock = utcnow) -> DynamicRuleEngine:
        return cls(store=store, clock=clock, _config=store.load())

    @property
    def rule_config(self) -> RuleConfig:
        return self._config

    def update_rules(self, updates: Mapping[str, object]) -> RuleConfig:
        """Validate and persist ``updates``, then publish the new snapshot."""

        with self._write_lock:
            updated = self._config.with_updates(updates)
            if self.store is not None:
                self.store.save(updated)
            self._config = updated
        log.info("Updated scoring rules: %s", sorted(updates))
        return updated

    def score(self, claim: Claim) -> float:
        rules = self._config
        score = 0.5

        processed = claim.processed_data or ""
        if processed and re.search(re.escape(rules.critical_app_pattern), processed, re.IGNORECASE):
            score += rules.critical_app_boost

        if claim.raw_data and "test" in claim.raw_data.lower():
            score += rules.test_data_penalty

        source = (claim.source_type or "").upper()
        if source == "CODEBASE":
            score += rules.codebase_boost
        elif source == "ROUTER_LOG":
            score += rules.router_log_boost
        elif source == "API_GATEWAY":
            score += rules.api_gateway_boost

        if len(processed) < rules.min_processed_data_length:
            score += rules.processed_data_penalty

        if not claim.id:
            score += rules.id_penalty

        if claim.timestamp is not None:
            age_days = (as_utc(self.clock()) - as_utc(claim.timestamp)).days
            if age_days > rules.old_claim_days:
                score += rules.old_claim_penalty

        return max(0.0, min(1.0, score))
