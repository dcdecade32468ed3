"""Pluggable claim scoring strategies."""

from __future__ import annotations

from .base import ScoringError, ScoringRuleEngine
from .default import DefaultScoringRuleEngine
from .dynamic import DynamicRuleEngine
from .rules import RuleConfig, RuleConfigError, RuleStore, parse_rule_assignments

__all__ = [
    "DefaultScoringRuleEngine",
    "DynamicRuleEngine",
    "RuleConfig",
    "RuleConfigError",
    "RuleStore",
    "ScoringError",
    "ScoringRuleEngine",
    "parse_rule_assignments",
]
