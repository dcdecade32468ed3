"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SourceType(StrEnum):
    """Origin category of a claim.

    Claims keep their source as a plain string so adapters may emit tags that
    are not listed here; such sources fall back to default weights.
    """

    CODEBASE = "CODEBASE"
    ROUTER_LOG = "ROUTER_LOG"
    API_GATEWAY = "API_GATEWAY"
    CI_CD = "CI_CD"
    TELEMETRY = "TELEMETRY"
    NETWORK = "NETWORK"

    # Produced by conflict resolution, never by adapters:
    CONFLICT_RESOLVED = "CONFLICT_RESOLVED"


class DependencyType(StrEnum):
    RUNTIME = "RUNTIME"
    BUILD = "BUILD"
    API = "API"
    DATABASE = "DATABASE"
    NETWORK = "NETWORK"
    OTHER = "OTHER"
