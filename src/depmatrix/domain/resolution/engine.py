"""Orchestrator for the dependency pipeline.

The pipeline composes the four stages (processing, conflict resolution,
inference, graph building) and packages their outputs into one
``DependencyMatrix``. It holds no state between runs.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from depmatrix.domain.clock import Clock, utcnow

from .conflicts import ConflictResolutionEngine
from .graph import CyclicDependencyError, DependencyGraphBuilder
from .inference import InferenceEngine

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from depmatrix.domain.model import Claim, Dependency

    from .contracts import InferenceReport, ProcessingReport
    from .graph import DependencyGraph, GraphStatistics
    from .processing import ClaimProcessingEngine

log = getLogger(__name__)

MATRIX_VERSION = "1.0"


def format_duration(milliseconds: int) -> str:
    """Render a duration as ``512ms``, ``1.5s`` or ``2m 5s``."""

    if milliseconds < 1000:  # noqa: PLR2004
        return f"{milliseconds}ms"
    if milliseconds < 60_000:  # noqa: PLR2004
        return f"{milliseconds / 1000:.1f}s"
    minutes, remainder = divmod(milliseconds, 60_000)
    return f"{minutes}m {remainder // 1000}s"


@dataclass(frozen=True, slots=True, kw_only=True)
class MatrixSummary:
    total_applications: int
    total_dependencies: int
    processing_time: str
    timestamp: datetime
    average_dependencies_per_app: float

    def as_dict(self) -> dict[str, object]:
        return {
            "totalApplications": self.total_applications,
            "totalDependencies": self.total_dependencies,
            "processingTime": self.processing_time,
            "timestamp": self.timestamp.isoformat(),
            "averageDependenciesPerApp": self.average_dependencies_per_app,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class DependencyMatrix:
    """Everything one pipeline run produced.

    ``topological_order`` is ``None`` when the graph has cycles; the cycles
    themselves are listed in ``cycles``.
    """

    dependencies: tuple[Dependency, ...]
    graph: DependencyGraph
    statistics: GraphStatistics
    cycles: tuple[tuple[str, ...], ...]
    topological_order: tuple[str, ...] | None
    processing: ProcessingReport
    inference: InferenceReport
    processing_time_ms: int
    timestamp: datetime
    version: str = MATRIX_VERSION

    @property
    def application_count(self) -> int:
        return self.statistics.node_count

    @property
    def dependency_count(self) -> int:
        return len(self.dependencies)

    @property
    def processing_time_formatted(self) -> str:
        return format_duration(self.processing_time_ms)

    def summary(self) -> MatrixSummary:
        apps = self.application_count
        return MatrixSummary(
            total_applications=apps,
            total_dependencies=self.dependency_count,
            processing_time=self.processing_time_formatted,
            timestamp=self.timestamp,
            average_dependencies_per_app=self.dependency_count / apps if apps else 0.0,
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "version": self.version,
            "timestamp": self.timestamp.isoformat(),
            "applicationCount": self.application_count,
            "dependencyCount": self.dependency_count,
            "processingTimeMs": self.processing_time_ms,
            "summary": self.summary().as_dict(),
            "dependencies": [
                {
                    "source": dependency.source_app_id,
                    "target": dependency.target_app_id,
                    "type": str(dependency.type),
                    "confidence": dependency.confidence,
                }
                for dependency in self.dependencies
            ],
            "graph": self.graph.as_dict(),
            "statistics": self.statistics.as_dict(),
            "cycles": [list(cycle) for cycle in self.cycles],
            "topologicalOrder": (
                list(self.topological_order) if self.topological_order is not None else None
            ),
            "processing": {
                "successCount": self.processing.success_count,
                "failureCount": self.processing.failure_count,
                "errors": [
                    {
                        "claimId": failure.claim_id,
                        "stage": str(failure.stage),
                        "message": failure.message,
                    }
                    for failure in self.processing.errors
                ],
                "warnings": list(self.processing.warnings),
            },
            "inference": {
                "skippedKeys": list(self.inference.skipped_keys),
                "lowConfidenceKeys": list(self.inference.low_confidence_keys),
            },
        }

    def __str__(self) -> str:
        return (
            f"DependencyMatrix(apps={self.application_count}, "
            f"deps={self.dependency_count}, time={self.processing_time_formatted})"
        )


@dataclass(slots=True)
class DependencyPipeline:
    """Run claims through processing, resolution, inference and graph building."""

    processing: ClaimProcessingEngine
    resolution: ConflictResolutionEngine = field(default_factory=ConflictResolutionEngine)
    inference: InferenceEngine = field(default_factory=InferenceEngine)
    graph_builder: DependencyGraphBuilder = field(default_factory=DependencyGraphBuilder)
    clock: Clock = utcnow
    timer: Callable[[], float] = time.perf_counter

    def run(self, raw_claims: Iterable[Claim]) -> DependencyMatrix:
        started = self.timer()

        processing_report = self.processing.process_batch(raw_claims)
        resolved = self.resolution.resolve_claims(processing_report.claims)
        inference_report = self.inference.infer_batch(resolved)
        graph = self.graph_builder.build_graph(inference_report.dependencies)

        statistics = graph.get_statistics()
        cycles = graph.detect_cycles()
        topological_order: tuple[str, ...] | None
        try:
            topological_order = tuple(graph.get_topological_order())
        except CyclicDependencyError as exc:
            log.warning("Dependency graph is cyclic, skipping topological order: %s", exc)
            topological_order = None

        elapsed_ms = int((self.timer() - started) * 1000)
        matrix = DependencyMatrix(
            dependencies=inference_report.dependencies,
            graph=graph,
            statistics=statistics,
            cycles=tuple(tuple(cycle) for cycle in cycles),
            topological_order=topological_order,
            processing=processing_report,
            inference=inference_report,
            processing_time_ms=elapsed_ms,
            timestamp=self.clock(),
        )
        log.info("Built %s", matrix)
        return matrix
