"""Pipeline stages turning raw claims into a dependency graph."""

from __future__ import annotations

from .conflicts import ConflictResolutionEngine
from .contracts import (
    ClaimFailure,
    InferenceReport,
    ProcessingReport,
    ProcessingStage,
)
from .engine import DependencyMatrix, DependencyPipeline, MatrixSummary, format_duration
from .graph import (
    CyclicDependencyError,
    DependencyGraph,
    DependencyGraphBuilder,
    GraphEdge,
    GraphStatistics,
    build_graph,
)
from .inference import InferenceEngine
from .processing import ClaimProcessingEngine

__all__ = [
    "ClaimFailure",
    "ClaimProcessingEngine",
    "ConflictResolutionEngine",
    "CyclicDependencyError",
    "DependencyGraph",
    "DependencyGraphBuilder",
    "DependencyMatrix",
    "DependencyPipeline",
    "GraphEdge",
    "GraphStatistics",
    "InferenceEngine",
    "InferenceReport",
    "MatrixSummary",
    "ProcessingReport",
    "ProcessingStage",
    "build_graph",
    "format_duration",
]
