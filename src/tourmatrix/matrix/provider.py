"""
Composition root for the matrix layer.

`MatrixProvider` turns a `Problem` plus `MatrixSettings` into the immutable
(DistanceMatrix, CorrelationMatrix) pair that the optimizer queries during a run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from tourmatrix.config.overrides import apply_settings_overrides
from tourmatrix.config.settings import MatrixSettings, Settings, get_settings
from tourmatrix.domain.models import Problem
from tourmatrix.matrix.correlation import CorrelationMatrix
from tourmatrix.matrix.distance import DistanceMatrix, DistanceMatrixBuilder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatrixProvider:
    distance: DistanceMatrix
    correlation: CorrelationMatrix

    @classmethod
    def for_problem(cls, problem: Problem, config: MatrixSettings) -> "MatrixProvider":
        """Build both matrices for `problem`, precomputing distances below the size limit."""
        locations = [node.coord for node in problem.nodes]
        node_count = len(locations)
        precompute = (node_count - 1) < config.precompute_distance_size_limit

        logger.info(
            "Building matrices for %d nodes (precompute=%s, rounded=%s, limit=%d)",
            node_count,
            precompute,
            config.round_distances,
            config.precompute_distance_size_limit,
        )
        distance = DistanceMatrixBuilder(
            locations=locations,
            precompute=precompute,
            rounded=config.round_distances,
        ).build()
        correlation = CorrelationMatrix(distance, exclude_depot=config.exclude_depot_candidates)
        return cls(distance=distance, correlation=correlation)

    @classmethod
    def from_settings(
        cls,
        problem: Problem,
        settings: Settings | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> "MatrixProvider":
        """Build from loaded settings (default: `get_settings()`) plus optional per-run overrides."""
        settings = apply_settings_overrides(settings or get_settings(), overrides)
        return cls.for_problem(problem, settings.matrix)
