"""
Per-node candidate lists ("correlation matrix").

Row `i` holds the `width` nearest other nodes to `i`, ordered by ascending distance.
Local-search moves only need to look at these instead of all `n` nodes.
"""

from __future__ import annotations

import logging

import numpy as np

from tourmatrix.core.buffer import FlatBuffer
from tourmatrix.matrix.distance import DistanceMatrix

logger = logging.getLogger(__name__)

CORRELATION_LIMIT = 100


class CorrelationMatrix:
    """Fixed-width nearest-neighbor index derived from a `DistanceMatrix`.

    Ties between equal distances are broken by ascending node index (stable sort over
    column order), so the lists are reproducible.

    With `exclude_depot=True` node 0 is never proposed as a candidate for any other node.
    """

    def __init__(self, distance_matrix: DistanceMatrix, *, exclude_depot: bool = False):
        size = distance_matrix.size()
        if size < 2:
            raise ValueError(f"CorrelationMatrix needs at least 2 locations (got {size})")
        width = min(CORRELATION_LIMIT, size - 2)
        storage = FlatBuffer(size, width, dtype=np.int64)

        columns = np.arange(size, dtype=np.int64)
        for i in range(size):
            distances = distance_matrix.get_vec(i, 0, size)
            keep = columns != i
            if exclude_depot:
                keep &= columns != 0
            candidates = columns[keep]
            order = np.argsort(distances[keep], kind="stable")
            storage.write(i, 0, candidates[order[:width]])

        self._storage = storage
        self._width = width
        self._exclude_depot = bool(exclude_depot)
        logger.debug("Built %dx%d correlation matrix (exclude_depot=%s)", size, width, exclude_depot)

    @property
    def width(self) -> int:
        return self._width

    @property
    def size(self) -> int:
        return self._storage.rows

    @property
    def exclude_depot(self) -> bool:
        return self._exclude_depot

    def get(self, index: int) -> np.ndarray:
        """Full candidate list for `index` (read-only, length `width`)."""
        return self._storage.slice(index, 0, self._width)

    def top_slice(self, index: int, number: int) -> np.ndarray:
        """First `number` candidates for `index`."""
        if not (0 <= number <= self._width):
            raise ValueError(f"number must be in [0, {self._width}] (got {number})")
        return self._storage.slice(index, 0, number)
