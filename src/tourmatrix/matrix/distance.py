"""
Distance matrix with two storage strategies behind one query interface.

- precomputed: every pairwise distance is materialized once into an `n x n` FlatBuffer
  (O(n^2) memory, O(1) lookups).
- lazy: only the coordinates are kept (O(n) memory); each query recomputes the Euclidean distance.

`get_vec` walks cells in row-major order in both modes through `linear_span`, and both modes
compute distances with the same arithmetic, so they return the same read-only sequence.
Lazy mode computes each row segment of the span in one numpy pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from tourmatrix.core.buffer import FlatBuffer
from tourmatrix.core.floats import approx_gt
from tourmatrix.core.geo import Coordinate, euclidean, round_distance

logger = logging.getLogger(__name__)


def linear_span(size: int, row: int, col: int, number: int) -> tuple[int, int]:
    """Return the [start, stop) linear offsets of `number` cells from (row, col) in a square matrix."""
    if not (0 <= row < size and 0 <= col < size):
        raise IndexError(f"cell ({row}, {col}) out of range for {size}x{size} matrix")
    if number < 0:
        raise IndexError(f"number must be >= 0 (got {number})")
    start = row * size + col
    stop = start + number
    if stop > size * size:
        raise IndexError(f"span of {number} from ({row}, {col}) runs past the end of {size}x{size} matrix")
    return start, stop


def _coordinate_arrays(locations: Sequence[Coordinate]) -> tuple[np.ndarray, np.ndarray]:
    n = len(locations)
    lats = np.fromiter((c.lat for c in locations), dtype=np.float64, count=n)
    lngs = np.fromiter((c.lng for c in locations), dtype=np.float64, count=n)
    return lats, lngs


def _row_distances(lats: np.ndarray, lngs: np.ndarray, row: int, lo: int, hi: int, *, rounded: bool) -> np.ndarray:
    """Distances from `row` to columns [lo, hi), bit-identical to `euclidean` / `round_distance`."""
    dx = lngs[lo:hi] - lngs[row]
    dy = lats[lo:hi] - lats[row]
    d = np.sqrt(dx * dx + dy * dy)
    if rounded:
        f = np.floor(d)
        d = np.where(d - f >= 0.5, f + 1.0, f)
    return d


class DistanceMatrix:
    """Read-only distance queries over an ordered list of locations."""

    def __init__(
        self,
        locations: Sequence[Coordinate],
        storage: FlatBuffer,
        *,
        precomputed: bool,
        rounded: bool,
        max_distance: float | None,
    ):
        self._locations = tuple(locations)
        self._storage = storage
        self._precomputed = bool(precomputed)
        self._rounded = bool(rounded)
        self._max_distance = max_distance
        self._lats, self._lngs = _coordinate_arrays(self._locations)

    @property
    def precomputed(self) -> bool:
        return self._precomputed

    @property
    def rounded(self) -> bool:
        return self._rounded

    def __repr__(self) -> str:
        mode = "precomputed" if self._precomputed else "lazy"
        return f"DistanceMatrix(size={self.size()}, mode={mode}, rounded={self._rounded})"

    def _compute(self, row: int, col: int) -> float:
        d = euclidean(self._locations[row], self._locations[col])
        return round_distance(d) if self._rounded else d

    def get(self, row: int, col: int) -> float:
        if self._precomputed:
            return float(self._storage.get(row, col))
        n = self.size()
        if not (0 <= row < n and 0 <= col < n):
            raise IndexError(f"cell ({row}, {col}) out of range for {n}x{n} matrix")
        return self._compute(row, col)

    def get_vec(self, row: int, col: int, number: int) -> np.ndarray:
        """Return `number` distances in row-major order from (row, col), wrapping rows."""
        n = self.size()
        start, stop = linear_span(n, row, col, number)
        if self._precomputed:
            return self._storage.slice(row, col, number)
        out = np.empty(number, dtype=np.float64)
        k = start
        while k < stop:
            r, c = divmod(k, n)
            take = min(n - c, stop - k)
            out[k - start : k - start + take] = _row_distances(
                self._lats, self._lngs, r, c, c + take, rounded=self._rounded
            )
            k += take
        out.flags.writeable = False
        return out

    def size(self) -> int:
        return len(self._locations)

    def max(self) -> float | None:
        """Largest pairwise distance seen during precomputation (None in lazy mode)."""
        return self._max_distance


@dataclass
class DistanceMatrixBuilder:
    """Options for building a `DistanceMatrix`.

    locations: ordered points; row/column `i` refers to `locations[i]`.
    precompute: materialize the full matrix up front instead of computing on demand.
    rounded: round each distance half away from zero before it is stored or returned.
    """

    locations: Sequence[Coordinate] = field(default_factory=list)
    precompute: bool = False
    rounded: bool = False

    def build(self) -> DistanceMatrix:
        locations = tuple(self.locations)
        n = len(locations)
        if not self.precompute:
            logger.debug("Using lazy distance matrix for %d locations", n)
            return DistanceMatrix(
                locations,
                FlatBuffer(0, 0),
                precomputed=False,
                rounded=self.rounded,
                max_distance=None,
            )

        storage = FlatBuffer(n, n)
        lats, lngs = _coordinate_arrays(locations)
        max_distance: float | None = None

        for i in range(n):
            # Full row against every location; mirrored cells come out bit-identical
            # because (a - b)^2 == (b - a)^2.
            row = _row_distances(lats, lngs, i, 0, n, rounded=self.rounded)

            # Diagonal stays at its zero-initialized value.
            storage.write(i, 0, row[:i])
            storage.write(i, i + 1, row[i + 1 :])

            upper = row[i + 1 :]
            if upper.size == 0:
                continue
            candidate = float(upper.max())
            if max_distance is None or approx_gt(candidate, max_distance):
                max_distance = candidate

        logger.debug("Precomputed %dx%d distance matrix (max=%s)", n, n, max_distance)
        return DistanceMatrix(
            locations,
            storage,
            precomputed=True,
            rounded=self.rounded,
            max_distance=max_distance,
        )
