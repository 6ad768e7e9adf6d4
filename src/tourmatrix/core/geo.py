from __future__ import annotations
from dataclasses import dataclass
from math import floor, sqrt

"""
Planar geometry helpers.

Distances are plain Euclidean distances over (lng, lat) treated as planar
coordinates. Callers that need real-world metres should project first.
"""


@dataclass(frozen=True)
class Coordinate:
    """A (latitude, longitude) pair; treated as planar (y, x)."""

    lat: float
    lng: float


def euclidean(a: Coordinate, b: Coordinate) -> float:
    """Planar Euclidean distance between two coordinates."""
    dx = b.lng - a.lng
    dy = b.lat - a.lat
    return sqrt(dx * dx + dy * dy)


def round_distance(d: float) -> float:
    """Round a non-negative distance half away from zero (2.5 -> 3.0)."""
    # Python's round() is half-to-even. `d + 0.5` can itself round up (0.49999999999999994, 2**52 + 1),
    # so compare the exact fractional part instead.
    r = float(floor(d))
    return r + 1.0 if d - r >= 0.5 else r
