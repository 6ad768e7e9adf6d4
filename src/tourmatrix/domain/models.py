"""
Domain models (Pydantic).

These types are the input contract of the matrix layer: an ordered list of nodes,
each with a planar position. By convention node 0 is the depot.
"""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, Field

from tourmatrix.core.geo import Coordinate


class Node(BaseModel):
    """One location of a routing problem."""

    id: int | str
    lat: float
    lng: float

    @property
    def coord(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


class Problem(BaseModel):
    """An ordered set of nodes; matrix row/column `i` is `nodes[i]`."""

    name: str = ""
    nodes: list[Node] = Field(default_factory=list)

    @classmethod
    def from_points(cls, points: Iterable[tuple[float, float]], *, name: str = "") -> "Problem":
        """Build a problem from `(lat, lng)` pairs; node ids are positions 0..n-1."""
        nodes = [Node(id=i, lat=lat, lng=lng) for i, (lat, lng) in enumerate(points)]
        return cls(name=name, nodes=nodes)
