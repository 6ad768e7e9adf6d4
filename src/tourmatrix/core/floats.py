"""
Tolerance-aware float comparison.

Used where accumulated floating-point noise must not count as a real change
(e.g., advancing a running maximum).
"""

from __future__ import annotations

FLOAT_EPSILON = 1e-9


def approx_gt(a: float, b: float, *, eps: float = FLOAT_EPSILON) -> bool:
    """Return True only if `a` exceeds `b` by more than `eps`."""
    return float(a) - float(b) > eps
