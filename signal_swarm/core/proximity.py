"""
core/proximity.py

Who can hear whom.

A signal carries as far as the radius and no further.
The boundary is inclusive: at exactly the radius, you are heard.

Inspired by:
- Radio range
- Pheromone reach
"""

from __future__ import annotations
import numpy as np


def distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two 2D points."""
    delta = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.hypot(delta[0], delta[1]))


def is_close(a: np.ndarray, b: np.ndarray, radius: float) -> bool:
    """
    True iff distance(a, b) <= radius.

    Compares squared distances so the check is symmetric and exact
    for co-located points (radius 0 matches only identical positions).
    """
    if radius < 0:
        return False
    delta = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    squared = float(delta[0] * delta[0] + delta[1] * delta[1])
    return squared <= float(radius) * float(radius)
