"""
Point metrics between two sparse instances.

Used directly, or injected into DynamicTimeWarping as the per-point cost.
Both metrics compare the union of the two instances' features (absent
= 0.0) unless an explicit feature list is given.

Feature weighting is done by pre-scaling values (SparseInstance.scaled),
not by the metrics.
"""

from typing import List, Optional, Protocol

import numpy as np

from dataset.instance import SparseInstance


class PointCost(Protocol):
    """Anything that maps two point observations to a non-negative cost."""

    def __call__(self, a: SparseInstance, b: SparseInstance) -> float:
        ...


def _aligned(
    a: SparseInstance,
    b: SparseInstance,
    features: Optional[List[str]],
):
    if features is None:
        names = list(dict.fromkeys(a.features() + b.features()))
    else:
        names = features
    va = np.array([a.get(name) for name in names], dtype=np.float64)
    vb = np.array([b.get(name) for name in names], dtype=np.float64)
    return va, vb


class EuclideanDistance:
    """sqrt(sum((a_f - b_f)^2)) over the compared features."""

    def __init__(self, features: Optional[List[str]] = None):
        self.features = features

    def __call__(self, a: SparseInstance, b: SparseInstance) -> float:
        va, vb = _aligned(a, b, self.features)
        return float(np.sqrt(np.sum((va - vb) ** 2)))

    distance = __call__


class ManhattanDistance:
    """sum(|a_f - b_f|) over the compared features."""

    def __init__(self, features: Optional[List[str]] = None):
        self.features = features

    def __call__(self, a: SparseInstance, b: SparseInstance) -> float:
        va, vb = _aligned(a, b, self.features)
        return float(np.sum(np.abs(va - vb)))

    distance = __call__
