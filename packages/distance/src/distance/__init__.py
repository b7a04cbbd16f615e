"""
Distances between instances and sequences.

Point metrics (Euclidean, Manhattan) compare two sparse instances.
DynamicTimeWarping compares two sequences of instances, delegating the
per-point cost to any injected point metric.

Pairwise helpers turn a metric into a full distance matrix or a list of
pair rows.
"""

from distance.metrics import EuclideanDistance, ManhattanDistance, PointCost
from distance.dtw import DynamicTimeWarping
from distance.pairwise import compute_pairwise_rows, pairwise_distances

__all__ = [
    'PointCost',
    'EuclideanDistance',
    'ManhattanDistance',
    'DynamicTimeWarping',
    'pairwise_distances',
    'compute_pairwise_rows',
]
