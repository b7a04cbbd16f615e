"""
Dynamic Time Warping
====================
Minimal cumulative point cost of aligning two sequences of possibly
different length through a monotonic index mapping.

Table (n+1) × (m+1): cell (0, 0) = 0, the rest of row 0 and column 0
= +inf, so every path starts at the true origin. For i, j >= 1:

    table[i, j] = cost(s[i-1], t[j-1])
                  + min(table[i-1, j],      # insertion
                        table[i, j-1],      # deletion
                        table[i-1, j-1])    # match

distance = table[n, m]. O(n·m) time and space, no banding.

Usage:
    from distance import DynamicTimeWarping, ManhattanDistance

    dtw = DynamicTimeWarping(ManhattanDistance(['f']))
    dtw.distance(seq_a, seq_b)
"""

import logging
from typing import List, Tuple

import numpy as np

from dataset.instance import Sequence
from distance.metrics import PointCost

logger = logging.getLogger(__name__)


class DynamicTimeWarping:
    """
    DTW distance between Sequences.

    Parameters
    ----------
    cost : PointCost
        Per-point cost, any callable (SparseInstance, SparseInstance) → float.
        distance(A, B) == distance(B, A) holds only if cost is symmetric.
    """

    def __init__(self, cost: PointCost):
        self.cost = cost

    def cost_table(self, s: Sequence, t: Sequence) -> np.ndarray:
        """Accumulated cost table of shape (len(s) + 1, len(t) + 1)."""
        n = len(s)
        m = len(t)
        if n == 0 or m == 0:
            raise ValueError(
                f"DTW needs two non-empty sequences, got lengths {n} and {m}"
            )

        table = np.full((n + 1, m + 1), np.inf)
        table[0, 0] = 0.0

        for i in range(1, n + 1):
            a = s[i - 1]
            for j in range(1, m + 1):
                c = self.cost(a, t[j - 1])
                table[i, j] = c + min(table[i - 1, j],
                                      table[i, j - 1],
                                      table[i - 1, j - 1])
        return table

    def distance(self, s: Sequence, t: Sequence) -> float:
        table = self.cost_table(s, t)
        result = float(table[-1, -1])
        logger.debug(f"DTW {s.id!r} vs {t.id!r}: {len(s)}x{len(t)} → {result}")
        return result

    __call__ = distance

    def warping_path(self, s: Sequence, t: Sequence) -> List[Tuple[int, int]]:
        """
        Optimal alignment as (index in s, index in t) pairs, start to end.
        Ties prefer the diagonal step.
        """
        table = self.cost_table(s, t)
        i, j = len(s), len(t)
        path = [(i - 1, j - 1)]
        while (i, j) != (1, 1):
            steps = [
                (table[i - 1, j - 1], i - 1, j - 1),
                (table[i - 1, j], i - 1, j),
                (table[i, j - 1], i, j - 1),
            ]
            _, i, j = min(steps, key=lambda step: step[0])
            path.append((i - 1, j - 1))
        path.reverse()
        return path
