"""
Pairwise distances over a collection.

N items → C(N,2) distance evaluations. The matrix is filled on the upper
triangle and mirrored, so it is symmetric even for an asymmetric metric
(the (i, j) evaluation with i < j is used for both cells). The diagonal
is 0.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence as Seq

import numpy as np


def pairwise_distances(
    items: Seq[Any],
    metric: Callable[[Any, Any], float],
) -> np.ndarray:
    """
    Symmetric (n, n) distance matrix.

    Args:
        items: Sequences or instances, anything the metric accepts.
        metric: Distance callable, e.g. a DynamicTimeWarping.

    Returns:
        np.ndarray of shape (n, n), zero diagonal.
    """
    n = len(items)
    matrix = np.zeros((n, n), dtype=np.float64)
    for i in range(n):
        for j in range(i + 1, n):
            d = float(metric(items[i], items[j]))
            matrix[i, j] = d
            matrix[j, i] = d
    return matrix


def compute_pairwise_rows(
    items: Seq[Any],
    metric: Callable[[Any, Any], float],
    ids: Optional[List[str]] = None,
) -> List[Dict[str, Any]]:
    """
    One row per unordered pair: {'id_a', 'id_b', 'distance'}.

    ids default to each item's .id attribute.
    """
    if ids is None:
        ids = [getattr(item, 'id', str(i)) for i, item in enumerate(items)]

    rows = []
    n = len(items)
    for i in range(n):
        for j in range(i + 1, n):
            rows.append({
                'id_a': ids[i],
                'id_b': ids[j],
                'distance': float(metric(items[i], items[j])),
            })
    return rows
