"""
Candidate split thresholds per feature.

Computed once per tree from the observed value distribution and handed to
every node; nodes never derive thresholds themselves.

For a feature, the candidates are its sorted distinct values (absent
= 0.0) without the minimum, since `x >= min` keeps every row on one side.
When more than max_splits remain, max_splits of them are taken at evenly
spaced positions (quantiles of the distinct values).
"""

from typing import Dict, List

import numpy as np

from dataset.collection import DataSet
from dataset.features import Features


def thresholds_for_values(values: np.ndarray, max_splits: int) -> List[float]:
    distinct = np.unique(np.asarray(values, dtype=np.float64))
    candidates = distinct[1:]
    if len(candidates) > max_splits:
        positions = np.linspace(0, len(candidates) - 1, max_splits)
        candidates = candidates[np.unique(np.round(positions).astype(int))]
    return [float(v) for v in candidates]


def candidate_splits(
    dataset: DataSet,
    features: Features,
    max_splits: int = 64,
) -> Dict[str, List[float]]:
    """
    Candidate thresholds for every registered feature.

    Returns:
        {feature_name: ascending list of thresholds}. Features with a single
        observed value map to an empty list.
    """
    matrix = dataset.as_matrix(features)
    return {
        name: thresholds_for_values(matrix[:, j], max_splits)
        for j, name in enumerate(features.as_list())
    }
