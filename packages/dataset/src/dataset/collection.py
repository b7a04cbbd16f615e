"""
DataSet: ordered collection of instances.

Supports iteration, size, index lookup and materialisation to a dense
matrix in a given feature order.

Usage:
    ds = DataSet([inst_a, inst_b])
    X = ds.as_matrix(features)   # (n_instances, features.size())
    y = ds.outcomes()
"""

from typing import Iterable, Iterator, List, Optional

import numpy as np
import polars as pl

from dataset.instance import SparseInstance


class DataSet:

    def __init__(self, instances: Optional[Iterable[SparseInstance]] = None):
        self._instances: List[SparseInstance] = list(instances or [])

    def add(self, instance: SparseInstance) -> None:
        self._instances.append(instance)

    def extend(self, instances: Iterable[SparseInstance]) -> None:
        self._instances.extend(instances)

    def size(self) -> int:
        return len(self._instances)

    def __len__(self) -> int:
        return len(self._instances)

    def __iter__(self) -> Iterator[SparseInstance]:
        return iter(self._instances)

    def __getitem__(self, index: int) -> SparseInstance:
        return self._instances[index]

    def get(self, index: int) -> SparseInstance:
        return self._instances[index]

    def outcomes(self) -> np.ndarray:
        """Outcome per instance, in dataset order."""
        return np.array([inst.outcome for inst in self._instances], dtype=np.float64)

    def as_matrix(self, features) -> np.ndarray:
        """
        Dense (n_instances, n_features) matrix.

        Column j holds the value of features.feature_at(j); absent values are 0.0.
        """
        names = features.as_list()
        matrix = np.zeros((len(self._instances), len(names)), dtype=np.float64)
        for i, inst in enumerate(self._instances):
            for j, name in enumerate(names):
                matrix[i, j] = inst.get(name)
        return matrix

    def to_frame(self, features) -> pl.DataFrame:
        """
        Polars frame with id, class_name, outcome and one column per feature.
        """
        matrix = self.as_matrix(features)
        columns = {
            'id': [inst.id for inst in self._instances],
            'class_name': [inst.class_name for inst in self._instances],
            'outcome': self.outcomes(),
        }
        for j, name in enumerate(features.as_list()):
            columns[name] = matrix[:, j]
        return pl.DataFrame(columns)

    def subset(self, indices: Iterable[int]) -> 'DataSet':
        return DataSet(self._instances[i] for i in indices)

    def __repr__(self) -> str:
        return f"DataSet(n={len(self)})"
