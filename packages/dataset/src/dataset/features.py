"""
Feature Registry
================
Bijection between feature names and dense integer indices.

Indices are contiguous [0, size) right after recalculate_index(), which
orders features alphabetically. remove_feature() only drops the name → index
entry: the index → name list (and therefore size(), feature_at() and
has_feature()) still reports the feature until the next
recalculate_index(). Always re-index after removing.

File format (one feature per line, indices informational only):

    index:feature_label:description
    23:los:Length of stay

Usage:
    from dataset.features import Features

    fs = Features.from_datasets(train, test)
    fs.index_of('los')       # → 23
    fs.feature_at(23)        # → 'los'
    fs.write('features.txt')
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Set, Union

import numpy as np

from dataset.collection import DataSet
from dataset.instance import SparseInstance

logger = logging.getLogger(__name__)

# Maximum absolute deviation for a feature to still count as constant.
CONSTANT_TOLERANCE = 1e-5


class Features:

    def __init__(self, names: Iterable[str] = ()):
        self._by_index: List[str] = []
        self._index_by_name: Dict[str, int] = {}
        self._descriptions: Dict[str, str] = {}
        names = list(names)
        if names:
            for name in names:
                self.add_feature(name)
            self.recalculate_index()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_list(cls, names: Iterable[str]) -> 'Features':
        return cls(names)

    @classmethod
    def from_datasets(cls, *datasets: DataSet) -> 'Features':
        """Every feature used by any instance of the given datasets."""
        features = cls()
        for ds in datasets:
            for inst in ds:
                for name in inst.features():
                    features.add_feature(name)
        features.recalculate_index()
        return features

    @classmethod
    def per_class(cls, *datasets: DataSet) -> Dict[str, 'Features']:
        """One registry per class label, holding the features seen in that class."""
        by_class: Dict[str, Features] = {}
        for ds in datasets:
            for inst in ds:
                features = by_class.setdefault(inst.class_name, cls())
                for name in inst.features():
                    features.add_feature(name)
        for features in by_class.values():
            features.recalculate_index()
        return by_class

    @classmethod
    def read(cls, path: Union[str, Path]) -> 'Features':
        """
        Read an 'index:label:description' file.
        The index column is ignored; order comes from line order.
        """
        features = cls()
        with open(path) as f:
            for line in f:
                line = line.rstrip('\n')
                if not line:
                    continue
                parts = line.split(':', 2)
                if len(parts) < 2:
                    logger.warning(f"Unexpected feature line: {line}")
                    continue
                features.add_feature(parts[1])
                if len(parts) > 2:
                    features.add_description(parts[1], parts[2])
        return features

    def copy(self) -> 'Features':
        """Re-indexed copy (descriptions included)."""
        other = Features()
        for name in self._by_index:
            other.add_feature(name)
        other._descriptions = dict(self._descriptions)
        other.recalculate_index()
        return other

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_feature(self, name: str) -> None:
        if name not in self._by_index:
            self._by_index.append(name)
            self._index_by_name[name] = len(self._by_index) - 1

    def remove_feature(self, name: str) -> None:
        """Drop the name → index entry. Indices are stale until recalculate_index()."""
        self._index_by_name.pop(name, None)

    def recalculate_index(self) -> None:
        """Rebuild contiguous indices in alphabetical order."""
        self._by_index = sorted(self._index_by_name.keys())
        self._index_by_name = {name: i for i, name in enumerate(self._by_index)}

    def add_description(self, name: str, description: str) -> None:
        self._descriptions[name] = description

    def load_descriptions(self, path: Union[str, Path]) -> None:
        """Load 'feature:description' lines. Malformed lines are skipped."""
        with open(path) as f:
            for line in f:
                line = line.rstrip('\n')
                parts = line.split(':', 1)
                if len(parts) == 2:
                    self.add_description(parts[0], parts[1])
                else:
                    logger.warning(f"Unexpected description format in line: {line}")

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def index_of(self, name: str) -> int:
        return self._index_by_name[name]

    def feature_at(self, index: int) -> str:
        return self._by_index[index]

    def has_feature(self, name: str) -> bool:
        return name in self._by_index

    def description(self, name: str) -> str:
        return self._descriptions.get(name, name)

    def size(self) -> int:
        return len(self._by_index)

    def __len__(self) -> int:
        return len(self._by_index)

    def __iter__(self):
        return iter(list(self._by_index))

    def __contains__(self, name: str) -> bool:
        return self.has_feature(name)

    def as_set(self) -> Set[str]:
        return set(self._index_by_name.keys())

    def as_list(self) -> List[str]:
        return list(self._by_index)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def write(self, path: Union[str, Path]) -> None:
        with open(path, 'w') as f:
            f.write(str(self))

    def create_dataset(self) -> DataSet:
        """One instance per feature, carrying only that feature at 1.0."""
        return DataSet(
            SparseInstance(name, name, {name: 1.0}) for name in self._by_index
        )

    def __str__(self) -> str:
        return ''.join(
            f"{i}:{name}:{self.description(name)}\n"
            for i, name in enumerate(self._by_index)
        )

    def __repr__(self) -> str:
        return f"Features(n={len(self)})"


def remove_constant_features(features: Features, dataset: DataSet) -> Features:
    """
    Registry without the features whose value never varies over the dataset.

    A feature is constant when every row lies within CONSTANT_TOLERANCE of
    the first row's value.
    """
    kept = features.copy()
    if len(dataset) == 0:
        return kept
    matrix = dataset.as_matrix(features)
    deviation = np.abs(matrix - matrix[0])
    constant = np.all(deviation <= CONSTANT_TOLERANCE, axis=0)
    for j in np.flatnonzero(constant):
        name = features.feature_at(int(j))
        logger.warning(f"Constant feature {name} will be removed.")
        kept.remove_feature(name)
    kept.recalculate_index()
    return kept
