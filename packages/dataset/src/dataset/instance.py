"""
Instances and sequences.

A SparseInstance is a labelled sparse numeric vector (feature name → value)
with a scalar outcome. Absent features read as 0.0.

A Sequence is an immutable ordered run of SparseInstance time points,
compared as a whole by sequence distances such as DTW.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

# Results key under which model predictions are stored on an instance.
RESULT_KEY = 'result'


class SparseInstance:
    """
    Sparse numeric vector with outcome and class label.

    Parameters
    ----------
    id : str
        Instance identifier.
    class_name : str
        Class label (categorical use).
    values : dict, optional
        Feature name → value. Zeros may be omitted.
    outcome : float
        Regression target.
    """

    def __init__(
        self,
        id: str = "",
        class_name: str = "",
        values: Optional[Dict[str, float]] = None,
        outcome: float = 0.0,
    ):
        self.id = id
        self.class_name = class_name
        self.values: Dict[str, float] = {
            k: float(v) for k, v in (values or {}).items()
        }
        self.outcome = float(outcome)
        self._results: Dict[str, float] = {}

    def get(self, feature: str) -> float:
        return self.values.get(feature, 0.0)

    def put(self, feature: str, value: float) -> None:
        self.values[feature] = float(value)

    def features(self) -> List[str]:
        """Names of the stored (non-default) features."""
        return list(self.values.keys())

    def put_result(self, name: str, value: float) -> None:
        """Store a model output on this instance, e.g. 'result'."""
        self._results[name] = float(value)

    def get_result(self, name: str) -> float:
        return self._results[name]

    def has_result(self, name: str) -> bool:
        return name in self._results

    def scaled(self, weights: Dict[str, float]) -> 'SparseInstance':
        """
        Copy with each feature multiplied by its weight.
        Features without a weight keep their value.
        """
        values = {k: v * weights.get(k, 1.0) for k, v in self.values.items()}
        return SparseInstance(self.id, self.class_name, values, self.outcome)

    def copy(self) -> 'SparseInstance':
        return SparseInstance(self.id, self.class_name, dict(self.values), self.outcome)

    def __repr__(self) -> str:
        return (f"SparseInstance(id={self.id!r}, class_name={self.class_name!r}, "
                f"values={self.values!r}, outcome={self.outcome!r})")


class Sequence:
    """
    Ordered, immutable run of time points.

    Usage:
        seq = Sequence([SparseInstance(values={'f': 1.0}),
                        SparseInstance(values={'f': 3.0})], id='s1')
        len(seq)        # → 2
        seq.points()    # → DataSet of the two time points
    """

    def __init__(
        self,
        points: Iterable[SparseInstance],
        id: str = "",
        class_name: str = "",
        outcome: float = 0.0,
    ):
        self._points: Tuple[SparseInstance, ...] = tuple(points)
        self.id = id
        self.class_name = class_name
        self.outcome = float(outcome)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[SparseInstance]:
        return iter(self._points)

    def __getitem__(self, index: int) -> SparseInstance:
        return self._points[index]

    def points(self):
        """Time points as a DataSet."""
        from dataset.collection import DataSet
        return DataSet(self._points)

    def features(self) -> List[str]:
        """Union of the features used by any time point, in first-seen order."""
        seen: Dict[str, None] = {}
        for point in self._points:
            for name in point.features():
                seen.setdefault(name, None)
        return list(seen)

    def __repr__(self) -> str:
        return f"Sequence(id={self.id!r}, length={len(self)})"
