"""
Regression Tree
===============
Owns everything the nodes share: parameters, the feature registry, the
candidate thresholds per feature and one seeded random source. fit()
builds those, grows the root and keeps it; the grown tree is immutable.

Usage:
    from regtree import RegressionTree

    tree = RegressionTree(min_size=2, max_depth=4).fit(train)
    tree.predict(instance)
    tree.test(test_set)          # stores predictions under 'result'
    print(tree)                  # nested text view
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np

from dataset.collection import DataSet
from dataset.features import Features
from dataset.instance import RESULT_KEY, SparseInstance
from regtree.config import TreeParameters
from regtree.node import SplitNode, TrainingContext, train
from regtree.splits import candidate_splits

logger = logging.getLogger(__name__)


class RegressionTree:
    """
    CART-style regression tree over sparse instances.

    Parameters
    ----------
    params : TreeParameters, optional
        Growth parameters. If None, built from **options over DEFAULTS.
    features : Features, optional
        Registry of candidate split features. None = every feature seen
        in the training set.
    splits : dict, optional
        Precomputed {feature: thresholds}. None = candidate_splits() over
        the training set.
    """

    def __init__(
        self,
        params: Optional[TreeParameters] = None,
        features: Optional[Features] = None,
        splits: Optional[Dict[str, List[float]]] = None,
        **options,
    ):
        if params is not None and options:
            raise TypeError("Pass either params or keyword options, not both")
        self.params = params if params is not None else TreeParameters.from_dict(options)
        self.features = features
        self.splits = splits
        self.root: Optional[SplitNode] = None

    def fit(self, dataset: DataSet) -> 'RegressionTree':
        features = self.features if self.features is not None else Features.from_datasets(dataset)
        splits = (self.splits if self.splits is not None
                  else candidate_splits(dataset, features, self.params.max_splits))
        context = TrainingContext(
            params=self.params,
            features=features,
            splits=splits,
            rng=np.random.default_rng(self.params.random_seed),
        )
        self.root = train(context, dataset)
        logger.info(f"Trained regression tree on {len(dataset)} rows, "
                    f"{features.size()} features: {self.n_nodes} nodes, "
                    f"{len(self.leaves())} leaves, depth {self.depth()}")
        return self

    def _fitted_root(self) -> SplitNode:
        if self.root is None:
            raise RuntimeError("RegressionTree is not trained; call fit() first")
        return self.root

    def predict(self, instance: SparseInstance) -> float:
        return self._fitted_root().predict(instance)

    def predict_all(self, dataset: DataSet) -> np.ndarray:
        root = self._fitted_root()
        return np.array([root.predict(inst) for inst in dataset], dtype=np.float64)

    def test(self, dataset: DataSet, key: str = RESULT_KEY) -> DataSet:
        """Store each instance's prediction in its results under key."""
        root = self._fitted_root()
        for inst in dataset:
            inst.put_result(key, root.predict(inst))
        return dataset

    def leaves(self) -> List[SplitNode]:
        return self._fitted_root().leaves()

    @property
    def n_nodes(self) -> int:
        return sum(1 for _ in self._fitted_root().iter_nodes())

    def depth(self) -> int:
        return max(node.depth for node in self._fitted_root().iter_nodes())

    def to_dict(self) -> Dict[str, Any]:
        return self._fitted_root().to_dict()

    def __str__(self) -> str:
        if self.root is None:
            return "RegressionTree(untrained)"
        return self.root.format()
