"""
regtree — CART-style regression trees over sparse instances.

Each node picks the (feature, threshold) split minimising the total squared
error of its two children; leaves predict the mean outcome of their rows.
With k < 1 every node considers a random subset of features, drawn from one
seeded random source per tree.

Usage:
    from regtree import RegressionTree

    tree = RegressionTree(min_size=2, max_depth=5, k=0.7, random_seed=1)
    tree.fit(train)
    tree.predict(instance)
"""

from regtree.config import DEFAULTS, TreeParameters, load_parameters
from regtree.splits import candidate_splits
from regtree.node import SplitNode, TrainingContext, train
from regtree.tree import RegressionTree

__all__ = [
    'DEFAULTS',
    'TreeParameters',
    'load_parameters',
    'candidate_splits',
    'SplitNode',
    'TrainingContext',
    'train',
    'RegressionTree',
]
