"""
Split nodes of a regression tree.

train() grows a node over a training subset, depth-first:

    1. value = mean outcome of the subset
    2. leaf if depth >= max_depth or len(subset) <= min_size
    3. candidate features: all, or each with probability k (k < 1)
    4. for every candidate (feature, threshold): split into >= / < groups,
       total squared error against each group's mean; keep the strict
       minimum among splits leaving more than min_size rows on both sides
    5. no eligible split → leaf
    6. otherwise left child = rows >= threshold, right child = rows
       < threshold, both at depth + 1, left grown first

"left" holds the larger values. Prediction uses the same >= test.

Nodes are frozen once built. Shared state (parameters, registry, candidate
thresholds, random source) lives in one TrainingContext passed down the
recursion.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np

from dataset.collection import DataSet
from dataset.features import Features
from dataset.instance import SparseInstance
from regtree.config import TreeParameters

logger = logging.getLogger(__name__)


@dataclass
class TrainingContext:
    """State shared by every node of one tree during growth."""
    params: TreeParameters
    features: Features
    splits: Dict[str, List[float]]
    rng: np.random.Generator

    def splits_for(self, feature: str) -> List[float]:
        return self.splits.get(feature, [])

    def select_features(self) -> List[str]:
        """
        Features considered at one node. With k < 1 each registered feature
        is kept independently with probability k, drawn in registry order.
        """
        k = self.params.k
        if k >= 1.0:
            return self.features.as_list()
        sampled = Features()
        for f in range(self.features.size()):
            if self.rng.random() < k:
                sampled.add_feature(self.features.feature_at(f))
        sampled.recalculate_index()
        return sampled.as_list()


@dataclass(frozen=True)
class SplitNode:
    depth: int
    train_set: DataSet = field(repr=False, compare=False)
    value: float
    split_feature: Optional[str] = None
    split_value: Optional[float] = None
    left: Optional['SplitNode'] = None
    right: Optional['SplitNode'] = None

    @property
    def is_terminal(self) -> bool:
        return self.left is None and self.right is None

    @property
    def size(self) -> int:
        return len(self.train_set)

    def leaf_for(self, instance: SparseInstance) -> 'SplitNode':
        node = self
        while not node.is_terminal:
            if instance.get(node.split_feature) >= node.split_value:
                node = node.left
            else:
                node = node.right
        return node

    def predict(self, instance: SparseInstance) -> float:
        return self.leaf_for(instance).value

    def iter_nodes(self) -> Iterator['SplitNode']:
        """Pre-order: self, left subtree, right subtree."""
        yield self
        if not self.is_terminal:
            yield from self.left.iter_nodes()
            yield from self.right.iter_nodes()

    def leaves(self) -> List['SplitNode']:
        return [node for node in self.iter_nodes() if node.is_terminal]

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            'value': self.value,
            'num': self.size,
            'depth': self.depth,
        }
        if not self.is_terminal:
            out['split_on'] = self.split_feature
            out['split_value'] = self.split_value
            out['left'] = self.left.to_dict()
            out['right'] = self.right.to_dict()
        return out

    def format(self) -> str:
        """Nested text view; each level indented two spaces deeper."""
        text = f"{{'value': {self.value}, 'num': {self.size}"
        if self.is_terminal:
            return text + "}"
        text += f", 'split_on': {self.split_feature!r}, 'split_value': {self.split_value}"
        text += ",\n" + _indent("'left': " + self.left.format())
        text += ",\n" + _indent("'right': " + self.right.format())
        return text + "}"

    def __str__(self) -> str:
        return self.format()


def _indent(text: str) -> str:
    return '\n'.join('  ' + line for line in text.split('\n'))


def pick_split(
    train_set: DataSet,
    features: List[str],
    context: TrainingContext,
    min_size: int,
) -> Optional[Tuple[str, float, float]]:
    """
    Best (feature, threshold, squared_error), or None if no candidate split
    leaves more than min_size rows on both sides.

    Ties keep the first candidate in feature order, then threshold order.
    """
    y = train_set.outcomes()
    n = len(y)
    best: Optional[Tuple[str, float, float]] = None
    min_error = np.inf

    for feature in features:
        x = np.array([inst.get(feature) for inst in train_set], dtype=np.float64)
        for sv in context.splits_for(feature):
            ge = x >= sv
            ge_n = int(ge.sum())
            lt_n = n - ge_n
            if ge_n <= min_size or lt_n <= min_size:
                continue
            y_ge = y[ge]
            y_lt = y[~ge]
            error = float(np.sum((y_ge - y_ge.mean()) ** 2)
                          + np.sum((y_lt - y_lt.mean()) ** 2))
            if error < min_error:
                min_error = error
                best = (feature, sv, error)
    return best


def train(context: TrainingContext, train_set: DataSet, depth: int = 0) -> SplitNode:
    """Grow the subtree for train_set at the given depth."""
    if len(train_set) == 0:
        raise ValueError(f"Cannot grow a node over an empty training set (depth {depth})")

    value = float(np.mean(train_set.outcomes()))
    params = context.params
    if depth >= params.max_depth or len(train_set) <= params.min_size:
        return SplitNode(depth, train_set, value)

    best = pick_split(train_set, context.select_features(), context, params.min_size)
    if best is None:
        logger.debug(f"depth {depth}: no eligible split for {len(train_set)} rows")
        return SplitNode(depth, train_set, value)

    feature, sv, error = best
    logger.debug(f"depth {depth}: split {len(train_set)} rows on {feature} >= {sv} "
                 f"(squared error {error:.6g})")

    ge_rows = DataSet()
    lt_rows = DataSet()
    for inst in train_set:
        if inst.get(feature) >= sv:
            ge_rows.add(inst)
        else:
            lt_rows.add(inst)

    # TODO: left and right share no state once partitioned; grow them in
    # parallel if the random draws are made per subtree.
    left = train(context, ge_rows, depth + 1)
    right = train(context, lt_rows, depth + 1)
    return SplitNode(depth, train_set, value, feature, sv, left, right)
