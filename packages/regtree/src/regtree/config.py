"""
Regression Tree Configuration
=============================
Parameters for tree growth. DEFAULTS is the single source of truth;
YAML files and keyword overrides are overlaid on top of it.

Recognised options (snake_case, camelCase accepted on input):

    min_size     (minSize)     rows a leaf may hold without splitting;
                               every split side needs strictly more
    max_depth    (maxDepth)    nodes at this depth are always leaves
    k                          per-node probability of considering a feature
    random_seed  (randomSeed)  seed of the tree-wide random source
    max_splits   (maxSplits)   candidate thresholds kept per feature

Usage:
    from regtree.config import TreeParameters, load_parameters

    params = TreeParameters(min_size=2, max_depth=4)
    params = load_parameters('tree.yaml', k=0.5)
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

DEFAULTS: Dict[str, Any] = {
    'min_size': 5,
    'max_depth': 10,
    'k': 1.0,
    'random_seed': 42,
    'max_splits': 64,
}

_ALIASES = {
    'minSize': 'min_size',
    'maxDepth': 'max_depth',
    'randomSeed': 'random_seed',
    'maxSplits': 'max_splits',
}


@dataclass(frozen=True)
class TreeParameters:
    min_size: int = DEFAULTS['min_size']
    max_depth: int = DEFAULTS['max_depth']
    k: float = DEFAULTS['k']
    random_seed: Optional[int] = DEFAULTS['random_seed']
    max_splits: int = DEFAULTS['max_splits']

    def __post_init__(self):
        if self.min_size < 0:
            raise ValueError(f"min_size must be >= 0, got {self.min_size}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if not 0.0 < self.k <= 1.0:
            raise ValueError(f"k must be in (0, 1], got {self.k}")
        if self.max_splits < 1:
            raise ValueError(f"max_splits must be >= 1, got {self.max_splits}")

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> 'TreeParameters':
        """Build from a mapping; unknown keys raise KeyError."""
        known = {f.name for f in fields(cls)}
        values = dict(DEFAULTS)
        for key, value in options.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise KeyError(f"Unknown tree parameter: {key}. Available: {sorted(known)}")
            values[name] = value
        return cls(
            min_size=int(values['min_size']),
            max_depth=int(values['max_depth']),
            k=float(values['k']),
            random_seed=None if values['random_seed'] is None else int(values['random_seed']),
            max_splits=int(values['max_splits']),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_parameters(path: Union[str, Path, None] = None, **overrides) -> TreeParameters:
    """
    Read parameters from a YAML file, then apply keyword overrides.

    The file holds the options at top level or under a 'tree:' key.
    None-valued overrides are ignored.
    """
    options: Dict[str, Any] = {}
    if path is not None:
        with open(path) as f:
            cfg = yaml.safe_load(f) or {}
        if isinstance(cfg, dict) and 'tree' in cfg:
            cfg = cfg['tree'] or {}
        if not isinstance(cfg, dict):
            raise ValueError(f"Tree parameters in {path} must be a mapping, "
                             f"got {type(cfg).__name__}")
        options.update(cfg)
    options.update({k: v for k, v in overrides.items() if v is not None})
    return TreeParameters.from_dict(options)
