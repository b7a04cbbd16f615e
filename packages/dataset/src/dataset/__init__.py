"""
Dataset package: the data model shared by distances and tree learners.

    SparseInstance   sparse feature vector + outcome + class label
    Sequence         immutable ordered run of SparseInstance time points
    DataSet          ordered collection, dense-matrix conversion
    Features         feature name ↔ index registry (text file I/O)

Delimited text files are read with dataset.io (polars).
"""

from dataset.instance import SparseInstance, Sequence
from dataset.collection import DataSet
from dataset.features import Features, remove_constant_features
from dataset.io import read_dataset, read_sequences, write_predictions

__all__ = [
    'SparseInstance',
    'Sequence',
    'DataSet',
    'Features',
    'remove_constant_features',
    'read_dataset',
    'read_sequences',
    'write_predictions',
]
