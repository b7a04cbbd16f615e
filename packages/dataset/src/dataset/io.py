"""
Delimited text I/O.

Reads instances and sequences from CSV-like files via polars and writes
per-instance predictions back out. No other persistence format.

Usage:
    from dataset.io import read_dataset, read_sequences

    train = read_dataset('train.csv', outcome='los', id_column='case_id')
    seqs = read_sequences('visits.csv', sequence_column='patient',
                          order_column='t')
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

import polars as pl

from dataset.collection import DataSet
from dataset.instance import RESULT_KEY, Sequence, SparseInstance


def _require_columns(df: pl.DataFrame, path, columns: List[Optional[str]]) -> None:
    for column in columns:
        if column is not None and column not in df.columns:
            raise KeyError(f"Column {column!r} not found in {path}. "
                           f"Available: {df.columns}")


def _outcome_of(row: Dict, outcome: Optional[str]) -> float:
    if outcome is None or row[outcome] is None:
        return 0.0
    return float(row[outcome])


def _feature_columns(df: pl.DataFrame, reserved: List[Optional[str]]) -> List[str]:
    """Numeric columns that are not id / label / outcome / ordering columns."""
    skip = {c for c in reserved if c is not None}
    return [
        name for name, dtype in df.schema.items()
        if name not in skip and dtype.is_numeric()
    ]


def _row_values(row: Dict, columns: List[str]) -> Dict[str, float]:
    values = {}
    for name in columns:
        v = row[name]
        if v is not None and v != 0:
            values[name] = float(v)
    return values


def read_dataset(
    path: Union[str, Path],
    outcome: Optional[str] = None,
    id_column: Optional[str] = None,
    class_column: Optional[str] = None,
    separator: str = ",",
) -> DataSet:
    """
    Read a delimited file into a DataSet.

    Every numeric column except outcome / id / class becomes a sparse
    feature; zeros and nulls are not stored.

    Args:
        path: Delimited text file with a header row.
        outcome: Column holding the regression target. None = 0.0 outcomes.
        id_column: Column with instance ids. None = row number.
        class_column: Column with class labels. None = empty label.
        separator: Field separator.

    Returns:
        DataSet in file order.
    """
    df = pl.read_csv(path, separator=separator)
    _require_columns(df, path, [outcome, id_column, class_column])

    columns = _feature_columns(df, [outcome, id_column, class_column])
    ds = DataSet()
    for i, row in enumerate(df.iter_rows(named=True)):
        ds.add(SparseInstance(
            id=str(row[id_column]) if id_column else str(i),
            class_name=str(row[class_column]) if class_column else "",
            values=_row_values(row, columns),
            outcome=_outcome_of(row, outcome),
        ))
    return ds


def read_sequences(
    path: Union[str, Path],
    sequence_column: str,
    order_column: Optional[str] = None,
    outcome: Optional[str] = None,
    class_column: Optional[str] = None,
    separator: str = ",",
) -> List[Sequence]:
    """
    Read a long-format delimited file into one Sequence per key.

    Rows sharing a sequence_column value form one sequence, ordered by
    order_column (file order when None). Sequences appear in order of
    first occurrence. Sequence outcome / class come from the first row.
    """
    df = pl.read_csv(path, separator=separator)
    _require_columns(df, path, [sequence_column, order_column, outcome, class_column])

    columns = _feature_columns(df, [sequence_column, order_column, outcome, class_column])
    sequences = []
    for group in df.partition_by(sequence_column, maintain_order=True):
        if order_column is not None:
            group = group.sort(order_column, maintain_order=True)
        rows = list(group.iter_rows(named=True))
        key = str(rows[0][sequence_column])
        points = [
            SparseInstance(id=f"{key}_{t}", values=_row_values(row, columns))
            for t, row in enumerate(rows)
        ]
        sequences.append(Sequence(
            points,
            id=key,
            class_name=str(rows[0][class_column]) if class_column else "",
            outcome=_outcome_of(rows[0], outcome),
        ))
    return sequences


def write_predictions(dataset: DataSet, path: Union[str, Path], key: str = RESULT_KEY) -> None:
    """Write id, outcome and stored prediction per instance as CSV."""
    pl.DataFrame({
        'id': [inst.id for inst in dataset],
        'outcome': [inst.outcome for inst in dataset],
        key: [inst.get_result(key) if inst.has_result(key) else None for inst in dataset],
    }).write_csv(path)
