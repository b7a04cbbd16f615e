"""
regtree — command line entry point.

    python -m regtree train data.csv --outcome los
    python -m regtree train data.csv --outcome los --config tree.yaml --k 0.5
    python -m regtree train data.csv --outcome los --predictions pred.csv
    python -m regtree dtw visits.csv --sequence patient --order t
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import polars as pl

from dataset.features import Features
from dataset.io import read_dataset, read_sequences, write_predictions
from distance.dtw import DynamicTimeWarping
from distance.metrics import EuclideanDistance, ManhattanDistance
from distance.pairwise import pairwise_distances
from regtree.config import load_parameters
from regtree.tree import RegressionTree

METRICS = {
    'euclidean': EuclideanDistance,
    'manhattan': ManhattanDistance,
}


def _train_main(args: argparse.Namespace) -> int:
    params = load_parameters(
        args.config,
        min_size=args.min_size,
        max_depth=args.max_depth,
        k=args.k,
        random_seed=args.seed,
    )
    dataset = read_dataset(args.path, outcome=args.outcome,
                           id_column=args.id_column, separator=args.separator)
    features = Features.read(args.features) if args.features else None

    tree = RegressionTree(params, features=features).fit(dataset)
    print(tree)

    if args.predictions:
        tree.test(dataset)
        write_predictions(dataset, args.predictions)
        print(f"Wrote {len(dataset)} predictions to {args.predictions}")
    return 0


def distance_frame(ids: List[str], matrix) -> pl.DataFrame:
    """
    Distance matrix as a frame: a 'sequence' id column, then one column per
    sequence named '<position>:<id>' so names stay unique for any ids.
    """
    columns = {'sequence': list(ids)}
    for j, sid in enumerate(ids):
        columns[f"{j}:{sid}"] = matrix[:, j]
    return pl.DataFrame(columns)


def _dtw_main(args: argparse.Namespace) -> int:
    sequences = read_sequences(args.path, sequence_column=args.sequence,
                               order_column=args.order, separator=args.separator)
    dtw = DynamicTimeWarping(METRICS[args.metric]())
    matrix = pairwise_distances(sequences, dtw)

    frame = distance_frame([s.id for s in sequences], matrix)
    with pl.Config(tbl_rows=-1, tbl_cols=-1):
        print(frame)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='regtree',
        description='Train regression trees and compare sequences with DTW.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  regtree train data.csv --outcome los
  regtree train data.csv --outcome los --config tree.yaml --predictions pred.csv
  regtree dtw visits.csv --sequence patient --order t
""",
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    train_parser = subparsers.add_parser('train', help='Train a regression tree')
    train_parser.add_argument('path', help='Delimited data file with a header row')
    train_parser.add_argument('--outcome', required=True, help='Target column')
    train_parser.add_argument('--id-column', default=None, help='Instance id column')
    train_parser.add_argument('--separator', default=',', help='Field separator (default: ,)')
    train_parser.add_argument('--config', type=Path, default=None, help='YAML parameter file')
    train_parser.add_argument('--features', type=Path, default=None,
                              help='Feature list file (index:label:description)')
    train_parser.add_argument('--min-size', type=int, default=None)
    train_parser.add_argument('--max-depth', type=int, default=None)
    train_parser.add_argument('--k', type=float, default=None,
                              help='Per-node feature sampling probability')
    train_parser.add_argument('--seed', type=int, default=None)
    train_parser.add_argument('--predictions', type=Path, default=None,
                              help='Write training-set predictions to this CSV')
    train_parser.set_defaults(func=_train_main)

    dtw_parser = subparsers.add_parser('dtw', help='Pairwise DTW distances between sequences')
    dtw_parser.add_argument('path', help='Long-format delimited file')
    dtw_parser.add_argument('--sequence', required=True, help='Sequence key column')
    dtw_parser.add_argument('--order', default=None, help='Ordering column within a sequence')
    dtw_parser.add_argument('--metric', choices=sorted(METRICS), default='euclidean',
                            help='Per-point cost (default: euclidean)')
    dtw_parser.add_argument('--separator', default=',', help='Field separator (default: ,)')
    dtw_parser.set_defaults(func=_dtw_main)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
    )
    if not Path(args.path).exists():
        print(f"Error: {args.path} does not exist")
        return 1
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
