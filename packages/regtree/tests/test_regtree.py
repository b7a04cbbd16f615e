"""Tests for the regtree package."""
import numpy as np
import pytest


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def two_clusters():
    """20 rows: x < 1 → outcome ≈ 0, x >= 5 → outcome ≈ 10, z is noise."""
    from dataset import DataSet, SparseInstance
    rng = np.random.default_rng(42)
    rows = []
    for i in range(10):
        rows.append(SparseInstance(
            f"low_{i}", values={'x': i / 10, 'z': float(rng.uniform(0, 10))},
            outcome=float(rng.normal(0.0, 0.1)),
        ))
    for i in range(10):
        rows.append(SparseInstance(
            f"high_{i}", values={'x': 5 + i / 10, 'z': float(rng.uniform(0, 10))},
            outcome=float(rng.normal(10.0, 0.1)),
        ))
    return DataSet(rows)


@pytest.fixture
def noisy_regression():
    """120 rows, 4 features, outcome depends on a and b."""
    from dataset import DataSet, SparseInstance
    rng = np.random.default_rng(7)
    X = rng.uniform(0, 1, size=(120, 4))
    y = 3 * X[:, 0] + np.where(X[:, 1] > 0.5, 2.0, 0.0) + rng.normal(0, 0.05, 120)
    names = ['a', 'b', 'c', 'd']
    return DataSet(
        SparseInstance(f"r{i}", values=dict(zip(names, map(float, row))), outcome=float(t))
        for i, (row, t) in enumerate(zip(X, y))
    )


# ---------------------------------------------------------------------------
# Config tests
# ---------------------------------------------------------------------------

class TestConfig:

    def test_defaults(self):
        from regtree import DEFAULTS, TreeParameters
        params = TreeParameters()
        assert params.to_dict() == DEFAULTS

    def test_camel_case_options(self):
        from regtree import TreeParameters
        params = TreeParameters.from_dict({'minSize': 3, 'maxDepth': 2, 'randomSeed': 9})
        assert params.min_size == 3
        assert params.max_depth == 2
        assert params.random_seed == 9

    @pytest.mark.parametrize('options', [
        {'k': 0.0}, {'k': 1.5}, {'min_size': -1}, {'max_depth': -2}, {'max_splits': 0},
    ])
    def test_invalid_values(self, options):
        from regtree import TreeParameters
        with pytest.raises(ValueError):
            TreeParameters.from_dict(options)

    def test_unknown_option(self):
        from regtree import TreeParameters
        with pytest.raises(KeyError):
            TreeParameters.from_dict({'depth': 3})

    def test_load_yaml_with_overrides(self, tmp_path):
        from regtree import load_parameters
        path = tmp_path / 'tree.yaml'
        path.write_text('tree:\n  minSize: 4\n  k: 0.5\n')
        params = load_parameters(path, max_depth=3, k=None)
        assert params.min_size == 4
        assert params.k == 0.5
        assert params.max_depth == 3

    def test_empty_tree_section_gives_defaults(self, tmp_path):
        from regtree import TreeParameters, load_parameters
        path = tmp_path / 'tree.yaml'
        path.write_text('tree:\n')
        assert load_parameters(path, min_size=2) == TreeParameters(min_size=2)

    @pytest.mark.parametrize('text', ['- 1\n- 2\n', 'tree:\n  - 1\n', '3\n'])
    def test_non_mapping_yaml(self, tmp_path, text):
        from regtree import load_parameters
        path = tmp_path / 'tree.yaml'
        path.write_text(text)
        with pytest.raises(ValueError):
            load_parameters(path)

    def test_load_top_level_yaml(self, tmp_path):
        from regtree import load_parameters
        path = tmp_path / 'tree.yaml'
        path.write_text('max_splits: 8\n')
        assert load_parameters(path).max_splits == 8


# ---------------------------------------------------------------------------
# Candidate threshold tests
# ---------------------------------------------------------------------------

class TestSplits:

    def test_minimum_excluded(self):
        from regtree.splits import thresholds_for_values
        assert thresholds_for_values(np.array([3.0, 1.0, 1.0, 2.0]), 10) == [2.0, 3.0]

    def test_constant_feature_has_no_thresholds(self):
        from regtree.splits import thresholds_for_values
        assert thresholds_for_values(np.array([4.0, 4.0]), 10) == []

    def test_capped(self):
        from regtree.splits import thresholds_for_values
        thresholds = thresholds_for_values(np.arange(100, dtype=float), 5)
        assert len(thresholds) == 5
        assert thresholds[0] == 1.0
        assert thresholds[-1] == 99.0

    def test_absent_values_count_as_zero(self):
        from dataset import DataSet, Features, SparseInstance
        from regtree import candidate_splits
        ds = DataSet([SparseInstance(values={'a': 2.0}), SparseInstance(values={'b': 1.0})])
        splits = candidate_splits(ds, Features(['a', 'b']))
        assert splits == {'a': [2.0], 'b': [1.0]}


# ---------------------------------------------------------------------------
# Tree tests
# ---------------------------------------------------------------------------

class TestRegressionTree:

    def test_two_clusters(self, two_clusters):
        from regtree import RegressionTree
        tree = RegressionTree(min_size=2, max_depth=1).fit(two_clusters)
        root = tree.root
        assert root.split_feature == 'x'
        assert root.split_value == 5.0
        assert root.left.is_terminal and root.right.is_terminal
        # left holds the >= side
        assert abs(root.left.value - 10.0) < 0.5
        assert abs(root.right.value - 0.0) < 0.5
        assert root.value == pytest.approx(float(np.mean(two_clusters.outcomes())))

    def test_left_holds_larger_values(self, two_clusters):
        from regtree import RegressionTree
        root = RegressionTree(min_size=2, max_depth=1).fit(two_clusters).root
        assert all(inst.get('x') >= root.split_value for inst in root.left.train_set)
        assert all(inst.get('x') < root.split_value for inst in root.right.train_set)

    def test_predict_routes_by_split(self, two_clusters):
        from dataset import SparseInstance
        from regtree import RegressionTree
        tree = RegressionTree(min_size=2, max_depth=1).fit(two_clusters)
        assert tree.predict(SparseInstance(values={'x': 7.0})) == tree.root.left.value
        # missing feature reads as 0 → '<' side
        assert tree.predict(SparseInstance()) == tree.root.right.value

    def test_min_size_respected(self, noisy_regression):
        from regtree import RegressionTree
        min_size = 5
        tree = RegressionTree(min_size=min_size, max_depth=8).fit(noisy_regression)
        internal = [n for n in tree.root.iter_nodes() if not n.is_terminal]
        assert internal
        for node in internal:
            assert node.left.size > min_size
            assert node.right.size > min_size
            assert node.left.size + node.right.size == node.size

    def test_max_depth_respected(self, noisy_regression):
        from regtree import RegressionTree
        tree = RegressionTree(min_size=1, max_depth=3).fit(noisy_regression)
        for node in tree.root.iter_nodes():
            if node.depth == 3:
                assert node.is_terminal
        assert tree.depth() <= 3

    def test_max_depth_zero_is_single_leaf(self, two_clusters):
        from regtree import RegressionTree
        tree = RegressionTree(max_depth=0).fit(two_clusters)
        assert tree.root.is_terminal
        assert tree.n_nodes == 1

    def test_no_eligible_split_makes_leaf(self):
        from dataset import DataSet, SparseInstance
        from regtree import RegressionTree
        ds = DataSet(SparseInstance(values={'x': float(i)}, outcome=float(i)) for i in range(6))
        # 6 rows, both sides would need more than 3
        tree = RegressionTree(min_size=3, max_depth=5).fit(ds)
        assert tree.root.is_terminal
        assert tree.root.value == pytest.approx(2.5)

    def test_leaf_prediction_idempotent(self, noisy_regression):
        from regtree import RegressionTree
        tree = RegressionTree(min_size=3, max_depth=6).fit(noisy_regression)
        for leaf in tree.leaves():
            for inst in leaf.train_set:
                assert tree.predict(inst) == leaf.value
                assert tree.root.leaf_for(inst) is leaf

    def test_tie_keeps_first_feature(self):
        from dataset import DataSet, SparseInstance
        from regtree import RegressionTree
        ds = DataSet(
            SparseInstance(values={'a': float(i), 'b': float(i)}, outcome=float(i >= 3))
            for i in range(6)
        )
        tree = RegressionTree(min_size=1, max_depth=1).fit(ds)
        assert tree.root.split_feature == 'a'
        assert tree.root.split_value == 3.0

    def test_subsampling_deterministic(self, noisy_regression):
        from regtree import RegressionTree
        first = RegressionTree(min_size=3, max_depth=6, k=0.5, random_seed=11).fit(noisy_regression)
        second = RegressionTree(min_size=3, max_depth=6, k=0.5, random_seed=11).fit(noisy_regression)
        assert first.to_dict() == second.to_dict()
        assert str(first) == str(second)

    def test_refit_is_reproducible(self, noisy_regression):
        from regtree import RegressionTree
        tree = RegressionTree(min_size=3, max_depth=6, k=0.5, random_seed=3)
        first = tree.fit(noisy_regression).to_dict()
        assert tree.fit(noisy_regression).to_dict() == first

    def test_explicit_features_restrict_splits(self, noisy_regression):
        from dataset import Features
        from regtree import RegressionTree
        tree = RegressionTree(features=Features(['c', 'd']), min_size=3, max_depth=4)
        tree.fit(noisy_regression)
        for node in tree.root.iter_nodes():
            if not node.is_terminal:
                assert node.split_feature in {'c', 'd'}

    def test_test_stores_results(self, two_clusters):
        from dataset.instance import RESULT_KEY
        from regtree import RegressionTree
        tree = RegressionTree(min_size=2, max_depth=2).fit(two_clusters)
        tree.test(two_clusters)
        stored = np.array([inst.get_result(RESULT_KEY) for inst in two_clusters])
        np.testing.assert_array_equal(stored, tree.predict_all(two_clusters))

    def test_fits_training_data(self, noisy_regression):
        from regtree import RegressionTree
        tree = RegressionTree(min_size=2, max_depth=8).fit(noisy_regression)
        y = noisy_regression.outcomes()
        mse = float(np.mean((tree.predict_all(noisy_regression) - y) ** 2))
        assert mse < 0.25 * float(np.var(y))

    def test_empty_dataset_raises(self):
        from dataset import DataSet
        from regtree import RegressionTree
        with pytest.raises(ValueError):
            RegressionTree().fit(DataSet())

    def test_predict_before_fit_raises(self):
        from dataset import SparseInstance
        from regtree import RegressionTree
        with pytest.raises(RuntimeError):
            RegressionTree().predict(SparseInstance())

    def test_params_and_options_exclusive(self):
        from regtree import RegressionTree, TreeParameters
        with pytest.raises(TypeError):
            RegressionTree(TreeParameters(), min_size=1)

    def test_nodes_are_frozen(self, two_clusters):
        import dataclasses
        from regtree import RegressionTree
        root = RegressionTree(min_size=2, max_depth=1).fit(two_clusters).root
        with pytest.raises(dataclasses.FrozenInstanceError):
            root.value = 0.0


# ---------------------------------------------------------------------------
# Feature subsampling tests
# ---------------------------------------------------------------------------

def _context(names, k, seed):
    from dataset import Features
    from regtree import TrainingContext, TreeParameters
    return TrainingContext(
        params=TreeParameters(k=k, random_seed=seed),
        features=Features(names),
        splits={},
        rng=np.random.default_rng(seed),
    )


class TestFeatureSampling:

    def test_full_registry_when_k_is_one(self):
        context = _context(['c', 'a', 'b'], k=1.0, seed=0)
        assert context.select_features() == ['a', 'b', 'c']

    def test_sample_is_strict_subset(self):
        names = [f"f{i:02d}" for i in range(20)]
        context = _context(names, k=0.5, seed=5)
        draws = [context.select_features() for _ in range(10)]
        for draw in draws:
            assert set(draw) <= set(names)
            assert draw == sorted(draw)
        assert any(len(draw) < len(names) for draw in draws)

    def test_sample_rate_follows_k(self):
        names = [f"f{i:03d}" for i in range(400)]
        draw = _context(names, k=0.5, seed=1).select_features()
        # Binomial(400, 0.5): mean 200, sd 10
        assert 140 < len(draw) < 260

    def test_seed_controls_draws(self):
        names = [f"f{i:02d}" for i in range(20)]
        first = _context(names, k=0.5, seed=1)
        same = _context(names, k=0.5, seed=1)
        other = _context(names, k=0.5, seed=2)
        first_draws = [first.select_features() for _ in range(5)]
        assert first_draws == [same.select_features() for _ in range(5)]
        assert first_draws != [other.select_features() for _ in range(5)]

    def test_empty_sample_makes_leaf(self, two_clusters):
        from regtree import RegressionTree
        full = RegressionTree(min_size=2, max_depth=5, k=1.0).fit(two_clusters)
        assert not full.root.is_terminal
        sparse = RegressionTree(min_size=2, max_depth=5, k=1e-12, random_seed=3).fit(two_clusters)
        assert sparse.root.is_terminal
        assert sparse.root.value == pytest.approx(full.root.value)


# ---------------------------------------------------------------------------
# Serialisation tests
# ---------------------------------------------------------------------------

class TestFormat:

    def test_to_dict(self, two_clusters):
        from regtree import RegressionTree
        d = RegressionTree(min_size=2, max_depth=1).fit(two_clusters).to_dict()
        assert d['num'] == 20
        assert d['split_on'] == 'x'
        assert d['left']['num'] == 10
        assert 'split_on' not in d['left']

    def test_text_indentation(self, two_clusters):
        from regtree import RegressionTree
        text = str(RegressionTree(min_size=2, max_depth=2).fit(two_clusters))
        lines = text.split('\n')
        assert lines[0].startswith("{'value': ")
        assert "'split_on': 'x'" in lines[0]
        assert any(line.startswith("  'left': ") for line in lines)
        assert any(line.startswith("  'right': ") for line in lines)

    def test_untrained_str(self):
        from regtree import RegressionTree
        assert str(RegressionTree()) == "RegressionTree(untrained)"


# ---------------------------------------------------------------------------
# CLI tests
# ---------------------------------------------------------------------------

class TestCLI:

    def test_train(self, tmp_path, capsys):
        from regtree.cli import main
        data = tmp_path / 'data.csv'
        rows = ['id,x,y'] + [f"r{i},{i},{0 if i < 5 else 10}" for i in range(10)]
        data.write_text('\n'.join(rows) + '\n')
        out = tmp_path / 'pred.csv'
        code = main(['train', str(data), '--outcome', 'y', '--id-column', 'id',
                     '--min-size', '1', '--max-depth', '2', '--predictions', str(out)])
        assert code == 0
        assert out.exists()
        assert "'split_on': 'x'" in capsys.readouterr().out

    def test_dtw(self, tmp_path, capsys):
        from regtree.cli import main
        data = tmp_path / 'seq.csv'
        data.write_text('sid,t,f\na,0,1.0\na,1,3.0\nb,0,1.0\n')
        code = main(['dtw', str(data), '--sequence', 'sid', '--order', 't',
                     '--metric', 'manhattan'])
        assert code == 0
        assert 'sequence' in capsys.readouterr().out

    def test_distance_frame_unique_columns(self):
        from regtree.cli import distance_frame
        frame = distance_frame(['sequence', 'sequence'], np.array([[0.0, 1.0], [1.0, 0.0]]))
        assert frame.columns == ['sequence', '0:sequence', '1:sequence']
        assert frame['1:sequence'].to_list() == [1.0, 0.0]

    def test_dtw_sequence_named_like_id_column(self, tmp_path, capsys):
        from regtree.cli import main
        data = tmp_path / 'seq.csv'
        data.write_text('sid,f\nsequence,1.0\nother,2.0\n')
        assert main(['dtw', str(data), '--sequence', 'sid']) == 0
        assert '0:sequence' in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        from regtree.cli import main
        assert main(['train', str(tmp_path / 'nope.csv'), '--outcome', 'y']) == 1
