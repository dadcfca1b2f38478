"""Unit tests for datasets and splits."""

import numpy as np
import pytest

from scalargrad import Dataset, InsufficientData, make_moons


def toy(n: int) -> Dataset:
    inputs = np.arange(2 * n, dtype=float).reshape(n, 2)
    labels = np.where(np.arange(n) % 2 == 0, 1.0, -1.0)
    return Dataset(inputs, labels)


class TestDataset:
    def test_iteration_yields_float_pairs(self) -> None:
        pairs = list(toy(3))
        assert pairs[0] == ([0.0, 1.0], 1.0)
        assert pairs[1] == ([2.0, 3.0], -1.0)
        assert len(toy(3)) == 3

    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError):
            Dataset(np.zeros((3, 2)), np.zeros(2))

    def test_split_is_disjoint_and_deterministic(self) -> None:
        ds = toy(10)
        train, val = ds.split(0.2)
        assert len(train) == 8
        assert len(val) == 2
        assert np.array_equal(val.inputs, ds.inputs[8:])

        a_train, a_val = ds.split(0.3, seed=4)
        b_train, b_val = ds.split(0.3, seed=4)
        assert np.array_equal(a_val.inputs, b_val.inputs)
        rows = {tuple(r) for r in a_train.inputs} | {tuple(r) for r in a_val.inputs}
        assert len(rows) == 10

    def test_split_needs_non_empty_partitions(self) -> None:
        with pytest.raises(InsufficientData):
            toy(1).split(0.5)
        with pytest.raises(InsufficientData):
            toy(3).split(0.1)

    def test_split_fraction_range(self) -> None:
        with pytest.raises(ValueError):
            toy(10).split(1.0)

    def test_k_folds(self) -> None:
        ds = toy(10)
        folds = ds.k_folds(5)
        assert len(folds) == 5
        for i, (train, val) in enumerate(folds):
            assert len(val) == 2
            assert len(train) == 8
            assert np.array_equal(val.inputs, ds.inputs[2 * i:2 * i + 2])

    def test_k_folds_spread_remainder(self) -> None:
        sizes = [len(val) for _, val in toy(11).k_folds(3)]
        assert sizes == [4, 4, 3]

    def test_k_folds_insufficient(self) -> None:
        with pytest.raises(InsufficientData):
            toy(3).k_folds(4)
        with pytest.raises(InsufficientData):
            toy(10).k_folds(1)


class TestMakeMoons:
    def test_shape_and_labels(self) -> None:
        ds = make_moons(100, noise=0.1, seed=0)
        assert ds.inputs.shape == (100, 2)
        assert set(ds.labels.tolist()) == {-1.0, 1.0}
        assert (ds.labels == 1.0).sum() == 50

    def test_odd_sample_count(self) -> None:
        assert len(make_moons(7, seed=0)) == 7

    def test_seeded(self) -> None:
        a = make_moons(40, seed=3)
        b = make_moons(40, seed=3)
        c = make_moons(40, seed=4)
        assert np.array_equal(a.inputs, b.inputs)
        assert not np.array_equal(a.inputs, c.inputs)
