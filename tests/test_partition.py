import numpy as np
import pytest

from credit_risk.errors import PartitionError
from credit_risk.partition import assign_folds, fold_splits, stratified_split


@pytest.fixture
def labels():
    rng = np.random.default_rng(3)
    return (rng.random(500) < 0.3).astype(np.int64)


@pytest.mark.parametrize("seed", [0, 1, 42, 2024])
def test_split_is_deterministic(labels, seed):
    first = stratified_split(labels, 0.8, seed=seed)
    second = stratified_split(labels, 0.8, seed=seed)
    np.testing.assert_array_equal(first[0], second[0])
    np.testing.assert_array_equal(first[1], second[1])


def test_split_changes_with_seed(labels):
    a, _ = stratified_split(labels, 0.8, seed=1)
    b, _ = stratified_split(labels, 0.8, seed=2)
    assert not np.array_equal(a, b)


def test_split_is_complete_and_disjoint(labels):
    train, test = stratified_split(labels, 0.8, seed=11)
    assert np.intersect1d(train, test).size == 0
    np.testing.assert_array_equal(np.sort(np.concatenate([train, test])), np.arange(len(labels)))
    assert train.dtype == np.int64 and test.dtype == np.int64


def test_split_is_stratified(labels):
    train, _ = stratified_split(labels, 0.8, seed=5)
    for cls in (0, 1):
        total = np.sum(labels == cls)
        kept = np.sum(labels[train] == cls)
        assert abs(kept - 0.8 * total) <= 1


def test_split_rejects_tiny_class():
    y = np.array([0] * 20 + [1])
    with pytest.raises(PartitionError, match="too few"):
        stratified_split(y, 0.8, seed=0)


def test_split_rejects_single_class():
    with pytest.raises(PartitionError):
        stratified_split(np.zeros(10, dtype=int), 0.8, seed=0)


@pytest.mark.parametrize("fraction", [0.0, 1.0, -0.2, 1.5])
def test_split_rejects_fraction_outside_unit_interval(labels, fraction):
    with pytest.raises(PartitionError, match="train_fraction"):
        stratified_split(labels, fraction, seed=0)


def test_split_requires_explicit_seed(labels):
    with pytest.raises(TypeError):
        stratified_split(labels, 0.8)


def test_every_row_gets_one_fold(labels):
    folds = assign_folds(labels, 10, seed=9)
    assert folds.shape == labels.shape
    assert folds.dtype == np.int64
    assert folds.min() == 0 and folds.max() == 9
    assert set(np.unique(folds)) == set(range(10))


def test_folds_keep_class_balance(labels):
    folds = assign_folds(labels, 10, seed=9)
    overall = labels.mean()
    for fold_id in range(10):
        assert abs(labels[folds == fold_id].mean() - overall) < 0.05


def test_folds_are_deterministic(labels):
    np.testing.assert_array_equal(assign_folds(labels, 10, seed=4), assign_folds(labels, 10, seed=4))


def test_folds_reject_class_smaller_than_k():
    y = np.array([0] * 50 + [1] * 5)
    with pytest.raises(PartitionError, match="fewer than 10 folds"):
        assign_folds(y, 10, seed=0)


def test_fold_splits_partition_rows(labels):
    folds = assign_folds(labels, 5, seed=2)
    splits = fold_splits(folds)
    assert len(splits) == 5
    held = np.concatenate([held_out for _, held_out in splits])
    np.testing.assert_array_equal(np.sort(held), np.arange(len(labels)))
    for fit_rows, held_out in splits:
        assert np.intersect1d(fit_rows, held_out).size == 0
