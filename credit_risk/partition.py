from __future__ import annotations

"""
Stratified train/test split and fold assignment. Every random draw takes an
explicit seed; nothing here touches global random state.
"""

import logging

import numpy as np
import pandas as pd
from sklearn.model_selection import StratifiedKFold, train_test_split

from .constants import N_FOLDS, TRAIN_FRACTION
from .errors import PartitionError

logger = logging.getLogger(__name__)


def _as_labels(y) -> np.ndarray:
    labels = np.asarray(y)
    if labels.ndim != 1:
        raise PartitionError(f"labels must be one-dimensional, got shape {labels.shape}")
    if len(labels) == 0:
        raise PartitionError("cannot partition an empty label vector")
    return labels


def stratified_split(
    y: np.ndarray | pd.Series,
    train_fraction: float = TRAIN_FRACTION,
    *,
    seed: int,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Split row positions into train/test so each class keeps roughly
    ``train_fraction`` of its rows in the training side.

    Returns sorted positional indices (int64) for train and test.
    """
    labels = _as_labels(y)
    if not 0.0 < train_fraction < 1.0:
        raise PartitionError(f"train_fraction must be in (0, 1), got {train_fraction}")

    classes, counts = np.unique(labels, return_counts=True)
    if len(classes) < 2:
        raise PartitionError(f"need at least two classes to stratify, got {classes.tolist()}")
    for cls, count in zip(classes, counts):
        n_train = count * train_fraction
        if count < 2 or n_train < 1 or count - n_train < 1:
            raise PartitionError(
                f"class {cls!r} has {count} rows, too few to split at fraction {train_fraction}"
            )

    positions = np.arange(len(labels), dtype=np.int64)
    train_idx, test_idx = train_test_split(
        positions,
        train_size=train_fraction,
        random_state=seed,
        stratify=labels,
    )
    train_idx = np.sort(train_idx).astype(np.int64)
    test_idx = np.sort(test_idx).astype(np.int64)
    logger.debug("Split %d rows into %d train / %d test", len(labels), len(train_idx), len(test_idx))
    return train_idx, test_idx


def assign_folds(
    y_train: np.ndarray | pd.Series,
    k: int = N_FOLDS,
    *,
    seed: int,
) -> np.ndarray:
    """Give every training row one fold id in [0, k), stratified by label."""
    labels = _as_labels(y_train)
    if k < 2:
        raise PartitionError(f"need at least 2 folds, got {k}")

    classes, counts = np.unique(labels, return_counts=True)
    small = [(cls, count) for cls, count in zip(classes, counts) if count < k]
    if small:
        cls, count = small[0]
        raise PartitionError(
            f"class {cls!r} has {count} training rows, fewer than {k} folds"
        )

    folds = np.full(len(labels), -1, dtype=np.int64)
    splitter = StratifiedKFold(n_splits=k, shuffle=True, random_state=seed)
    for fold_id, (_, held_out) in enumerate(splitter.split(np.zeros(len(labels)), labels)):
        folds[held_out] = fold_id
    return folds


def fold_splits(folds: np.ndarray) -> list[tuple[np.ndarray, np.ndarray]]:
    """(fit rows, held-out rows) per fold id, in fold order."""
    folds = np.asarray(folds)
    return [
        (np.flatnonzero(folds != fold_id), np.flatnonzero(folds == fold_id))
        for fold_id in np.unique(folds)
    ]
