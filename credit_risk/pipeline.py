from __future__ import annotations

"""
End-to-end run: load, build features, split, sweep, evaluate.
"""

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from .config import PipelineConfig
from .constants import SELECTION_RULES, SelectionRule
from .data_prep import build_design_matrix, load_dataset, validate_labels
from .evaluate import (
    ResultRecord,
    evaluate_test,
    evaluate_training,
    find_entry,
    select_best_alpha,
)
from .metrics import compute_classification_metrics, null_deviance, summarize_coefficients
from .partition import assign_folds, stratified_split
from .sweep import SweepEntry, run_sweep

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    meta: dict
    train_idx: np.ndarray
    test_idx: np.ndarray
    folds: np.ndarray
    entries: list[SweepEntry]
    train_records: list[ResultRecord]
    best_alpha: float
    test_records: list[ResultRecord]
    baseline_deviance: dict = field(default_factory=dict)
    test_metrics: dict = field(default_factory=dict)
    coefficients: dict = field(default_factory=dict)

    @property
    def failures(self) -> list[SweepEntry]:
        return [entry for entry in self.entries if not entry.ok]


def run_pipeline_on_frame(df: pd.DataFrame, config: PipelineConfig) -> PipelineResult:
    """Everything after loading; handy when the frame is already in memory."""
    validate_labels(df, config.label_column, (config.negative_label, config.positive_label))
    X, y, meta = build_design_matrix(df, config.label_column, config.positive_label)

    train_idx, test_idx = stratified_split(
        y.values, config.train_fraction, seed=config.seed
    )
    X_train, X_test = X.iloc[train_idx], X.iloc[test_idx]
    y_train, y_test = y.iloc[train_idx].values, y.iloc[test_idx].values
    logger.info("Train size: %d, Test size: %d", len(train_idx), len(test_idx))

    folds = assign_folds(y_train, config.n_folds, seed=config.effective_fold_seed)

    entries = run_sweep(
        X_train,
        y_train,
        folds,
        config.alphas,
        seed=config.seed,
        n_jobs=config.n_jobs,
        strict_convergence=config.strict_convergence,
        n_lambda=config.n_lambda,
        lambda_min_ratio=config.lambda_min_ratio,
        max_iter=config.max_iter,
        tol=config.tol,
    )
    if not any(entry.ok for entry in entries):
        raise RuntimeError("every alpha in the sweep failed to fit")

    on_invalid = config.on_invalid_probability
    train_records = evaluate_training(
        entries, X_train, y_train, SELECTION_RULES, on_invalid=on_invalid
    )
    best_alpha = select_best_alpha(train_records, SelectionRule.ONE_SE)
    best_entry = find_entry(entries, best_alpha)
    test_records = evaluate_test(
        best_entry, X_test, y_test, SELECTION_RULES, on_invalid=on_invalid
    )

    test_metrics = {
        r.rule: compute_classification_metrics(y_test, r.predictions) for r in test_records
    }
    coefficients = {
        rule: summarize_coefficients(best_entry.path.coef_at(best_entry.path.lambda_for(rule)))
        for rule in SELECTION_RULES
    }
    baseline = {
        "train": null_deviance(y_train, y_train),
        "test": null_deviance(y_train, y_test),
    }

    return PipelineResult(
        meta=meta,
        train_idx=train_idx,
        test_idx=test_idx,
        folds=folds,
        entries=entries,
        train_records=train_records,
        best_alpha=best_alpha,
        test_records=test_records,
        baseline_deviance=baseline,
        test_metrics=test_metrics,
        coefficients=coefficients,
    )


def run_pipeline(config: PipelineConfig) -> PipelineResult:
    df = load_dataset(
        config.csv_path,
        config.label_column,
        (config.negative_label, config.positive_label),
    )
    return run_pipeline_on_frame(df, config)
