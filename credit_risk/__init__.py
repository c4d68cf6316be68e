"""
Elastic-net logistic regression on credit data: a cross-validated lambda path for
every alpha in a fixed grid, scored by binomial deviance.

This package contains data preparation, the stratified partitioner, the alpha
sweep and evaluation utilities used by main.py.
"""

from .config import PipelineConfig
from .constants import ALPHA_GRID, LABEL_COLUMN, POSITIVE_LABEL, SelectionRule
from .data_prep import build_design_matrix, load_dataset
from .errors import CreditRiskError, DevianceError, FeatureBuildError, PartitionError
from .evaluate import (
    ResultRecord,
    evaluate_test,
    evaluate_training,
    results_frame,
    select_best_alpha,
)
from .metrics import binomial_deviance, compute_classification_metrics, summarize_coefficients
from .partition import assign_folds, stratified_split
from .pipeline import PipelineResult, run_pipeline, run_pipeline_on_frame
from .sweep import CVPath, SweepEntry, fit_cv_path, run_sweep

__all__ = [
    "ALPHA_GRID",
    "LABEL_COLUMN",
    "POSITIVE_LABEL",
    "SelectionRule",
    "PipelineConfig",
    "build_design_matrix",
    "load_dataset",
    "CreditRiskError",
    "DevianceError",
    "FeatureBuildError",
    "PartitionError",
    "ResultRecord",
    "evaluate_test",
    "evaluate_training",
    "results_frame",
    "select_best_alpha",
    "binomial_deviance",
    "compute_classification_metrics",
    "summarize_coefficients",
    "assign_folds",
    "stratified_split",
    "PipelineResult",
    "run_pipeline",
    "run_pipeline_on_frame",
    "CVPath",
    "SweepEntry",
    "fit_cv_path",
    "run_sweep",
]
