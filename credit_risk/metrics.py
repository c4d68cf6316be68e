from __future__ import annotations

"""
Metric helpers: binomial deviance, threshold-based classification summaries,
and coefficient dumps.
"""

import numpy as np
import pandas as pd
from sklearn import metrics

from .errors import DevianceError

DEVIANCE_MODES = ("raise", "clip")


def binomial_deviance(
    probs, actual, on_invalid: str = "raise", eps: float = 1e-15
) -> float:
    """
    Mean binomial deviance of predicted probabilities against 0/1 labels.

    Each row contributes 2 * (a*log(a/p) + (1-a)*log((1-a)/(1-p))), where a term
    whose label factor is zero counts as 0 (0*log(0) = 0). A probability that
    would put log(0) into a term that is not guarded this way (p=0 for a=1,
    p=1 for a=0), or that is NaN or outside [0, 1], raises DevianceError; with
    ``on_invalid="clip"`` probabilities are saturated into [eps, 1-eps] instead.
    """
    if on_invalid not in DEVIANCE_MODES:
        raise ValueError(f"on_invalid must be one of {DEVIANCE_MODES}, got {on_invalid!r}")

    p = np.asarray(probs, dtype=np.float64).ravel()
    a = np.asarray(actual, dtype=np.float64).ravel()
    if p.shape != a.shape:
        raise DevianceError(0, f"{len(p)} probabilities for {len(a)} labels")
    if len(p) == 0:
        raise DevianceError(0, "no rows to score")

    not_binary = np.flatnonzero((a != 0) & (a != 1))
    if len(not_binary):
        row = int(not_binary[0])
        raise DevianceError(row, f"label {a[row]!r} is not 0 or 1")

    pos = a != 0
    neg = a != 1
    invalid = (
        np.isnan(p)
        | (p < 0)
        | (p > 1)
        | (pos & (p <= 0))
        | (neg & (p >= 1))
    )
    if invalid.any():
        if on_invalid == "raise":
            row = int(np.flatnonzero(invalid)[0])
            raise DevianceError(row, f"probability {p[row]!r} is invalid for label {int(a[row])}")
        p = np.clip(np.nan_to_num(p, nan=0.5), eps, 1 - eps)

    terms = np.zeros_like(p)
    terms[pos] = a[pos] * np.log(a[pos] / p[pos])
    terms[neg] += (1 - a[neg]) * np.log((1 - a[neg]) / (1 - p[neg]))
    return float(np.mean(2 * terms))


def null_deviance(y_train, y_target) -> float:
    """
    Deviance of always predicting the training prevalence; the floor any fitted
    model has to beat.
    """
    prob = float(np.mean(np.asarray(y_train, dtype=np.float64)))
    probs = np.full(len(y_target), prob, dtype=np.float64)
    return binomial_deviance(probs, y_target)


def compute_classification_metrics(
    y_true: np.ndarray | pd.Series, probs: np.ndarray, threshold: float = 0.5
):
    """Compute standard binary metrics given probabilities and a threshold."""
    preds = (probs >= threshold).astype(int)
    precision, recall, f1, _ = metrics.precision_recall_fscore_support(
        y_true, preds, average="binary", zero_division=0
    )
    try:
        roc_auc = metrics.roc_auc_score(y_true, probs)
    except ValueError:
        roc_auc = float("nan")

    return {
        "accuracy": metrics.accuracy_score(y_true, preds),
        "precision": precision,
        "recall": recall,
        "f1": f1,
        "roc_auc": roc_auc,
        "confusion_matrix": metrics.confusion_matrix(y_true, preds, labels=[0, 1]),
    }


def summarize_coefficients(coef: pd.Series, top_k: int = 8) -> dict:
    """Largest positive/negative coefficients plus how many were zeroed out."""
    nonzero = coef[coef != 0]
    coef_sorted = nonzero.sort_values()
    return {
        "positive": coef_sorted[coef_sorted > 0].tail(top_k)[::-1],
        "negative": coef_sorted[coef_sorted < 0].head(top_k),
        "n_zero": int((coef == 0).sum()),
        "n_features": int(len(coef)),
    }
