from __future__ import annotations

"""
Score fitted paths by binomial deviance, pick the best alpha, and re-score it
on held-out data.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from .constants import SELECTION_RULES, SelectionRule
from .metrics import binomial_deviance
from .sweep import SweepEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultRecord:
    alpha: float
    rule: SelectionRule
    split: str
    lam: float
    predictions: np.ndarray
    deviance: float


def _score_entry(
    entry: SweepEntry,
    X,
    y,
    rules: Iterable[SelectionRule],
    split: str,
    on_invalid: str,
) -> list[ResultRecord]:
    records = []
    for rule in rules:
        rule = SelectionRule(rule)
        lam = entry.path.lambda_for(rule)
        preds = entry.path.predict_proba(X, lam)
        records.append(
            ResultRecord(
                alpha=entry.alpha,
                rule=rule,
                split=split,
                lam=lam,
                predictions=preds,
                deviance=binomial_deviance(preds, y, on_invalid=on_invalid),
            )
        )
    return records


def evaluate_training(
    entries: Sequence[SweepEntry],
    X_train,
    y_train,
    rules: Sequence[SelectionRule] = SELECTION_RULES,
    on_invalid: str = "raise",
) -> list[ResultRecord]:
    """One record per (fitted alpha, rule), scored on the training rows."""
    records = []
    for entry in entries:
        if not entry.ok:
            continue
        records.extend(_score_entry(entry, X_train, y_train, rules, "train", on_invalid))
    return records


def select_best_alpha(
    records: Sequence[ResultRecord],
    rule: SelectionRule = SelectionRule.ONE_SE,
) -> float:
    """
    Alpha with the lowest training deviance under ``rule``. Records are read in
    grid order and only a strictly lower deviance replaces the current best, so
    ties go to the alpha that comes first.
    """
    rule = SelectionRule(rule)
    best_alpha = None
    best_dev = np.inf
    for record in records:
        if record.rule is not rule or record.split != "train":
            continue
        if record.deviance < best_dev:
            best_alpha, best_dev = record.alpha, record.deviance
    if best_alpha is None:
        raise ValueError(f"no training records for rule {rule.value}")
    logger.info("Best alpha under %s: %.2f (deviance %.4f)", rule.value, best_alpha, best_dev)
    return best_alpha


def evaluate_test(
    entry: SweepEntry,
    X_test,
    y_test,
    rules: Sequence[SelectionRule] = SELECTION_RULES,
    on_invalid: str = "raise",
) -> list[ResultRecord]:
    if not entry.ok:
        raise ValueError(f"alpha={entry.alpha} has no fitted path: {entry.error}")
    return _score_entry(entry, X_test, y_test, rules, "test", on_invalid)


def find_entry(entries: Sequence[SweepEntry], alpha: float) -> SweepEntry:
    for entry in entries:
        if entry.alpha == alpha:
            return entry
    raise KeyError(f"alpha={alpha} is not in the sweep")


def results_frame(records: Iterable[ResultRecord]) -> pd.DataFrame:
    """Flat table of the records (without predictions), for printing and plots."""
    rows = [
        {
            "alpha": r.alpha,
            "rule": r.rule.value,
            "split": r.split,
            "lambda": r.lam,
            "deviance": r.deviance,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=["alpha", "rule", "split", "lambda", "deviance"])
