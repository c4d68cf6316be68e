from __future__ import annotations

"""
Elastic-net logistic regression paths, cross-validated on a fixed fold
assignment, fitted once per mixing coefficient alpha.

The solver is scikit-learn's saga; this module only drives it along a lambda
sequence and does the CV bookkeeping (mean/se per lambda, lambda.min and
lambda.1se).
"""

import logging
import warnings
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import LogisticRegression

from .constants import ALPHA_GRID, CV_PROB_EPS, MAX_ITER, N_LAMBDA, TOL, SelectionRule
from .metrics import binomial_deviance
from .partition import fold_splits

logger = logging.getLogger(__name__)

# lambda_max is undefined for a pure ridge penalty; use this alpha instead
_MIN_ALPHA_FOR_LAMBDA_MAX = 1e-3
_PROB_EPS = np.finfo(np.float64).eps


def _sigmoid(z: np.ndarray) -> np.ndarray:
    z = np.clip(z, -500, 500)
    return 1.0 / (1.0 + np.exp(-z))


def lambda_sequence(
    X: np.ndarray,
    y: np.ndarray,
    alpha: float,
    n_lambda: int = N_LAMBDA,
    lambda_min_ratio: float | None = None,
) -> np.ndarray:
    """
    Decreasing, log-spaced lambdas starting at the smallest value that zeroes
    every coefficient for this alpha.
    """
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    n, p = X.shape
    centered = X - X.mean(axis=0)
    lambda_max = np.max(np.abs(centered.T @ (y - y.mean()))) / (
        n * max(alpha, _MIN_ALPHA_FOR_LAMBDA_MAX)
    )
    if not np.isfinite(lambda_max) or lambda_max <= 0:
        raise ValueError("features carry no signal about the label (lambda_max is 0)")
    ratio = lambda_min_ratio if lambda_min_ratio is not None else (1e-4 if n > p else 1e-2)
    return np.logspace(np.log10(lambda_max), np.log10(lambda_max * ratio), n_lambda)


def _make_estimator(alpha: float, max_iter: int, tol: float, seed: int) -> LogisticRegression:
    return LogisticRegression(
        penalty="elasticnet",
        solver="saga",
        l1_ratio=alpha,
        warm_start=True,
        max_iter=max_iter,
        tol=tol,
        random_state=seed,
    )


def _fit_path(
    X: np.ndarray,
    y: np.ndarray,
    lambdas: np.ndarray,
    alpha: float,
    max_iter: int,
    tol: float,
    seed: int,
) -> tuple[np.ndarray, np.ndarray, bool]:
    """Fit along the lambda sequence, warm-starting each fit from the previous one."""
    n = len(y)
    estimator = _make_estimator(alpha, max_iter, tol, seed)
    coefs = np.zeros((len(lambdas), X.shape[1]))
    intercepts = np.zeros(len(lambdas))

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        for i, lam in enumerate(lambdas):
            # sklearn scales the loss by C instead of the penalty by lambda
            estimator.set_params(C=1.0 / (n * lam))
            estimator.fit(X, y)
            coefs[i] = estimator.coef_[0]
            intercepts[i] = estimator.intercept_[0]
    converged = True
    for w in caught:
        if issubclass(w.category, ConvergenceWarning):
            converged = False
        else:
            logger.debug("alpha=%.2f: %s: %s", alpha, w.category.__name__, w.message)
    return coefs, intercepts, converged


@dataclass
class CVPath:
    """A cross-validated regularization path for one alpha."""

    alpha: float
    lambdas: np.ndarray
    cv_mean: np.ndarray
    cv_se: np.ndarray
    lambda_min: float
    lambda_1se: float
    coefs: np.ndarray
    intercepts: np.ndarray
    folds: np.ndarray
    feature_names: list[str] = field(default_factory=list)
    converged: bool = True

    def lambda_for(self, rule: SelectionRule | str) -> float:
        rule = SelectionRule(rule)
        if rule is SelectionRule.MIN_ERROR:
            return self.lambda_min
        return self.lambda_1se

    def _index(self, lam: float) -> int:
        matches = np.flatnonzero(np.isclose(self.lambdas, lam, rtol=1e-12, atol=0.0))
        if len(matches) == 0:
            raise ValueError(f"lambda={lam} is not on the fitted path")
        return int(matches[0])

    def predict_proba(self, X, lam: float) -> np.ndarray:
        """P(default) per row at a lambda from the path."""
        i = self._index(lam)
        X_arr = np.asarray(X, dtype=np.float64)
        if X_arr.ndim != 2 or X_arr.shape[1] != self.coefs.shape[1]:
            raise ValueError(
                f"expected {self.coefs.shape[1]} feature columns, got shape {X_arr.shape}"
            )
        probs = _sigmoid(X_arr @ self.coefs[i] + self.intercepts[i])
        # large margins round to exactly 0 or 1 in float64
        return np.clip(probs, _PROB_EPS, 1 - _PROB_EPS)

    def coef_at(self, lam: float) -> pd.Series:
        i = self._index(lam)
        names = self.feature_names or [f"x{j}" for j in range(self.coefs.shape[1])]
        return pd.Series(self.coefs[i], index=names)

    def n_nonzero(self, lam: float) -> int:
        return int(np.count_nonzero(self.coefs[self._index(lam)]))


def _select_lambdas(
    lambdas: np.ndarray, cv_mean: np.ndarray, cv_se: np.ndarray
) -> tuple[float, float]:
    best = cv_mean.min()
    lambda_min = float(lambdas[cv_mean <= best].max())
    i_min = int(np.flatnonzero(lambdas == lambda_min)[0])
    threshold = best + cv_se[i_min]
    lambda_1se = float(lambdas[cv_mean <= threshold].max())
    return lambda_min, lambda_1se


def fit_cv_path(
    X,
    y,
    folds: np.ndarray,
    alpha: float,
    *,
    seed: int,
    n_lambda: int = N_LAMBDA,
    lambda_min_ratio: float | None = None,
    max_iter: int = MAX_ITER,
    tol: float = TOL,
) -> CVPath:
    """
    Cross-validate an elastic-net path on the given fold ids, then refit the
    whole path on every row.
    """
    feature_names = [str(c) for c in X.columns] if isinstance(X, pd.DataFrame) else []
    X_arr = np.asarray(X, dtype=np.float64)
    y_arr = np.asarray(y, dtype=np.int64)
    folds = np.asarray(folds)
    if len(folds) != len(y_arr) or X_arr.shape[0] != len(y_arr):
        raise ValueError(
            f"row mismatch: X has {X_arr.shape[0]}, y has {len(y_arr)}, folds has {len(folds)}"
        )

    lambdas = lambda_sequence(X_arr, y_arr, alpha, n_lambda, lambda_min_ratio)
    splits = fold_splits(folds)
    if len(splits) < 2:
        raise ValueError("need at least two folds")

    fold_dev = np.empty((len(splits), len(lambdas)))
    weights = np.empty(len(splits))
    converged = True
    for k, (fit_rows, held_rows) in enumerate(splits):
        coefs, intercepts, ok = _fit_path(
            X_arr[fit_rows], y_arr[fit_rows], lambdas, alpha, max_iter, tol, seed
        )
        converged = converged and ok
        held_X = X_arr[held_rows]
        for i in range(len(lambdas)):
            probs = np.clip(
                _sigmoid(held_X @ coefs[i] + intercepts[i]), CV_PROB_EPS, 1 - CV_PROB_EPS
            )
            fold_dev[k, i] = binomial_deviance(probs, y_arr[held_rows])
        weights[k] = len(held_rows)

    cv_mean = np.average(fold_dev, axis=0, weights=weights)
    cv_se = np.sqrt(
        np.average((fold_dev - cv_mean) ** 2, axis=0, weights=weights) / (len(splits) - 1)
    )
    if not np.all(np.isfinite(cv_mean)):
        raise FloatingPointError(f"non-finite CV deviance for alpha={alpha}")
    lambda_min, lambda_1se = _select_lambdas(lambdas, cv_mean, cv_se)

    coefs, intercepts, ok = _fit_path(X_arr, y_arr, lambdas, alpha, max_iter, tol, seed)
    return CVPath(
        alpha=float(alpha),
        lambdas=lambdas,
        cv_mean=cv_mean,
        cv_se=cv_se,
        lambda_min=lambda_min,
        lambda_1se=lambda_1se,
        coefs=coefs,
        intercepts=intercepts,
        folds=folds,
        feature_names=feature_names,
        converged=converged and ok,
    )


@dataclass(frozen=True)
class SweepEntry:
    alpha: float
    path: CVPath | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.path is not None


def _fit_one(X, y, folds, alpha: float, strict_convergence: bool, **fit_kwargs) -> SweepEntry:
    try:
        path = fit_cv_path(X, y, folds, alpha, **fit_kwargs)
    except (ValueError, FloatingPointError, np.linalg.LinAlgError) as exc:
        return SweepEntry(alpha=alpha, error=f"{type(exc).__name__}: {exc}")
    if strict_convergence and not path.converged:
        return SweepEntry(alpha=alpha, error="solver did not converge")
    return SweepEntry(alpha=alpha, path=path)


def run_sweep(
    X,
    y,
    folds: np.ndarray,
    alphas=ALPHA_GRID,
    *,
    seed: int,
    n_jobs: int = 1,
    strict_convergence: bool = False,
    n_lambda: int = N_LAMBDA,
    lambda_min_ratio: float | None = None,
    max_iter: int = MAX_ITER,
    tol: float = TOL,
) -> list[SweepEntry]:
    """
    One cross-validated path per alpha, all on the same folds. A failing alpha
    is recorded as an entry with ``error`` set; the rest of the grid still runs.
    Entries come back in grid order.
    """
    folds = np.array(folds, dtype=np.int64)
    folds.setflags(write=False)

    entries = Parallel(n_jobs=n_jobs)(
        delayed(_fit_one)(
            X,
            y,
            folds,
            float(alpha),
            strict_convergence,
            seed=seed,
            n_lambda=n_lambda,
            lambda_min_ratio=lambda_min_ratio,
            max_iter=max_iter,
            tol=tol,
        )
        for alpha in alphas
    )

    for entry in entries:
        if not entry.ok:
            logger.warning("alpha=%.2f failed: %s", entry.alpha, entry.error)
        elif not entry.path.converged:
            logger.info("alpha=%.2f: solver hit max_iter on part of the path", entry.alpha)
    logger.info(
        "Sweep finished: %d/%d alphas fitted",
        sum(entry.ok for entry in entries),
        len(entries),
    )
    return list(entries)
