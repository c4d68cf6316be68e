from __future__ import annotations

"""
Run configuration for the sweep. The seed has no default: every run names it.
"""

from dataclasses import dataclass, field
from pathlib import Path

from .constants import (
    ALPHA_GRID,
    LABEL_COLUMN,
    MAX_ITER,
    N_FOLDS,
    N_LAMBDA,
    NEGATIVE_LABEL,
    POSITIVE_LABEL,
    TOL,
    TRAIN_FRACTION,
)

INVALID_PROBABILITY_MODES = ("raise", "clip")


@dataclass(frozen=True)
class PipelineConfig:
    csv_path: Path
    seed: int
    fold_seed: int | None = None
    label_column: str = LABEL_COLUMN
    positive_label: str = POSITIVE_LABEL
    negative_label: str = NEGATIVE_LABEL
    train_fraction: float = TRAIN_FRACTION
    n_folds: int = N_FOLDS
    alphas: tuple[float, ...] = field(default=ALPHA_GRID)
    n_lambda: int = N_LAMBDA
    lambda_min_ratio: float | None = None
    max_iter: int = MAX_ITER
    tol: float = TOL
    n_jobs: int = 1
    strict_convergence: bool = False
    on_invalid_probability: str = "raise"

    def __post_init__(self):
        if isinstance(self.seed, bool) or not isinstance(self.seed, int):
            raise ValueError(f"seed must be an int, got {self.seed!r}")
        if self.fold_seed is not None and not isinstance(self.fold_seed, int):
            raise ValueError(f"fold_seed must be an int, got {self.fold_seed!r}")
        if not 0.0 < self.train_fraction < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {self.train_fraction}")
        if self.n_folds < 2:
            raise ValueError(f"n_folds must be at least 2, got {self.n_folds}")
        if not self.alphas:
            raise ValueError("alphas must not be empty")
        if any(not 0.0 <= a <= 1.0 for a in self.alphas):
            raise ValueError(f"alphas must lie in [0, 1], got {self.alphas}")
        if self.n_lambda < 2:
            raise ValueError(f"n_lambda must be at least 2, got {self.n_lambda}")
        if self.on_invalid_probability not in INVALID_PROBABILITY_MODES:
            raise ValueError(
                f"on_invalid_probability must be one of {INVALID_PROBABILITY_MODES}"
            )
        object.__setattr__(self, "csv_path", Path(self.csv_path))
        object.__setattr__(self, "alphas", tuple(float(a) for a in self.alphas))

    @property
    def effective_fold_seed(self) -> int:
        return self.seed if self.fold_seed is None else self.fold_seed
