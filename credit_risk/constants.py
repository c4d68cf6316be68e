"""
Fixed names and grids shared by the credit sweep.
"""

from enum import Enum

import numpy as np

LABEL_COLUMN = "Class"
POSITIVE_LABEL = "Bad"
NEGATIVE_LABEL = "Good"

TRAIN_FRACTION = 0.8
N_FOLDS = 10

# 0.00, 0.05, ..., 1.00; rounded so grid values compare exactly
ALPHA_GRID: tuple[float, ...] = tuple(
    float(a) for a in np.round(np.linspace(0.0, 1.0, 21), 2)
)

N_LAMBDA = 30
MAX_ITER = 5000
TOL = 1e-4

# held-out probabilities are clipped to this range when scoring CV folds
CV_PROB_EPS = 1e-5


class SelectionRule(str, Enum):
    """How a single lambda is picked from a cross-validated path."""

    MIN_ERROR = "lambda.min"
    ONE_SE = "lambda.1se"


SELECTION_RULES: tuple[SelectionRule, ...] = (
    SelectionRule.MIN_ERROR,
    SelectionRule.ONE_SE,
)
