import math

import numpy as np
import pandas as pd
import pytest

from credit_risk.errors import DevianceError
from credit_risk.metrics import (
    binomial_deviance,
    compute_classification_metrics,
    null_deviance,
    summarize_coefficients,
)


def test_deviance_of_coin_flip():
    assert binomial_deviance([0.5], [1]) == pytest.approx(2 * math.log(2))
    assert binomial_deviance([0.5], [1]) == pytest.approx(1.386, abs=1e-3)


def test_deviance_is_a_mean_of_rows():
    p = np.array([0.9, 0.2])
    a = np.array([1, 0])
    expected = np.mean([-2 * np.log(0.9), -2 * np.log(0.8)])
    assert binomial_deviance(p, a) == pytest.approx(expected)


def test_deviance_is_non_negative():
    rng = np.random.default_rng(0)
    for _ in range(20):
        p = rng.uniform(1e-6, 1 - 1e-6, size=50)
        a = rng.integers(0, 2, size=50)
        assert binomial_deviance(p, a) >= 0.0


def test_deviance_near_perfect_predictions_is_near_zero():
    a = np.array([1, 0, 1, 0])
    p = np.array([1 - 1e-12, 1e-12, 1 - 1e-12, 1e-12])
    assert binomial_deviance(p, a) == pytest.approx(0.0, abs=1e-10)


def test_guarded_terms_allow_exact_boundaries():
    # p=1 for a=1 and p=0 for a=0 only touch the 0*log(0) terms
    assert binomial_deviance([1.0, 0.0], [1, 0]) == 0.0


def test_deviance_returns_python_float():
    assert type(binomial_deviance(np.array([0.3]), np.array([0]))) is float


@pytest.mark.parametrize("p, a, row", [([0.5, 0.0], [1, 1], 1), ([1.0], [0], 0)])
def test_unguarded_log_zero_raises(p, a, row):
    with pytest.raises(DevianceError) as excinfo:
        binomial_deviance(p, a)
    assert excinfo.value.row == row


def test_clip_mode_saturates():
    value = binomial_deviance([0.0, 1.0], [1, 0], on_invalid="clip", eps=1e-15)
    assert np.isfinite(value)
    assert value == pytest.approx(-2 * np.log(1e-15), rel=1e-2)


@pytest.mark.parametrize("p", [[np.nan], [-0.1], [1.2]])
def test_out_of_range_probability_raises(p):
    with pytest.raises(DevianceError):
        binomial_deviance(p, [1])


def test_non_binary_label_raises():
    with pytest.raises(DevianceError, match="not 0 or 1"):
        binomial_deviance([0.4, 0.4], [1, 2])


def test_shape_mismatch_and_empty_raise():
    with pytest.raises(DevianceError):
        binomial_deviance([0.4, 0.4], [1])
    with pytest.raises(DevianceError):
        binomial_deviance([], [])


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        binomial_deviance([0.4], [1], on_invalid="ignore")


def test_null_deviance_uses_training_prevalence():
    y_train = np.array([1, 0, 0, 0])
    y_target = np.array([1, 0])
    expected = np.mean([-2 * np.log(0.25), -2 * np.log(0.75)])
    assert null_deviance(y_train, y_target) == pytest.approx(expected)


def test_classification_metrics():
    y = np.array([0, 0, 1, 1])
    probs = np.array([0.1, 0.6, 0.4, 0.9])
    out = compute_classification_metrics(y, probs)
    assert out["accuracy"] == pytest.approx(0.5)
    assert out["roc_auc"] == pytest.approx(0.75)
    assert out["confusion_matrix"].tolist() == [[1, 1], [1, 1]]


def test_summarize_coefficients_skips_zeros():
    coef = pd.Series({"a": 0.5, "b": -0.2, "c": 0.0, "d": 1.5, "e": -0.9})
    summary = summarize_coefficients(coef, top_k=1)
    assert list(summary["positive"].index) == ["d"]
    assert list(summary["negative"].index) == ["e"]
    assert summary["n_zero"] == 1
    assert summary["n_features"] == 5
