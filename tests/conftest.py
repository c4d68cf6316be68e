import numpy as np
import pandas as pd
import pytest

from credit_risk import PipelineConfig


def make_credit_frame(n_rows: int = 240, seed: int = 0) -> pd.DataFrame:
    """Small credit-like table with a real signal in duration, amount and purpose."""
    rng = np.random.default_rng(seed)
    duration = rng.integers(6, 60, size=n_rows)
    amount = rng.gamma(2.0, 1500.0, size=n_rows)
    age = rng.integers(19, 75, size=n_rows)
    purpose = rng.choice(["car", "education", "tv"], size=n_rows)
    housing = rng.choice(["free", "own", "rent"], size=n_rows)

    logit = (
        -1.2
        + 0.05 * (duration - 30)
        + 0.0002 * (amount - 3000)
        - 0.02 * (age - 40)
        + 0.8 * (purpose == "education")
    )
    prob = 1.0 / (1.0 + np.exp(-logit))
    bad = rng.random(n_rows) < prob

    return pd.DataFrame(
        {
            "duration": duration,
            "amount": amount,
            "age": age,
            "purpose": purpose,
            "housing": housing,
            "Class": np.where(bad, "Bad", "Good"),
        }
    )


@pytest.fixture
def credit_frame():
    return make_credit_frame()


@pytest.fixture
def credit_csv(tmp_path, credit_frame):
    path = tmp_path / "credit.csv"
    credit_frame.to_csv(path, index=False)
    return path


@pytest.fixture
def fast_config(credit_csv):
    """Full alpha grid, but short paths and few folds so the sweep stays quick."""
    return PipelineConfig(
        csv_path=credit_csv,
        seed=42,
        fold_seed=7,
        n_folds=5,
        n_lambda=8,
        max_iter=500,
        tol=1e-3,
    )
