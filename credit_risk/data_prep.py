from __future__ import annotations

"""
Data preparation: load the cleaned credit table and turn it into a standardized
design matrix plus a 0/1 default label.
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from .constants import LABEL_COLUMN, NEGATIVE_LABEL, POSITIVE_LABEL
from .errors import FeatureBuildError

logger = logging.getLogger(__name__)

# share of parseable values above which a text column counts as a broken numeric column
MOSTLY_NUMERIC = 0.9


def _clean_name(name: str) -> str:
    """Lightweight normalizer for feature names."""
    return (
        str(name)
        .strip()
        .replace(" ", "_")
        .replace("&", "and")
        .replace("/", "_")
        .replace(",", "")
        .replace(".", "_")
    )


def load_dataset(
    csv_path: Path,
    label_column: str = LABEL_COLUMN,
    labels: tuple[str, str] = (NEGATIVE_LABEL, POSITIVE_LABEL),
) -> pd.DataFrame:
    """
    Read the pre-cleaned dataset. Only the label column is checked here; the
    remaining columns are taken as they come.
    """
    df = pd.read_csv(csv_path)
    validate_labels(df, label_column, labels)
    logger.info("Loaded %d rows x %d columns from %s", len(df), df.shape[1], csv_path)
    return df


def validate_labels(
    df: pd.DataFrame, label_column: str, labels: tuple[str, str]
) -> None:
    if label_column not in df.columns:
        raise FeatureBuildError(label_column, "label column is missing")
    found = set(df[label_column].dropna().astype(str).unique())
    if df[label_column].isna().any():
        raise FeatureBuildError(label_column, "label column has missing values")
    unexpected = found - set(labels)
    if unexpected:
        raise FeatureBuildError(
            label_column, f"unexpected labels {sorted(unexpected)}, expected {list(labels)}"
        )
    if len(found) < 2:
        raise FeatureBuildError(label_column, f"only one label present: {sorted(found)}")


def _is_categorical(series: pd.Series) -> bool:
    return (
        pd.api.types.is_object_dtype(series)
        or pd.api.types.is_string_dtype(series)
        or isinstance(series.dtype, pd.CategoricalDtype)
        or pd.api.types.is_bool_dtype(series)
    )


def _reject_malformed_numbers(col, series: pd.Series) -> None:
    """A text column that is mostly numbers holds malformed numeric values, not categories."""
    if pd.api.types.is_bool_dtype(series) or isinstance(series.dtype, pd.CategoricalDtype):
        return
    parsed = pd.to_numeric(series, errors="coerce")
    failed = parsed.isna()
    if failed.any() and (~failed).mean() >= MOSTLY_NUMERIC:
        bad_value = series[failed].iloc[0]
        raise FeatureBuildError(
            col, f"{int(failed.sum())} value(s) are not numeric, first one {bad_value!r}"
        )


def _expand_categoricals(features: pd.DataFrame) -> pd.DataFrame:
    """Indicator columns for every categorical attribute, first level dropped."""
    categorical = [col for col in features.columns if _is_categorical(features[col])]
    if not categorical:
        return features
    for col in categorical:
        try:
            features[col].unique()
        except TypeError as exc:
            raise FeatureBuildError(col, f"values cannot be used as categories ({exc})") from exc
        _reject_malformed_numbers(col, features[col])
    return pd.get_dummies(
        features, columns=categorical, drop_first=True, prefix_sep="", dtype=float
    )


def _coerce_numeric(expanded: pd.DataFrame) -> pd.DataFrame:
    out = {}
    for col in expanded.columns:
        values = expanded[col]
        if not pd.api.types.is_numeric_dtype(values) or pd.api.types.is_complex_dtype(values):
            raise FeatureBuildError(col, f"dtype {values.dtype} is not numeric after expansion")
        out[col] = values.astype(np.float64)
    return pd.DataFrame(out, index=expanded.index)


def build_design_matrix(
    df: pd.DataFrame,
    label_column: str = LABEL_COLUMN,
    positive_label: str = POSITIVE_LABEL,
):
    """
    Build the standardized design matrix X and the label vector y (1 = positive
    label, i.e. a bad credit).

    Categorical attributes are expanded into indicator columns (no intercept
    column), constant columns are dropped, and every remaining column is scaled
    to zero mean and unit variance.
    """
    if label_column not in df.columns:
        raise FeatureBuildError(label_column, "label column is missing")

    y = (df[label_column].astype(str) == positive_label).astype(np.int64)
    y.name = "default"

    features = df.drop(columns=[label_column])
    if features.shape[1] == 0:
        raise FeatureBuildError(label_column, "no feature columns besides the label")
    for col in features.columns:
        n_missing = int(features[col].isna().sum())
        if n_missing:
            raise FeatureBuildError(col, f"{n_missing} missing values")

    expanded = _expand_categoricals(features)
    expanded.columns = [_clean_name(c) for c in expanded.columns]
    if expanded.columns.duplicated().any():
        dup = expanded.columns[expanded.columns.duplicated()][0]
        raise FeatureBuildError(dup, "duplicate feature name after expansion")

    X = _coerce_numeric(expanded)

    zero_var_cols = list(X.columns[X.nunique() <= 1])
    if zero_var_cols:
        X = X.drop(columns=zero_var_cols)
    if X.shape[1] == 0:
        raise FeatureBuildError(label_column, "every feature column is constant")

    scaler = StandardScaler()
    X = pd.DataFrame(scaler.fit_transform(X.values), index=X.index, columns=X.columns)

    meta = {
        "num_rows": len(X),
        "feature_count": X.shape[1],
        "positive_rate": float(y.mean()),
        "dropped_zero_variance": zero_var_cols,
    }
    logger.info(
        "Design matrix: %d rows, %d features, positive rate %.3f",
        meta["num_rows"],
        meta["feature_count"],
        meta["positive_rate"],
    )
    return X, y, meta
