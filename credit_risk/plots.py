"""
Read-only charts of sweep results. Nothing here feeds back into the pipeline.
"""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402

from .sweep import CVPath  # noqa: E402


def plot_training_deviance(
    frame: pd.DataFrame, filename: Path, best_alpha: float | None = None
) -> Path:
    """Training deviance against alpha, one line per selection rule."""
    train = frame[frame["split"] == "train"]
    plt.figure(figsize=(8, 5))
    for rule, group in train.groupby("rule", sort=True):
        group = group.sort_values("alpha")
        plt.plot(group["alpha"], group["deviance"], marker="o", lw=1.5, label=rule)
    if best_alpha is not None:
        plt.axvline(best_alpha, color="grey", linestyle="--", label=f"best alpha = {best_alpha:.2f}")
    plt.xlabel("alpha (L1 mixing)")
    plt.ylabel("Binomial deviance (train)")
    plt.title("Training deviance across the alpha grid")
    plt.legend(loc="best")
    plt.grid(True)
    plt.tight_layout()
    plt.savefig(filename)
    plt.close()
    return Path(filename)


def plot_cv_curve(path: CVPath, filename: Path) -> Path:
    """CV deviance +/- one standard error against log(lambda)."""
    log_lam = np.log(path.lambdas)
    plt.figure(figsize=(8, 5))
    plt.errorbar(
        log_lam, path.cv_mean, yerr=path.cv_se, fmt="o", color="darkred", ecolor="grey", ms=3
    )
    plt.axvline(np.log(path.lambda_min), color="navy", linestyle="--", label="lambda.min")
    plt.axvline(np.log(path.lambda_1se), color="darkorange", linestyle="--", label="lambda.1se")
    plt.xlabel("log(lambda)")
    plt.ylabel("Binomial deviance (CV)")
    plt.title(f"Cross-validation curve, alpha = {path.alpha:.2f}")
    plt.legend(loc="best")
    plt.grid(True)
    plt.tight_layout()
    plt.savefig(filename)
    plt.close()
    return Path(filename)
