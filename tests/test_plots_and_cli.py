import pandas as pd
import pytest

import main
from credit_risk.data_prep import build_design_matrix
from credit_risk.partition import assign_folds
from credit_risk.plots import plot_cv_curve, plot_training_deviance
from credit_risk.sweep import fit_cv_path


def test_training_deviance_plot(tmp_path):
    frame = pd.DataFrame(
        {
            "alpha": [0.0, 0.5, 1.0, 0.0, 0.5, 1.0],
            "rule": ["lambda.min"] * 3 + ["lambda.1se"] * 3,
            "split": ["train"] * 6,
            "lambda": [0.01] * 6,
            "deviance": [1.0, 0.9, 0.95, 1.1, 1.0, 1.05],
        }
    )
    out = plot_training_deviance(frame, tmp_path / "dev.png", best_alpha=0.5)
    assert out.exists() and out.stat().st_size > 0


def test_cv_curve_plot(tmp_path, credit_frame):
    X, y, _ = build_design_matrix(credit_frame)
    folds = assign_folds(y.values, 4, seed=0)
    path = fit_cv_path(X, y.values, folds, 0.5, seed=0, n_lambda=5, max_iter=200, tol=1e-3)
    out = plot_cv_curve(path, tmp_path / "cv.png")
    assert out.exists() and out.stat().st_size > 0


def test_cli_requires_seed(credit_csv):
    with pytest.raises(SystemExit):
        main.build_arg_parser().parse_args(["--csv-path", str(credit_csv)])


def test_cli_end_to_end(tmp_path, credit_csv, capsys):
    args = main.build_arg_parser().parse_args(
        [
            "--csv-path",
            str(credit_csv),
            "--seed",
            "42",
            "--folds",
            "4",
            "--n-lambda",
            "5",
            "--max-iter",
            "300",
            "--tol",
            "1e-3",
            "--results-csv",
            str(tmp_path / "out" / "results.csv"),
            "--plots-dir",
            str(tmp_path / "plots"),
            "--log-level",
            "WARNING",
        ]
    )
    result = main.main(args)
    printed = capsys.readouterr().out
    assert "Best alpha (lambda.1se)" in printed
    assert "Test deviance [lambda.min]" in printed

    table = pd.read_csv(tmp_path / "out" / "results.csv")
    assert len(table) == 2 * sum(e.ok for e in result.entries) + 2
    assert set(table["split"]) == {"train", "test"}
    assert (tmp_path / "plots" / "training_deviance.png").exists()
    assert (tmp_path / "plots" / "cv_curve_best_alpha.png").exists()
