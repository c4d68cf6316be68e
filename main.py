from __future__ import annotations

"""
CLI entrypoint for the credit sweep: fit an elastic-net logistic path for every
alpha in the grid, report training deviance per (alpha, rule), then test
deviance for the best alpha.
"""

import argparse
from pathlib import Path

from credit_risk import PipelineConfig, results_frame, run_pipeline
from credit_risk.constants import (
    LABEL_COLUMN,
    MAX_ITER,
    N_FOLDS,
    N_LAMBDA,
    NEGATIVE_LABEL,
    POSITIVE_LABEL,
    TOL,
    TRAIN_FRACTION,
)
from credit_risk.evaluate import find_entry
from credit_risk.logging_utils import setup_logger
from credit_risk.pipeline import PipelineResult
from credit_risk.plots import plot_cv_curve, plot_training_deviance


def describe_features(meta: dict):
    """Print a short summary of dataset size and balance."""
    print(f"Rows: {meta['num_rows']}, features: {meta['feature_count']}")
    print(f"Positive (bad credit) rate: {meta['positive_rate']:.3f}")
    if meta["dropped_zero_variance"]:
        print(f"Dropped zero-variance columns: {meta['dropped_zero_variance']}")


def print_metrics(label: str, metrics: dict):
    """Nicely format the metric dict produced by compute_classification_metrics."""
    cm = metrics["confusion_matrix"]
    print(
        f"[{label}] Acc {metrics['accuracy']:.3f} | "
        f"Prec {metrics['precision']:.3f} | Rec {metrics['recall']:.3f} | "
        f"F1 {metrics['f1']:.3f} | ROC-AUC {metrics['roc_auc']:.3f}"
    )
    print(f"    Confusion matrix [[TN, FP], [FN, TP]]: {cm.tolist()}")


def build_arg_parser():
    """CLI parser with knobs for splits, the path fit, and outputs."""
    parser = argparse.ArgumentParser(
        description="Sweep elastic-net logistic regression over alpha and compare deviance."
    )
    parser.add_argument("--csv-path", type=Path, default=Path("data/german_credit.csv"))
    parser.add_argument(
        "--seed",
        type=int,
        required=True,
        help="Seed for the train/test split and the solver.",
    )
    parser.add_argument(
        "--fold-seed",
        type=int,
        default=None,
        help="Seed for the CV fold assignment (defaults to --seed).",
    )
    parser.add_argument("--label-column", default=LABEL_COLUMN)
    parser.add_argument("--positive-label", default=POSITIVE_LABEL)
    parser.add_argument("--negative-label", default=NEGATIVE_LABEL)
    parser.add_argument("--train-fraction", type=float, default=TRAIN_FRACTION)
    parser.add_argument("--folds", type=int, default=N_FOLDS, help="Number of CV folds.")
    parser.add_argument("--n-lambda", type=int, default=N_LAMBDA, help="Lambdas per path.")
    parser.add_argument("--lambda-min-ratio", type=float, default=None)
    parser.add_argument("--max-iter", type=int, default=MAX_ITER, help="Max saga epochs per fit.")
    parser.add_argument("--tol", type=float, default=TOL)
    parser.add_argument("--n-jobs", type=int, default=1, help="Parallel alpha fits.")
    parser.add_argument(
        "--strict-convergence",
        action="store_true",
        help="Treat an alpha whose solver hits max_iter as failed.",
    )
    parser.add_argument(
        "--on-invalid-probability",
        choices=["raise", "clip"],
        default="raise",
        help="What to do when a probability of exactly 0/1 meets the opposite label.",
    )
    parser.add_argument("--plots-dir", type=Path, default=None, help="Write charts here.")
    parser.add_argument("--results-csv", type=Path, default=None, help="Write result table here.")
    parser.add_argument("--log-level", default=None)
    return parser


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    return PipelineConfig(
        csv_path=args.csv_path,
        seed=args.seed,
        fold_seed=args.fold_seed,
        label_column=args.label_column,
        positive_label=args.positive_label,
        negative_label=args.negative_label,
        train_fraction=args.train_fraction,
        n_folds=args.folds,
        n_lambda=args.n_lambda,
        lambda_min_ratio=args.lambda_min_ratio,
        max_iter=args.max_iter,
        tol=args.tol,
        n_jobs=args.n_jobs,
        strict_convergence=args.strict_convergence,
        on_invalid_probability=args.on_invalid_probability,
    )


def report(result: PipelineResult):
    describe_features(result.meta)
    print(f"Train size: {len(result.train_idx)}, Test size: {len(result.test_idx)}")

    if result.failures:
        print("\nFailed alphas:")
        for entry in result.failures:
            print(f"  {entry.alpha:.2f}: {entry.error}")

    train = results_frame(result.train_records)
    table = train.pivot(index="alpha", columns="rule", values="deviance")
    print("\nTraining deviance per alpha:")
    print(table.to_string(float_format=lambda v: f"{v:.4f}"))

    print(f"\nBest alpha (lambda.1se): {result.best_alpha:.2f}")
    print(
        f"Null deviance: train {result.baseline_deviance['train']:.4f}, "
        f"test {result.baseline_deviance['test']:.4f}"
    )
    for record in result.test_records:
        print(
            f"Test deviance [{record.rule.value}]: {record.deviance:.4f} "
            f"(lambda={record.lam:.5f})"
        )
        print_metrics(f"test, {record.rule.value}", result.test_metrics[record.rule])

    for rule, summary in result.coefficients.items():
        print(
            f"\nCoefficients [{rule.value}]: {summary['n_features'] - summary['n_zero']}"
            f"/{summary['n_features']} non-zero"
        )
        print("Top positive (raise default odds):")
        print(summary["positive"])
        print("Top negative:")
        print(summary["negative"])


def main(args: argparse.Namespace | None = None):
    args = args or build_arg_parser().parse_args()
    setup_logger(level=args.log_level)

    result = run_pipeline(config_from_args(args))
    report(result)

    if args.results_csv is not None:
        frame = results_frame(result.train_records + result.test_records)
        args.results_csv.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(args.results_csv, index=False)
        print(f"\nResult table written to {args.results_csv}")

    if args.plots_dir is not None:
        args.plots_dir.mkdir(parents=True, exist_ok=True)
        frame = results_frame(result.train_records)
        plot_training_deviance(
            frame, args.plots_dir / "training_deviance.png", best_alpha=result.best_alpha
        )
        best_path = find_entry(result.entries, result.best_alpha).path
        plot_cv_curve(best_path, args.plots_dir / "cv_curve_best_alpha.png")
        print(f"Plots written to {args.plots_dir}")
    return result


if __name__ == "__main__":
    main()
