import sys
import os
from pathlib import Path

# Add parent directory to sys.path
sys.path.append(os.path.abspath(".."))

from credit_risk import PipelineConfig, results_frame, run_pipeline
from credit_risk.plots import plot_cv_curve, plot_training_deviance

# Configuration
CSV_PATH = Path("../data/german_credit.csv")
SEED = 42
FOLD_SEED = 1234
OUT_DIR = Path("figures")


def main():
    print("Running the alpha sweep...")
    result = run_pipeline(PipelineConfig(csv_path=CSV_PATH, seed=SEED, fold_seed=FOLD_SEED))
    OUT_DIR.mkdir(exist_ok=True)

    frame = results_frame(result.train_records)
    plot_training_deviance(frame, OUT_DIR / "training_deviance.png", best_alpha=result.best_alpha)

    for entry in result.entries:
        if entry.ok and entry.alpha in (0.0, result.best_alpha, 1.0):
            plot_cv_curve(entry.path, OUT_DIR / f"cv_curve_alpha_{entry.alpha:.2f}.png")

    results_frame(result.train_records + result.test_records).to_csv(
        OUT_DIR / "results.csv", index=False
    )
    print(f"Done. Figures in {OUT_DIR}")


if __name__ == "__main__":
    main()
