import argparse
import json
import sys
from pathlib import Path

import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from io_utils import build_config, load_parameters
from simulator import CLASS_LEVELS
from workflow import predictions_table, results_table, run_resampling_comparison


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fit QDA with and without sub-sampling on repeated stratified CV folds."
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=Path("outputs") / "simulator" / "simulated_dataset.csv",
        help="Path to the simulated dataset CSV.",
    )
    parser.add_argument(
        "--params",
        type=Path,
        default=Path("input_parameters") / "experiment_parameters.json",
        help="Path to experiment_parameters.json.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("analytics") / "data_analysis" / "artifacts" / "02_resampling",
        help="Directory to write fold results.",
    )
    parser.add_argument("--folds", type=int, default=None, help="Override number of folds per repeat.")
    parser.add_argument("--repeats", type=int, default=None, help="Override number of repeats.")
    parser.add_argument("--seed", type=int, default=None, help="Override the resampling seed.")
    parser.add_argument(
        "--sampling",
        type=str,
        choices=["down", "up"],
        default=None,
        help="Override the sampling method used for the sampled condition.",
    )
    parser.add_argument("--cutoff", type=float, default=None, help="Override the probability cutoff.")
    parser.add_argument("--n-jobs", type=int, default=None, help="Folds evaluated in parallel (-1 = all cores).")
    parser.add_argument(
        "--save-predictions",
        action="store_true",
        help="Also write every assessment-set prediction (both conditions).",
    )
    return parser.parse_args()


def _read_dataset(path: Path, outcome: str) -> pd.DataFrame:
    df = pd.read_csv(path)
    if outcome not in df.columns:
        raise ValueError(f"Outcome column '{outcome}' not found in {path}.")
    observed = sorted(df[outcome].astype(str).unique())
    levels = CLASS_LEVELS if set(observed).issubset(CLASS_LEVELS) else observed
    df[outcome] = pd.Categorical(df[outcome].astype(str), categories=levels)
    return df


def main() -> None:
    args = parse_args()

    if not args.input.exists():
        raise FileNotFoundError(f"Missing input dataset: {args.input}. Run main.py first.")
    if not args.params.exists():
        raise FileNotFoundError(f"Missing experiment parameters file: {args.params}")

    config = build_config(
        load_parameters(str(args.params)),
        folds=args.folds,
        repeats=args.repeats,
        resampling_seed=args.seed,
        sampling=args.sampling,
        cutoff=args.cutoff,
        n_jobs=args.n_jobs,
    )
    df = _read_dataset(args.input, config.outcome)

    fold_results = run_resampling_comparison(df, config)
    results = results_table(fold_results, config.event_level)

    args.output_dir.mkdir(parents=True, exist_ok=True)
    results_path = args.output_dir / "fold_results.csv"
    results.to_csv(results_path, index=False)

    if args.save_predictions:
        predictions_table(fold_results).to_csv(args.output_dir / "fold_predictions.csv", index=False)

    metadata = {
        "input": str(args.input),
        "rows": len(df),
        "folds": config.folds,
        "repeats": config.repeats,
        "resampling_seed": config.resampling_seed,
        "strata": config.strata,
        "sampling": config.sampling,
        "sampling_ratio": config.sampling_ratio,
        "cutoff": config.cutoff,
        "event_level": config.event_level,
        "classifier": "quadratic_discriminant_analysis",
        "n_fold_results": len(results),
        "mean_metrics": {
            col: float(results[col].mean())
            for col in ("sampled_roc", "normal_roc", "sampled_J", "normal_J")
        },
    }
    (args.output_dir / "resampling_metadata.json").write_text(
        json.dumps(metadata, indent=2) + "\n",
        encoding="utf-8",
    )

    print(f"Evaluated {len(results)} folds ({config.repeats} x {config.folds}-fold CV) -> {results_path}")
    for col, value in metadata["mean_metrics"].items():
        print(f"  mean {col}: {value:.4f}")


if __name__ == "__main__":
    main()
