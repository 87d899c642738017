import argparse
import json
import sys
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from comparison import METRICS, compare_conditions
from io_utils import build_config, load_parameters

_METRIC_LABELS = {"roc": "ROC AUC", "J": "J index"}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compare sampled vs. normal fold metrics (differences, Bland-Altman, posterior)."
    )
    parser.add_argument(
        "--results",
        type=Path,
        default=Path("analytics") / "data_analysis" / "artifacts" / "02_resampling" / "fold_results.csv",
        help="Path to fold_results.csv from cross_validate_subsampling.py.",
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
        default=Path("analytics") / "data_analysis" / "artifacts" / "03_comparison",
        help="Directory to save comparison outputs.",
    )
    parser.add_argument(
        "--rope-size",
        type=float,
        default=None,
        help="Override the region of practical equivalence half-width.",
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip writing PNG charts.",
    )
    return parser.parse_args()


def _folds_from_metadata(results_path: Path) -> int | None:
    meta_path = results_path.parent / "resampling_metadata.json"
    if not meta_path.exists():
        return None
    return int(json.loads(meta_path.read_text(encoding="utf-8"))["folds"])


def _plot_scatter(paired: pd.DataFrame, label: str, path: Path) -> None:
    fig, ax = plt.subplots(figsize=(5.5, 5.5))
    ax.scatter(paired["normal"], paired["sampled"], color="#4C78A8", alpha=0.8)
    lo = float(min(paired["normal"].min(), paired["sampled"].min()))
    hi = float(max(paired["normal"].max(), paired["sampled"].max()))
    ax.plot([lo, hi], [lo, hi], linestyle="--", color="gray")
    ax.set_xlabel(f"Normal {label}")
    ax.set_ylabel(f"Sampled {label}")
    ax.set_title(f"{label}: sampled vs. normal per fold")
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def _plot_bland_altman(paired: pd.DataFrame, summary_row: pd.Series, label: str, path: Path) -> None:
    fig, ax = plt.subplots(figsize=(7, 4.5))
    ax.scatter(paired["average"], paired["difference"], color="#F58518", alpha=0.8)
    ax.axhline(0.0, color="gray", linestyle=":")
    ax.axhline(summary_row["mean_difference"], color="#4C78A8", label="Mean difference")
    ax.axhline(summary_row["lower_agreement"], color="#4C78A8", linestyle="--", label="Limits of agreement")
    ax.axhline(summary_row["upper_agreement"], color="#4C78A8", linestyle="--")
    ax.set_xlabel(f"Average {label}")
    ax.set_ylabel(f"Sampled - normal {label}")
    ax.set_title(f"{label}: Bland-Altman")
    ax.legend(loc="best", fontsize=8)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def _plot_posterior(posterior, label: str, path: Path) -> None:
    fig, ax = plt.subplots(figsize=(7, 4.5))
    ax.hist(posterior.draws, bins=50, color="#54A24B", alpha=0.85)
    ax.axvline(0.0, color="gray", linestyle=":")
    if posterior.rope_size > 0:
        ax.axvspan(-posterior.rope_size, posterior.rope_size, color="gray", alpha=0.2, label="ROPE")
        ax.legend(loc="best", fontsize=8)
    ax.set_xlabel(f"Sampled - normal {label}")
    ax.set_ylabel("Posterior draws")
    ax.set_title(f"{label}: posterior of the difference (P>0 = {posterior.prob_positive:.3f})")
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def main() -> None:
    args = parse_args()

    if not args.results.exists():
        raise FileNotFoundError(f"Missing fold results: {args.results}. Run cross_validate_subsampling.py first.")
    if not args.params.exists():
        raise FileNotFoundError(f"Missing experiment parameters file: {args.params}")

    config = build_config(
        load_parameters(str(args.params)),
        folds=_folds_from_metadata(args.results),
        rope_size=args.rope_size,
    )
    results = pd.read_csv(args.results)
    report = compare_conditions(results, config, METRICS)

    args.output_dir.mkdir(parents=True, exist_ok=True)
    report.differences.to_csv(args.output_dir / "paired_differences.csv", index=False)
    report.summary.to_csv(args.output_dir / "difference_summary.csv", index=False)
    report.draws_table().to_csv(args.output_dir / "posterior_draws.csv", index=False)
    (args.output_dir / "posterior_summary.json").write_text(
        json.dumps({m: p.as_dict() for m, p in report.posteriors.items()}, indent=2) + "\n",
        encoding="utf-8",
    )

    if not args.no_plots:
        summary_by_metric = report.summary.set_index("metric")
        for metric in METRICS:
            label = _METRIC_LABELS.get(metric, metric)
            paired = report.differences[report.differences["metric"] == metric]
            _plot_scatter(paired, label, args.output_dir / f"{metric}_scatter.png")
            _plot_bland_altman(paired, summary_by_metric.loc[metric], label, args.output_dir / f"{metric}_bland_altman.png")
            _plot_posterior(report.posteriors[metric], label, args.output_dir / f"{metric}_posterior.png")

    for metric, posterior in report.posteriors.items():
        label = _METRIC_LABELS.get(metric, metric)
        print(
            f"{label}: mean difference {posterior.mean:+.4f}, "
            f"{int(posterior.credible_level * 100)}% interval [{posterior.lower:+.4f}, {posterior.upper:+.4f}], "
            f"P(sampled > normal) = {posterior.prob_positive:.3f}, "
            f"P(within ROPE) = {posterior.prob_in_rope:.3f}"
        )
    print(f"Comparison outputs: {args.output_dir}")


if __name__ == "__main__":
    main()
