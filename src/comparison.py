"""
Paired comparison of the sampled and normal conditions across folds.

The posterior for the systematic difference uses the Bayesian correlated t
model for repeated cross-validation: fold-wise differences share training rows,
so their variance is inflated by rho / (1 - rho) with rho = 1 / k. The
resulting posterior of the mean difference is a Student-t with n - 1 degrees
of freedom.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from config import ExperimentConfig
from errors import InputError

METRICS = ("roc", "J")


@dataclass
class PosteriorSummary:
    metric: str
    mean: float
    scale: float
    df: int
    credible_level: float
    lower: float
    upper: float
    prob_positive: float      # P(sampled - normal > 0)
    rope_size: float
    prob_below_rope: float    # P(difference < -rope)
    prob_in_rope: float       # P(|difference| <= rope)
    prob_above_rope: float    # P(difference > rope)
    draws: np.ndarray = field(repr=False)

    def as_dict(self) -> Dict[str, float]:
        return {
            "metric": self.metric,
            "mean": self.mean,
            "scale": self.scale,
            "df": self.df,
            "credible_level": self.credible_level,
            "lower": self.lower,
            "upper": self.upper,
            "prob_positive": self.prob_positive,
            "rope_size": self.rope_size,
            "prob_below_rope": self.prob_below_rope,
            "prob_in_rope": self.prob_in_rope,
            "prob_above_rope": self.prob_above_rope,
        }


@dataclass
class ComparisonReport:
    differences: pd.DataFrame          # long format, one row per fold and metric
    summary: pd.DataFrame              # one row per metric
    posteriors: Dict[str, PosteriorSummary]

    def posterior_table(self) -> pd.DataFrame:
        return pd.DataFrame([p.as_dict() for p in self.posteriors.values()])

    def draws_table(self) -> pd.DataFrame:
        return pd.DataFrame({metric: p.draws for metric, p in self.posteriors.items()})


def _metric_columns(results: pd.DataFrame, metric: str) -> tuple[str, str]:
    sampled_col = f"sampled_{metric}"
    normal_col = f"normal_{metric}"
    missing = [c for c in (sampled_col, normal_col) if c not in results.columns]
    if missing:
        raise InputError(f"Results table missing columns: {missing}")
    if results[[sampled_col, normal_col]].isna().any().any():
        raise InputError(f"Results table has missing values for metric '{metric}'.")
    return sampled_col, normal_col


def paired_differences(results: pd.DataFrame, metric: str) -> pd.DataFrame:
    """
    Per-fold pairs for one metric with Bland-Altman coordinates:
    ``average`` (x) is the mean of the two conditions, ``difference`` (y) is
    sampled minus normal.
    """
    sampled_col, normal_col = _metric_columns(results, metric)
    fold_id = results["fold_id"] if "fold_id" in results.columns else pd.Series(range(len(results)))
    sampled = results[sampled_col].to_numpy(dtype=float)
    normal = results[normal_col].to_numpy(dtype=float)
    return pd.DataFrame(
        {
            "fold_id": fold_id.to_numpy(),
            "metric": metric,
            "sampled": sampled,
            "normal": normal,
            "difference": sampled - normal,
            "average": (sampled + normal) / 2.0,
        }
    )


def mean_difference(results: pd.DataFrame, metric: str) -> float:
    return float(paired_differences(results, metric)["difference"].mean())


def summarize_differences(results: pd.DataFrame, metrics: Sequence[str] = METRICS) -> pd.DataFrame:
    rows = []
    for metric in metrics:
        diff = paired_differences(results, metric)["difference"].to_numpy()
        sd = float(diff.std(ddof=1)) if diff.size > 1 else 0.0
        mean = float(diff.mean())
        rows.append(
            {
                "metric": metric,
                "n_folds": int(diff.size),
                "mean_difference": mean,
                "std_difference": sd,
                "min_difference": float(diff.min()),
                "max_difference": float(diff.max()),
                "lower_agreement": mean - 1.96 * sd,
                "upper_agreement": mean + 1.96 * sd,
            }
        )
    return pd.DataFrame(rows)


def correlated_posterior(
    differences: Sequence[float] | np.ndarray,
    folds: int,
    metric: str = "",
    draws: int = 4000,
    seed: Optional[int] = None,
    credible_level: float = 0.9,
    rope_size: float = 0.02,
) -> PosteriorSummary:
    """
    Posterior of the systematic difference between conditions.

    Parameters
    ----------
    differences :
        Fold-wise differences (sampled - normal), all repeats together.
    folds :
        Number of folds k per repeat; the correlation between fold results is 1/k.
    draws, seed :
        Size and seed of the posterior sample returned for plotting.
    """
    diff = np.asarray(differences, dtype=float)
    n = diff.size
    if n < 2:
        raise InputError(f"Need at least two fold differences for the posterior, got {n}.")
    if folds < 2:
        raise InputError(f"Number of folds must be >= 2, got {folds}.")
    if not (0.0 < credible_level < 1.0):
        raise InputError(f"credible_level must be between 0 and 1, got {credible_level}.")

    rho = 1.0 / folds
    mean = float(diff.mean())
    var = float(diff.var(ddof=1))
    scale = 0.0 if np.ptp(diff) == 0.0 else float(np.sqrt((1.0 / n + rho / (1.0 - rho)) * var))
    df = n - 1
    rng = np.random.default_rng(seed)
    tail = (1.0 - credible_level) / 2.0

    if scale == 0.0:
        # All folds agree exactly; the posterior collapses to a point.
        sample = np.full(draws, mean)
        lower = upper = mean
        prob_positive = float(mean > 0)
        below = float(mean < -rope_size)
        above = float(mean > rope_size)
    else:
        posterior = stats.t(df=df, loc=mean, scale=scale)
        sample = posterior.rvs(size=draws, random_state=rng)
        lower, upper = (float(v) for v in posterior.ppf([tail, 1.0 - tail]))
        prob_positive = float(posterior.sf(0.0))
        below = float(posterior.cdf(-rope_size))
        above = float(posterior.sf(rope_size))

    return PosteriorSummary(
        metric=metric,
        mean=mean,
        scale=scale,
        df=df,
        credible_level=credible_level,
        lower=lower,
        upper=upper,
        prob_positive=prob_positive,
        rope_size=rope_size,
        prob_below_rope=below,
        prob_in_rope=max(0.0, 1.0 - below - above),
        prob_above_rope=above,
        draws=sample,
    )


def compare_conditions(
    results: pd.DataFrame,
    config: ExperimentConfig,
    metrics: Sequence[str] = METRICS,
) -> ComparisonReport:
    frames: List[pd.DataFrame] = []
    posteriors: Dict[str, PosteriorSummary] = {}
    for i, metric in enumerate(metrics):
        paired = paired_differences(results, metric)
        frames.append(paired)
        posteriors[metric] = correlated_posterior(
            paired["difference"].to_numpy(),
            folds=config.folds,
            metric=metric,
            draws=config.posterior_draws,
            seed=config.posterior_seed + i,
            credible_level=config.credible_level,
            rope_size=config.rope_size,
        )
    return ComparisonReport(
        differences=pd.concat(frames, ignore_index=True),
        summary=summarize_differences(results, metrics),
        posteriors=posteriors,
    )
