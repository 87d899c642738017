"""
Class-imbalance sub-sampling applied inside a resampling fold.

A ``SubSampler`` is fitted on one analysis set. In training mode it returns the
resampled analysis set; in evaluation mode it returns its input untouched, so
assessment data always keeps the real-world class prevalence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd
from imblearn.over_sampling import RandomOverSampler
from imblearn.under_sampling import RandomUnderSampler

from errors import EmptyClassError, InputError

TRAINING = "training"
EVALUATION = "evaluation"


@dataclass
class FittedSampler:
    method: str
    ratio: float
    seed: Optional[int]
    minority_label: str
    majority_label: str
    minority_count: int
    majority_count: int
    fitted_index: pd.Index             # row labels of the analysis set used for fitting
    retained_index: pd.Index           # row labels kept (repeated for up-sampling)
    retained_counts: dict[str, int]    # class counts after resampling


class SubSampler:
    """
    Random down-sampling (default) or up-sampling of an outcome column.

    Parameters
    ----------
    outcome :
        Name of the class column.
    method :
        "down" keeps every minority row and a simple random sample (without
        replacement) of the majority rows; "up" keeps every majority row and
        samples minority rows with replacement.
    ratio :
        Minority:majority ratio after resampling. 1.0 balances the classes.
    seed :
        Random seed for the row selection.
    """

    def __init__(self, outcome: str = "Class", method: str = "down", ratio: float = 1.0, seed: Optional[int] = None) -> None:
        if method not in ("down", "up"):
            raise InputError(f"Unknown sampling method '{method}'. Use 'down' or 'up'.")
        if not (0.0 < ratio <= 1.0):
            raise InputError(f"Sampling ratio must be in (0, 1], got {ratio}.")
        self.outcome = outcome
        self.method = method
        self.ratio = float(ratio)
        self.seed = seed

    def _resampler(self):
        if self.method == "down":
            return RandomUnderSampler(sampling_strategy=self.ratio, random_state=self.seed)
        return RandomOverSampler(sampling_strategy=self.ratio, random_state=self.seed)

    def fit(self, analysis: pd.DataFrame) -> FittedSampler:
        if self.outcome not in analysis.columns:
            raise InputError(f"Outcome column '{self.outcome}' not found in analysis set.")

        y = analysis[self.outcome].astype(str)
        counts = y.value_counts()
        levels = (
            [str(c) for c in analysis[self.outcome].cat.categories]
            if isinstance(analysis[self.outcome].dtype, pd.CategoricalDtype)
            else sorted(counts.index)
        )
        if len(levels) > 2:
            raise InputError(
                f"Sub-sampling needs exactly two classes in '{self.outcome}', found {len(levels)}: {levels}."
            )

        empty = [level for level in levels if int(counts.get(level, 0)) == 0]
        if len(levels) < 2 or empty:
            missing = empty[0] if empty else "second class"
            raise EmptyClassError(
                f"Class '{missing}' has no rows in the analysis set; cannot sub-sample '{self.outcome}'."
            )

        # Ties keep the first level as the minority.
        minority, majority = sorted(levels, key=lambda level: (int(counts[level]), levels.index(level)))
        n_minority = int(counts[minority])
        n_majority = int(counts[majority])

        if self.method == "down" and int(n_minority / self.ratio) > n_majority:
            raise InputError(
                f"Cannot down-sample to ratio {self.ratio}: {n_minority} {minority} rows would need "
                f"{int(n_minority / self.ratio)} {majority} rows, only {n_majority} available."
            )
        if self.method == "up" and int(n_majority * self.ratio) < n_minority:
            raise InputError(
                f"Cannot up-sample to ratio {self.ratio}: {minority} already has {n_minority} rows."
            )

        resampler = self._resampler()
        features = analysis.drop(columns=[self.outcome])
        _, y_resampled = resampler.fit_resample(features, y)
        retained = analysis.index[resampler.sample_indices_]
        resampled_counts = pd.Series(y_resampled).value_counts()

        return FittedSampler(
            method=self.method,
            ratio=self.ratio,
            seed=self.seed,
            minority_label=minority,
            majority_label=majority,
            minority_count=n_minority,
            majority_count=n_majority,
            fitted_index=analysis.index.copy(),
            retained_index=retained,
            retained_counts={level: int(resampled_counts.get(level, 0)) for level in (minority, majority)},
        )

    @staticmethod
    def apply(fitted: FittedSampler, data: pd.DataFrame, mode: str) -> pd.DataFrame:
        if mode == EVALUATION:
            return data
        if mode != TRAINING:
            raise InputError(f"Unknown apply mode '{mode}'. Use '{TRAINING}' or '{EVALUATION}'.")
        if not data.index.equals(fitted.fitted_index):
            raise InputError("A fitted sampler can only resample the analysis set it was fitted on.")
        return data.loc[fitted.retained_index]

    def fit_apply(self, analysis: pd.DataFrame) -> tuple[FittedSampler, pd.DataFrame]:
        fitted = self.fit(analysis)
        return fitted, self.apply(fitted, analysis, TRAINING)
