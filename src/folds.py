from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np
import pandas as pd
from sklearn.model_selection import RepeatedStratifiedKFold

from errors import InputError


@dataclass(frozen=True, eq=False)
class Fold:
    fold_id: str                 # e.g. "Repeat1_Fold01"
    repeat: str                  # e.g. "Repeat1"
    fold: str                    # e.g. "Fold01"
    analysis_rows: np.ndarray    # row positions used for fitting
    assessment_rows: np.ndarray  # row positions used for scoring

    def analysis(self, data: pd.DataFrame) -> pd.DataFrame:
        return data.iloc[self.analysis_rows]

    def assessment(self, data: pd.DataFrame) -> pd.DataFrame:
        return data.iloc[self.assessment_rows]


def _validate_fold_args(data: pd.DataFrame, strata: str, k: int, repeats: int) -> None:
    if k < 2:
        raise InputError(f"Number of folds must be >= 2, got {k}.")
    if repeats < 1:
        raise InputError(f"Number of repeats must be >= 1, got {repeats}.")
    if strata not in data.columns:
        raise InputError(f"Stratification column '{strata}' not found in dataset.")
    if k > len(data):
        raise InputError(f"Cannot make {k} folds from {len(data)} rows.")
    if data[strata].isna().any():
        raise InputError(f"Stratification column '{strata}' has missing values.")

    counts = data[strata].value_counts()
    too_small = counts[counts < k]
    if not too_small.empty:
        detail = ", ".join(f"{level}={int(n)}" for level, n in too_small.items())
        raise InputError(
            f"Every class needs at least {k} rows to stratify {k} folds; found {detail}."
        )


def make_folds(
    data: pd.DataFrame,
    strata: str = "Class",
    k: int = 10,
    repeats: int = 1,
    seed: int = 42,
) -> List[Fold]:
    """
    Repeated stratified k-fold splits.

    Within each repeat the assessment sets partition the rows exactly once and
    keep the class ratio of ``strata``. The same seed and inputs always give the
    same fold membership.
    """
    _validate_fold_args(data, strata, k, repeats)

    splitter = RepeatedStratifiedKFold(n_splits=k, n_repeats=repeats, random_state=seed)
    y = data[strata].astype(str).to_numpy()
    placeholder = np.zeros(len(data))

    folds = []
    width = max(2, len(str(k)))
    for i, (analysis_rows, assessment_rows) in enumerate(splitter.split(placeholder, y)):
        repeat = f"Repeat{i // k + 1}"
        fold = f"Fold{str(i % k + 1).zfill(width)}"
        folds.append(
            Fold(
                fold_id=f"{repeat}_{fold}",
                repeat=repeat,
                fold=fold,
                analysis_rows=np.sort(analysis_rows),
                assessment_rows=np.sort(assessment_rows),
            )
        )
    return folds
