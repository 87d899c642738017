from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd
from sklearn.discriminant_analysis import QuadraticDiscriminantAnalysis

from errors import InputError, SingularModelError
from folds import Fold
from sampling import EVALUATION, TRAINING, FittedSampler, SubSampler

PREDICTION_COLUMNS = ["row", "truth", "predicted", "probability"]


@dataclass
class FoldEvaluation:
    sampler: Optional[FittedSampler]   # None for the unsampled condition
    predictions: pd.DataFrame          # PREDICTION_COLUMNS, one row per assessment row
    n_training_rows: int


def _feature_columns(data: pd.DataFrame, outcome: str) -> List[str]:
    if outcome not in data.columns:
        raise InputError(f"Outcome column '{outcome}' not found in dataset.")
    features = [c for c in data.columns if c != outcome]
    if not features:
        raise InputError("Dataset has no feature columns.")
    non_numeric = [c for c in features if not pd.api.types.is_numeric_dtype(data[c])]
    if non_numeric:
        raise InputError(f"QDA needs numeric features; non-numeric columns: {non_numeric[:5]}")
    finite = np.isfinite(data[features].to_numpy(dtype=float)).all(axis=0)
    if not finite.all():
        bad = [c for c, ok in zip(features, finite) if not ok]
        raise InputError(f"Feature(s) {bad[:5]} contain missing or non-finite values.")
    return features


def check_class_covariance(X: pd.DataFrame, y: pd.Series) -> None:
    """
    Raise SingularModelError when a class-specific covariance matrix cannot be
    inverted: a feature is constant within the class, or the class has too few
    rows / collinear features for a full-rank covariance.
    """
    n_features = X.shape[1]
    for level in pd.unique(y):
        Xk = X.loc[(y == level).to_numpy()].to_numpy(dtype=float)
        constant = [col for col, sd in zip(X.columns, Xk.std(axis=0)) if sd == 0.0]
        if constant:
            raise SingularModelError(
                f"Feature(s) {constant[:5]} are constant within class '{level}'; "
                "the class covariance matrix is singular."
            )
        rank = np.linalg.matrix_rank(Xk - Xk.mean(axis=0))
        if rank < n_features:
            raise SingularModelError(
                f"Class '{level}' covariance has rank {rank} < {n_features} features "
                f"({len(Xk)} rows); the class covariance matrix is singular."
            )


def fit_qda(data: pd.DataFrame, outcome: str = "Class") -> QuadraticDiscriminantAnalysis:
    """Fit QDA with class priors taken from the (possibly resampled) training rows."""
    features = _feature_columns(data, outcome)
    X = data[features]
    y = data[outcome].astype(str)
    if y.nunique() != 2:
        raise InputError(f"QDA needs two classes in '{outcome}', found {sorted(y.unique())}.")
    check_class_covariance(X, y)
    model = QuadraticDiscriminantAnalysis()
    model.fit(X.to_numpy(dtype=float), y.to_numpy())
    return model


def predict_qda(
    model: QuadraticDiscriminantAnalysis,
    data: pd.DataFrame,
    outcome: str = "Class",
    event_level: str = "Class1",
    cutoff: float = 0.5,
) -> pd.DataFrame:
    classes = [str(c) for c in model.classes_]
    if event_level not in classes:
        raise InputError(f"Event level '{event_level}' not among fitted classes {classes}.")
    other_level = next(c for c in classes if c != event_level)

    features = _feature_columns(data, outcome)
    probs = model.predict_proba(data[features].to_numpy(dtype=float))[:, classes.index(event_level)]
    predicted = np.where(probs >= cutoff, event_level, other_level)

    return pd.DataFrame(
        {
            "row": data.index.to_numpy(),
            "truth": data[outcome].astype(str).to_numpy(),
            "predicted": predicted,
            "probability": probs,
        },
        columns=PREDICTION_COLUMNS,
    )


def evaluate(
    fold: Fold,
    data: pd.DataFrame,
    sampler: Optional[SubSampler] = None,
    outcome: str = "Class",
    event_level: str = "Class1",
    cutoff: float = 0.5,
) -> FoldEvaluation:
    """
    Fit QDA on one fold and score its assessment set.

    Steps:
      1) Take the fold's analysis set; if a sampler is given, fit it there and
         train on its training-mode output (down-/up-sampled rows).
      2) Fit QDA on the training rows.
      3) Pass the assessment set through the sampler in evaluation mode (always
         unchanged) and predict the event-class posterior and hard class.
    """
    analysis = fold.analysis(data)
    assessment = fold.assessment(data)
    _feature_columns(analysis, outcome)
    _feature_columns(assessment, outcome)

    fitted = None
    training = analysis
    if sampler is not None:
        fitted = sampler.fit(analysis)
        training = SubSampler.apply(fitted, analysis, TRAINING)
        assessment = SubSampler.apply(fitted, assessment, EVALUATION)

    model = fit_qda(training, outcome=outcome)
    predictions = predict_qda(model, assessment, outcome=outcome, event_level=event_level, cutoff=cutoff)
    return FoldEvaluation(sampler=fitted, predictions=predictions, n_training_rows=len(training))
