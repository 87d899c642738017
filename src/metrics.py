from __future__ import annotations

from typing import Dict

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix, roc_auc_score

from errors import EmptyClassError, InputError


def _event_truth(predictions: pd.DataFrame, event_level: str) -> np.ndarray:
    missing = [c for c in ("truth", "predicted", "probability") if c not in predictions.columns]
    if missing:
        raise InputError(f"Prediction records missing columns: {missing}")
    truth = predictions["truth"].astype(str).to_numpy() == event_level
    if truth.all() or not truth.any():
        absent = "non-event" if truth.all() else event_level
        raise EmptyClassError(
            f"Class '{absent}' has no rows among {len(truth)} predictions; metric is undefined."
        )
    return truth


def _confusion(predictions: pd.DataFrame, event_level: str) -> tuple[int, int, int, int]:
    truth = _event_truth(predictions, event_level)
    pred = predictions["predicted"].astype(str).to_numpy() == event_level
    tn, fp, fn, tp = confusion_matrix(truth, pred, labels=[False, True]).ravel()
    return int(tn), int(fp), int(fn), int(tp)


def roc_auc(predictions: pd.DataFrame, event_level: str = "Class1") -> float:
    """Area under the ROC curve using the event-class posterior as the score."""
    truth = _event_truth(predictions, event_level)
    return float(roc_auc_score(truth, predictions["probability"].to_numpy(dtype=float)))


def sensitivity(predictions: pd.DataFrame, event_level: str = "Class1") -> float:
    tn, fp, fn, tp = _confusion(predictions, event_level)
    return tp / (tp + fn)


def specificity(predictions: pd.DataFrame, event_level: str = "Class1") -> float:
    tn, fp, fn, tp = _confusion(predictions, event_level)
    return tn / (tn + fp)


def j_index(predictions: pd.DataFrame, event_level: str = "Class1") -> float:
    """
    Youden's J (sensitivity + specificity - 1) of the recorded hard predictions.

    The hard predictions already carry the probability cutoff (0.5 by default),
    so J is cutoff-dependent while ROC-AUC is not.
    """
    tn, fp, fn, tp = _confusion(predictions, event_level)
    return float(tp / (tp + fn) + tn / (tn + fp) - 1.0)


def fold_metrics(predictions: pd.DataFrame, event_level: str = "Class1") -> Dict[str, float]:
    return {
        "roc": roc_auc(predictions, event_level),
        "J": j_index(predictions, event_level),
    }
