"""
Sequence folds -> sub-sampling -> QDA -> metrics for both conditions.

Every fold is evaluated twice: "sampled" (sub-sampler fitted on the analysis
set) and "normal" (analysis set used as-is). Folds are independent, so they can
run in parallel; results are merged back by fold id in fold order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from config import ExperimentConfig
from errors import InputError, SubsamplingError
from folds import Fold, make_folds
from metrics import fold_metrics
from modeling import evaluate
from sampling import FittedSampler, SubSampler

SAMPLED = "sampled"
NORMAL = "normal"

RESULT_COLUMNS = [
    "id",
    "id2",
    "fold_id",
    "sampled_roc",
    "normal_roc",
    "sampled_J",
    "normal_J",
    "n_analysis",
    "n_sampled_analysis",
    "n_assessment",
    "n_assessment_minority",
]


@dataclass
class FoldResult:
    fold: Fold
    sampler: Optional[FittedSampler]
    sampled_predictions: pd.DataFrame
    normal_predictions: pd.DataFrame
    metrics: Dict[str, float] = field(default_factory=dict)
    n_sampled_analysis: int = 0

    def as_row(self, event_level: str = "Class1") -> Dict[str, object]:
        truth = self.normal_predictions["truth"]
        return {
            "id": self.fold.repeat,
            "id2": self.fold.fold,
            "fold_id": self.fold.fold_id,
            "sampled_roc": self.metrics["sampled_roc"],
            "normal_roc": self.metrics["normal_roc"],
            "sampled_J": self.metrics["sampled_J"],
            "normal_J": self.metrics["normal_J"],
            "n_analysis": len(self.fold.analysis_rows),
            "n_sampled_analysis": self.n_sampled_analysis,
            "n_assessment": len(self.fold.assessment_rows),
            "n_assessment_minority": int((truth == event_level).sum()),
        }


def fold_seeds(seed: int, n_folds: int) -> List[int]:
    """One independent sampler seed per fold, fixed by position not by run order."""
    children = np.random.SeedSequence(seed).spawn(n_folds)
    return [int(child.generate_state(1)[0]) for child in children]


def run_fold(fold: Fold, data: pd.DataFrame, config: ExperimentConfig, seed: int) -> FoldResult:
    sampler = SubSampler(
        outcome=config.outcome,
        method=config.sampling,
        ratio=config.sampling_ratio,
        seed=seed,
    )

    evaluations = {}
    for condition, condition_sampler in ((SAMPLED, sampler), (NORMAL, None)):
        try:
            result = evaluate(
                fold,
                data,
                sampler=condition_sampler,
                outcome=config.outcome,
                event_level=config.event_level,
                cutoff=config.cutoff,
            )
            metrics = fold_metrics(result.predictions, config.event_level)
        except SubsamplingError as exc:
            exc.fold_id = fold.fold_id
            exc.condition = condition
            raise
        evaluations[condition] = (result, metrics)

    sampled, sampled_metrics = evaluations[SAMPLED]
    normal, normal_metrics = evaluations[NORMAL]
    return FoldResult(
        fold=fold,
        sampler=sampled.sampler,
        sampled_predictions=sampled.predictions,
        normal_predictions=normal.predictions,
        metrics={
            "sampled_roc": sampled_metrics["roc"],
            "normal_roc": normal_metrics["roc"],
            "sampled_J": sampled_metrics["J"],
            "normal_J": normal_metrics["J"],
        },
        n_sampled_analysis=sampled.n_training_rows,
    )


def run_resampling_comparison(data: pd.DataFrame, config: ExperimentConfig) -> List[FoldResult]:
    """
    Build repeated stratified folds and evaluate both conditions on each.

    Any fold failure aborts the run (the error carries fold id and condition);
    a fold is never silently dropped from the results.
    """
    if config.outcome not in data.columns:
        raise InputError(f"Outcome column '{config.outcome}' not found in dataset.")

    folds = make_folds(
        data,
        strata=config.strata,
        k=config.folds,
        repeats=config.repeats,
        seed=config.resampling_seed,
    )
    seeds = fold_seeds(config.resampling_seed, len(folds))

    results = Parallel(n_jobs=config.n_jobs)(
        delayed(run_fold)(fold, data, config, seed) for fold, seed in zip(folds, seeds)
    )

    by_id = {result.fold.fold_id: result for result in results}
    return [by_id[fold.fold_id] for fold in folds]


def results_table(fold_results: List[FoldResult], event_level: str = "Class1") -> pd.DataFrame:
    rows = [result.as_row(event_level) for result in fold_results]
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def predictions_table(fold_results: List[FoldResult]) -> pd.DataFrame:
    frames = []
    for result in fold_results:
        for condition, preds in ((SAMPLED, result.sampled_predictions), (NORMAL, result.normal_predictions)):
            frame = preds.copy()
            frame.insert(0, "condition", condition)
            frame.insert(0, "fold_id", result.fold.fold_id)
            frames.append(frame)
    if not frames:
        return pd.DataFrame(columns=["fold_id", "condition", "row", "truth", "predicted", "probability"])
    return pd.concat(frames, ignore_index=True)
