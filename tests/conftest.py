import json
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from config import ExperimentConfig


def make_gaussian_dataset(n: int = 300, minority_pct: float = 10.0, seed: int = 7) -> pd.DataFrame:
    """Three Gaussian features; Class1 shifted and with a different spread."""
    rng = np.random.default_rng(seed)
    n_minority = int(round(n * minority_pct / 100.0))
    n_majority = n - n_minority
    majority = rng.normal(0.0, 1.0, size=(n_majority, 3))
    minority = rng.normal(1.5, 0.7, size=(n_minority, 3))
    X = np.vstack([minority, majority])
    labels = np.array(["Class1"] * n_minority + ["Class2"] * n_majority)
    order = rng.permutation(n)
    df = pd.DataFrame(X[order], columns=["x1", "x2", "x3"])
    df["Class"] = pd.Categorical(labels[order], categories=["Class1", "Class2"])
    return df


@pytest.fixture
def gaussian_dataset() -> pd.DataFrame:
    return make_gaussian_dataset()


@pytest.fixture
def small_config() -> ExperimentConfig:
    return ExperimentConfig(
        n_rows=300,
        folds=5,
        repeats=2,
        resampling_seed=11,
        posterior_draws=500,
    )


@pytest.fixture
def mini_parameters() -> dict:
    return {
        "simulation": {
            "n_rows": 400,
            "intercept": 3.0,
            "linear_vars": 2,
            "simulation_seed": 3,
        },
        "resampling": {
            "folds": 5,
            "repeats": 2,
            "resampling_seed": 17,
        },
        "modeling": {
            "sampling": "down",
            "cutoff": 0.5,
        },
        "comparison": {
            "posterior_draws": 200,
            "rope_size": 0.02,
        },
    }


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture
def write_json():
    def _write(path: Path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    return _write
