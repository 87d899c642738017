from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Any, List, Optional
import numpy as np
import pandas as pd

from errors import InputError

CLASS_LEVELS = ["Class1", "Class2"]

_TWO_FACTOR_COV = np.array([[2.0, 1.3], [1.3, 2.0]])


@dataclass
class SimulationResult:
    data: pd.DataFrame
    linear_predictor: np.ndarray   # lp per row before the logistic link
    prob_class2: np.ndarray        # logistic(lp); Class1 is drawn when prob <= U(0,1)
    mislabeled: int                # labels flipped after drawing the class


def _column_names(prefix: str, count: int) -> List[str]:
    width = max(2, len(str(count)))
    return [f"{prefix}{str(i).zfill(width)}" for i in range(1, count + 1)]


def _linear_coefficients(linear_vars: int) -> np.ndarray:
    """
    Effects for Linear01..LinearNN: evenly spaced from 10 down to 1, divided by 4,
    with alternating signs starting negative.
    """
    if linear_vars == 0:
        return np.zeros(0)
    magnitude = np.linspace(10.0, 1.0, linear_vars) / 4.0
    signs = np.where(np.arange(linear_vars) % 2 == 0, -1.0, 1.0)
    return magnitude * signs


def _correlation_matrix(size: int, corr_type: str, corr_value: float) -> np.ndarray:
    if corr_type == "AR1":
        idx = np.arange(size)
        return corr_value ** np.abs(idx[:, None] - idx[None, :])
    if corr_type == "exch":
        sigma = np.full((size, size), corr_value, dtype=float)
        np.fill_diagonal(sigma, 1.0)
        return sigma
    raise InputError(f"Unknown corr_type '{corr_type}'. Use 'AR1' or 'exch'.")


def _validate_simulation_args(
    n_rows: int,
    linear_vars: int,
    noise_vars: int,
    corr_vars: int,
    corr_value: float,
    mislabel: float,
) -> None:
    if n_rows < 1:
        raise InputError(f"n_rows must be >= 1, got {n_rows}.")
    for name, value in (("linear_vars", linear_vars), ("noise_vars", noise_vars), ("corr_vars", corr_vars)):
        if value < 0:
            raise InputError(f"{name} must be >= 0, got {value}.")
    if not (0.0 <= mislabel < 1.0):
        raise InputError(f"mislabel must be in [0, 1), got {mislabel}.")
    if abs(corr_value) >= 1.0:
        raise InputError(f"corr_value must be in (-1, 1), got {corr_value}.")


def simulate_two_class(
    n_rows: int = 1000,
    intercept: float = 10.0,
    linear_vars: int = 10,
    noise_vars: int = 0,
    corr_vars: int = 0,
    corr_type: str = "AR1",
    corr_value: float = 0.0,
    mislabel: float = 0.0,
    rng: Optional[np.random.Generator] = None,
) -> SimulationResult:
    """
    Simulate a two-class dataset whose imbalance is controlled by ``intercept``.

    Steps:
      1) Draw TwoFactor1/2 from a correlated bivariate normal, LinearNN from N(0,1),
         Nonlinear1 from U(-1,1) and Nonlinear2/3 from U(0,1).
      2) Add optional noise columns (independent or correlated) with no effect.
      3) Build the linear predictor lp and draw Class1 when logistic(lp) <= U(0,1).
      4) Optionally flip a fraction ``mislabel`` of the labels.

    Large positive intercepts push logistic(lp) towards 1, so Class1 becomes the
    minority class (intercept=10 leaves a few percent of the rows in Class1).

    Returns
    -------
    SimulationResult
        ``data`` has the feature columns followed by a categorical ``Class``
        column with levels ["Class1", "Class2"].
    """
    _validate_simulation_args(n_rows, linear_vars, noise_vars, corr_vars, corr_value, mislabel)
    rng = rng if rng is not None else np.random.default_rng()

    columns: Dict[str, np.ndarray] = {}
    two_factor = rng.multivariate_normal(np.zeros(2), _TWO_FACTOR_COV, size=n_rows)
    columns["TwoFactor1"] = two_factor[:, 0]
    columns["TwoFactor2"] = two_factor[:, 1]

    linear_names = _column_names("Linear", linear_vars)
    if linear_vars:
        linear = rng.standard_normal((n_rows, linear_vars))
        for j, name in enumerate(linear_names):
            columns[name] = linear[:, j]

    columns["Nonlinear1"] = rng.uniform(-1.0, 1.0, size=n_rows)
    columns["Nonlinear2"] = rng.uniform(0.0, 1.0, size=n_rows)
    columns["Nonlinear3"] = rng.uniform(0.0, 1.0, size=n_rows)

    if noise_vars:
        noise = rng.standard_normal((n_rows, noise_vars))
        for j, name in enumerate(_column_names("Noise", noise_vars)):
            columns[name] = noise[:, j]

    if corr_vars:
        sigma = _correlation_matrix(corr_vars, corr_type, corr_value)
        corr = rng.multivariate_normal(np.zeros(corr_vars), sigma, size=n_rows)
        for j, name in enumerate(_column_names("Corr", corr_vars)):
            columns[name] = corr[:, j]

    tf1 = columns["TwoFactor1"]
    tf2 = columns["TwoFactor2"]
    nl1 = columns["Nonlinear1"]
    nl2 = columns["Nonlinear2"]
    nl3 = columns["Nonlinear3"]

    lp = (
        intercept
        - 4.0 * tf1
        + 4.0 * tf2
        + 2.0 * tf1 * tf2
        + nl1 ** 3
        + 2.0 * np.exp(-6.0 * (nl1 - 0.3) ** 2)
        + 2.0 * np.sin(np.pi * nl2 * nl3)
    )
    for beta, name in zip(_linear_coefficients(linear_vars), linear_names):
        lp = lp + beta * columns[name]

    prob = 1.0 / (1.0 + np.exp(-lp))
    is_class1 = prob <= rng.uniform(0.0, 1.0, size=n_rows)

    flipped = 0
    if mislabel > 0:
        flipped = int(round(n_rows * mislabel))
        idx = rng.choice(n_rows, size=flipped, replace=False)
        is_class1[idx] = ~is_class1[idx]

    df = pd.DataFrame(columns)
    df["Class"] = pd.Categorical(
        np.where(is_class1, CLASS_LEVELS[0], CLASS_LEVELS[1]),
        categories=CLASS_LEVELS,
    )

    return SimulationResult(
        data=df,
        linear_predictor=lp,
        prob_class2=prob,
        mislabeled=flipped,
    )


def class_distribution(data: pd.DataFrame, outcome: str = "Class") -> Dict[str, Any]:
    """Per-class counts and proportions, in the outcome's level order."""
    if outcome not in data.columns:
        raise InputError(f"Outcome column '{outcome}' not found in dataset.")
    counts = data[outcome].value_counts(sort=False)
    total = int(counts.sum())
    return {
        "rows": total,
        "counts": {str(level): int(n) for level, n in counts.items()},
        "proportions": {str(level): (float(n) / total if total else 0.0) for level, n in counts.items()},
    }
