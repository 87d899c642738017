from dataclasses import dataclass

@dataclass(frozen=True)
class ExperimentConfig:
    # Simulation (imbalance is driven by the intercept; larger -> rarer Class1).
    n_rows: int = 1000
    intercept: float = 10.0
    linear_vars: int = 10
    noise_vars: int = 0
    corr_vars: int = 0
    corr_type: str = "AR1"
    corr_value: float = 0.0
    mislabel: float = 0.0
    simulation_seed: int = 244

    # Repeated stratified cross-validation.
    folds: int = 10
    repeats: int = 5
    strata: str = "Class"
    resampling_seed: int = 5732

    # Modeling.
    outcome: str = "Class"
    event_level: str = "Class1"
    sampling: str = "down"
    sampling_ratio: float = 1.0
    cutoff: float = 0.5
    n_jobs: int = 1

    # Bayesian comparison of the two conditions.
    posterior_draws: int = 4000
    posterior_seed: int = 101
    credible_level: float = 0.9
    rope_size: float = 0.02
