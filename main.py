import json
from pathlib import Path
import sys

# Allow running without installing the package.
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

import numpy as np

from io_utils import build_config, load_parameters
from simulator import class_distribution, simulate_two_class


def main() -> None:
    params_path = Path("input_parameters") / "experiment_parameters.json"
    config = build_config(load_parameters(str(params_path)))

    rng = np.random.default_rng(config.simulation_seed)

    output_dir = Path("outputs") / "simulator"
    output_dir.mkdir(parents=True, exist_ok=True)

    result = simulate_two_class(
        n_rows=config.n_rows,
        intercept=config.intercept,
        linear_vars=config.linear_vars,
        noise_vars=config.noise_vars,
        corr_vars=config.corr_vars,
        corr_type=config.corr_type,
        corr_value=config.corr_value,
        mislabel=config.mislabel,
        rng=rng,
    )
    df = result.data
    balance = class_distribution(df, config.outcome)

    data_path = output_dir / "simulated_dataset.csv"
    df.to_csv(data_path, index=False)

    meta_path = output_dir / "simulated_metadata.json"
    meta_payload = {
        "parameters": {
            "n_rows": config.n_rows,
            "intercept": config.intercept,
            "linear_vars": config.linear_vars,
            "noise_vars": config.noise_vars,
            "corr_vars": config.corr_vars,
            "corr_type": config.corr_type,
            "corr_value": config.corr_value,
            "mislabel": config.mislabel,
            "seed": config.simulation_seed,
        },
        "features": [c for c in df.columns if c != config.outcome],
        "outcome": config.outcome,
        "class_distribution": balance,
        "mislabeled_rows": result.mislabeled,
    }
    meta_path.write_text(json.dumps(meta_payload, indent=2) + "\n", encoding="utf-8")

    counts = ", ".join(f"{level}={n}" for level, n in balance["counts"].items())
    print(f"Simulated {balance['rows']} rows ({counts}) -> {data_path}")


if __name__ == "__main__":
    main()
