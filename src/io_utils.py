import json
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List

from config import ExperimentConfig
from errors import InputError

_SECTIONS = ("simulation", "resampling", "modeling", "comparison")
_SAMPLING_METHODS = ("down", "up")
_CORR_TYPES = ("AR1", "exch")


def load_parameters(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Parameters file not found: {p.resolve()}")
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def flatten_parameters(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Expected structure (flexible):
      params["simulation"|"resampling"|"modeling"|"comparison"] -> dict of settings
    or the same keys directly at the top level. Section keys win over top-level keys.
    """
    flat = {k: v for k, v in params.items() if k not in _SECTIONS}
    for section in _SECTIONS:
        values = params.get(section, {})
        if not isinstance(values, dict):
            raise InputError(f"Section '{section}' must be an object, got {type(values).__name__}.")
        flat.update(values)
    return flat


def _check_int(flat: Dict[str, Any], key: str, minimum: int, errors: List[str]) -> None:
    if key not in flat:
        return
    value = flat[key]
    if isinstance(value, bool) or not isinstance(value, int):
        errors.append(f"{key} must be an integer.")
    elif value < minimum:
        errors.append(f"{key} must be >= {minimum}.")


def _check_float(flat: Dict[str, Any], key: str, errors: List[str]) -> float | None:
    if key not in flat:
        return None
    try:
        return float(flat[key])
    except (TypeError, ValueError):
        errors.append(f"{key} must be numeric.")
        return None


def validate_parameters(params: Dict[str, Any]) -> List[str]:
    errors = []
    try:
        flat = flatten_parameters(params)
    except InputError as exc:
        return [str(exc)]

    known = {f.name for f in fields(ExperimentConfig)}
    unknown = sorted(set(flat) - known)
    if unknown:
        errors.append(f"Unknown parameters: {', '.join(unknown)}.")

    _check_int(flat, "n_rows", 1, errors)
    _check_int(flat, "linear_vars", 0, errors)
    _check_int(flat, "noise_vars", 0, errors)
    _check_int(flat, "corr_vars", 0, errors)
    _check_int(flat, "simulation_seed", 0, errors)
    _check_int(flat, "folds", 2, errors)
    _check_int(flat, "repeats", 1, errors)
    _check_int(flat, "resampling_seed", 0, errors)
    _check_int(flat, "posterior_draws", 1, errors)
    _check_int(flat, "posterior_seed", 0, errors)

    if "n_jobs" in flat:
        n_jobs = flat["n_jobs"]
        if isinstance(n_jobs, bool) or not isinstance(n_jobs, int) or n_jobs == 0:
            errors.append("n_jobs must be a non-zero integer (-1 uses all cores).")

    _check_float(flat, "intercept", errors)

    mislabel = _check_float(flat, "mislabel", errors)
    if mislabel is not None and not (0.0 <= mislabel < 1.0):
        errors.append("mislabel must be in [0, 1).")

    corr_value = _check_float(flat, "corr_value", errors)
    if corr_value is not None and abs(corr_value) >= 1.0:
        errors.append("corr_value must be in (-1, 1).")

    if "corr_type" in flat and flat["corr_type"] not in _CORR_TYPES:
        errors.append(f"corr_type must be one of {', '.join(_CORR_TYPES)}.")

    if "sampling" in flat and flat["sampling"] not in _SAMPLING_METHODS:
        errors.append(f"sampling must be one of {', '.join(_SAMPLING_METHODS)}.")

    ratio = _check_float(flat, "sampling_ratio", errors)
    if ratio is not None and not (0.0 < ratio <= 1.0):
        errors.append("sampling_ratio must be in (0, 1].")

    cutoff = _check_float(flat, "cutoff", errors)
    if cutoff is not None and not (0.0 < cutoff < 1.0):
        errors.append("cutoff must be between 0 and 1.")

    level = _check_float(flat, "credible_level", errors)
    if level is not None and not (0.0 < level < 1.0):
        errors.append("credible_level must be between 0 and 1.")

    rope = _check_float(flat, "rope_size", errors)
    if rope is not None and rope < 0:
        errors.append("rope_size must be >= 0.")

    for key in ("strata", "outcome", "event_level"):
        if key in flat and (not isinstance(flat[key], str) or not flat[key]):
            errors.append(f"{key} must be a non-empty string.")

    return errors


def build_config(params: Dict[str, Any], **overrides: Any) -> ExperimentConfig:
    """Validate parameters (plus any non-None overrides) and build the config."""
    merged = flatten_parameters(params)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    errors = validate_parameters(merged)
    if errors:
        raise InputError("Invalid experiment parameters: " + " ".join(errors))

    float_keys = ("intercept", "mislabel", "corr_value", "sampling_ratio", "cutoff", "credible_level", "rope_size")
    for key in float_keys:
        if key in merged:
            merged[key] = float(merged[key])
    return ExperimentConfig(**merged)
