import numpy as np
import pandas as pd
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from errors import InputError
from simulator import (
    _correlation_matrix,
    _linear_coefficients,
    class_distribution,
    simulate_two_class,
)


def test_linear_coefficients_alternate_and_shrink():
    beta = _linear_coefficients(10)
    assert beta[0] == pytest.approx(-2.5)
    assert beta[1] == pytest.approx(2.25)
    assert beta[-1] == pytest.approx(0.25)
    assert np.all(np.abs(np.diff(np.abs(beta))) > 0)


def test_correlation_matrix_ar1_and_exchangeable():
    ar1 = _correlation_matrix(3, "AR1", 0.5)
    assert np.allclose(ar1, [[1.0, 0.5, 0.25], [0.5, 1.0, 0.5], [0.25, 0.5, 1.0]])
    exch = _correlation_matrix(3, "exch", 0.3)
    assert np.allclose(np.diag(exch), 1.0)
    assert exch[0, 2] == pytest.approx(0.3)
    with pytest.raises(InputError, match="corr_type"):
        _correlation_matrix(3, "toeplitz", 0.3)


def test_simulate_two_class_columns_and_levels():
    result = simulate_two_class(n_rows=200, linear_vars=3, noise_vars=2, corr_vars=2, corr_value=0.4, rng=np.random.default_rng(1))
    df = result.data
    expected = [
        "TwoFactor1", "TwoFactor2", "Linear01", "Linear02", "Linear03",
        "Nonlinear1", "Nonlinear2", "Nonlinear3", "Noise01", "Noise02",
        "Corr01", "Corr02", "Class",
    ]
    assert list(df.columns) == expected
    assert len(df) == 200
    assert list(df["Class"].cat.categories) == ["Class1", "Class2"]
    assert df["Nonlinear1"].between(-1, 1).all()
    assert df["Nonlinear2"].between(0, 1).all()


def test_simulate_two_class_is_deterministic_for_seed():
    a = simulate_two_class(n_rows=150, rng=np.random.default_rng(244)).data
    b = simulate_two_class(n_rows=150, rng=np.random.default_rng(244)).data
    pd.testing.assert_frame_equal(a, b)


def test_large_intercept_makes_class1_the_minority():
    df = simulate_two_class(n_rows=1000, intercept=10.0, rng=np.random.default_rng(244)).data
    balance = class_distribution(df)
    assert balance["rows"] == 1000
    assert 0 < balance["counts"]["Class1"] < balance["counts"]["Class2"]
    assert balance["proportions"]["Class1"] < 0.2


def test_mislabel_flips_requested_share():
    result = simulate_two_class(n_rows=400, mislabel=0.1, rng=np.random.default_rng(5))
    assert result.mislabeled == 40


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"n_rows": 0}, "n_rows"),
        ({"noise_vars": -1}, "noise_vars"),
        ({"mislabel": 1.0}, "mislabel"),
        ({"corr_vars": 2, "corr_value": 1.0}, "corr_value"),
    ],
)
def test_simulate_two_class_rejects_bad_arguments(kwargs, message):
    with pytest.raises(InputError, match=message):
        simulate_two_class(rng=np.random.default_rng(0), **kwargs)


def test_class_distribution_requires_outcome():
    with pytest.raises(InputError, match="Outcome column"):
        class_distribution(pd.DataFrame({"x": [1, 2]}))
