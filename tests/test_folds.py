import numpy as np
import pandas as pd
import pytest

from errors import InputError
from folds import make_folds


def test_make_folds_partitions_each_repeat(gaussian_dataset):
    folds = make_folds(gaussian_dataset, strata="Class", k=5, repeats=3, seed=1)
    assert len(folds) == 15
    assert folds[0].fold_id == "Repeat1_Fold01"
    assert folds[-1].fold_id == "Repeat3_Fold05"

    n = len(gaussian_dataset)
    for repeat in ("Repeat1", "Repeat2", "Repeat3"):
        members = [f for f in folds if f.repeat == repeat]
        assessed = np.concatenate([f.assessment_rows for f in members])
        assert sorted(assessed.tolist()) == list(range(n))
        for f in members:
            assert not set(f.analysis_rows) & set(f.assessment_rows)
            assert len(f.analysis_rows) + len(f.assessment_rows) == n


def test_make_folds_is_stratified(gaussian_dataset):
    overall = (gaussian_dataset["Class"] == "Class1").mean()
    for fold in make_folds(gaussian_dataset, k=5, repeats=1, seed=3):
        share = (fold.assessment(gaussian_dataset)["Class"] == "Class1").mean()
        assert abs(share - overall) < 0.05


def test_make_folds_same_seed_same_membership(gaussian_dataset):
    a = make_folds(gaussian_dataset, k=5, repeats=2, seed=9)
    b = make_folds(gaussian_dataset, k=5, repeats=2, seed=9)
    c = make_folds(gaussian_dataset, k=5, repeats=2, seed=10)
    assert all(np.array_equal(x.assessment_rows, y.assessment_rows) for x, y in zip(a, b))
    assert not all(np.array_equal(x.assessment_rows, y.assessment_rows) for x, y in zip(a, c))


def test_make_folds_rejects_too_many_folds():
    df = pd.DataFrame({"x": [0.1, 0.2, 0.3], "Class": ["Class1", "Class2", "Class2"]})
    with pytest.raises(InputError, match="Cannot make 5 folds"):
        make_folds(df, k=5)


def test_make_folds_rejects_thin_strata(gaussian_dataset):
    df = gaussian_dataset.copy()
    keep = df.index[df["Class"] == "Class2"].tolist() + df.index[df["Class"] == "Class1"].tolist()[:3]
    with pytest.raises(InputError, match="at least 5 rows"):
        make_folds(df.loc[keep], k=5)


@pytest.mark.parametrize("kwargs, message", [({"k": 1}, ">= 2"), ({"repeats": 0}, "repeats"), ({"strata": "Outcome"}, "not found")])
def test_make_folds_rejects_bad_arguments(gaussian_dataset, kwargs, message):
    with pytest.raises(InputError, match=message):
        make_folds(gaussian_dataset, **kwargs)


def test_folds_compare_by_identity(gaussian_dataset):
    a = make_folds(gaussian_dataset, k=5, repeats=1, seed=2)
    b = make_folds(gaussian_dataset, k=5, repeats=1, seed=2)
    assert a[0] == a[0]
    assert a[0] != b[0]
    assert len({a[0], a[1], b[0]}) == 3
