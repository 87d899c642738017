import pandas as pd
import pytest

from errors import EmptyClassError, InputError
from folds import make_folds
from sampling import EVALUATION, TRAINING, SubSampler


def test_down_sampling_balances_analysis_set(gaussian_dataset):
    fold = make_folds(gaussian_dataset, k=5, repeats=1, seed=2)[0]
    analysis = fold.analysis(gaussian_dataset)
    n_minority = int((analysis["Class"] == "Class1").sum())

    fitted, training = SubSampler(seed=4).fit_apply(analysis)

    counts = training["Class"].value_counts()
    assert counts["Class1"] == counts["Class2"] == n_minority
    assert fitted.minority_label == "Class1"
    assert fitted.majority_label == "Class2"
    assert fitted.retained_counts == {"Class1": n_minority, "Class2": n_minority}
    # Every minority row kept, majority rows drawn without replacement.
    assert set(analysis.index[analysis["Class"] == "Class1"]).issubset(training.index)
    assert training.index.is_unique


def test_evaluation_mode_is_pass_through(gaussian_dataset):
    fold = make_folds(gaussian_dataset, k=5, repeats=1, seed=2)[1]
    sampler = SubSampler(seed=4)
    fitted = sampler.fit(fold.analysis(gaussian_dataset))
    assessment = fold.assessment(gaussian_dataset)

    out = SubSampler.apply(fitted, assessment, EVALUATION)

    pd.testing.assert_frame_equal(out, assessment)


def test_training_mode_rejects_other_data(gaussian_dataset):
    fold = make_folds(gaussian_dataset, k=5, repeats=1, seed=2)[0]
    fitted = SubSampler(seed=4).fit(fold.analysis(gaussian_dataset))
    with pytest.raises(InputError, match="fitted on"):
        SubSampler.apply(fitted, fold.assessment(gaussian_dataset), TRAINING)
    with pytest.raises(InputError, match="Unknown apply mode"):
        SubSampler.apply(fitted, fold.analysis(gaussian_dataset), "bake")


def test_same_seed_selects_same_rows(gaussian_dataset):
    a = SubSampler(seed=21).fit(gaussian_dataset)
    b = SubSampler(seed=21).fit(gaussian_dataset)
    c = SubSampler(seed=22).fit(gaussian_dataset)
    assert a.retained_index.equals(b.retained_index)
    assert not a.retained_index.equals(c.retained_index)


def test_up_sampling_repeats_minority_rows(gaussian_dataset):
    fitted, training = SubSampler(method="up", seed=1).fit_apply(gaussian_dataset)
    counts = training["Class"].value_counts()
    assert counts["Class1"] == counts["Class2"] == 270
    assert not training.index.is_unique


def test_ratio_controls_majority_size(gaussian_dataset):
    fitted, training = SubSampler(ratio=0.5, seed=1).fit_apply(gaussian_dataset)
    counts = training["Class"].value_counts()
    assert counts["Class1"] == 30
    assert counts["Class2"] == 60


def test_missing_minority_class_raises_empty_class(gaussian_dataset):
    majority_only = gaussian_dataset[gaussian_dataset["Class"] == "Class2"]
    with pytest.raises(EmptyClassError, match="Class1"):
        SubSampler().fit(majority_only)

    as_text = majority_only.assign(Class=majority_only["Class"].astype(str))
    with pytest.raises(EmptyClassError):
        SubSampler().fit(as_text)


@pytest.mark.parametrize("kwargs", [{"method": "smote"}, {"ratio": 0.0}, {"ratio": 1.5}])
def test_sub_sampler_rejects_bad_settings(kwargs):
    with pytest.raises(InputError):
        SubSampler(**kwargs)
