import run_pipeline


def test_run_pipeline_menu_loops_until_exit(monkeypatch):
    calls = []

    monkeypatch.setattr(run_pipeline, "run_simulation", lambda: calls.append("simulate"))
    monkeypatch.setattr(run_pipeline, "run_comparison", lambda: calls.append("compare"))
    monkeypatch.setattr(run_pipeline, "run_archive", lambda: calls.append("archive"))

    inputs = iter(["1", "9", "2", "3", "q"])
    monkeypatch.setattr("builtins.input", lambda _: next(inputs))

    run_pipeline.main()

    assert calls == ["simulate", "compare", "archive"]


def test_run_comparison_passes_save_predictions_flag(monkeypatch):
    scripts = []

    monkeypatch.setattr(run_pipeline, "_run_script", lambda script, args=None: scripts.append((script, args)))
    monkeypatch.setattr("builtins.input", lambda _: "y")

    run_pipeline.run_comparison()

    assert scripts == [
        ("analytics/data_analysis/cross_validate_subsampling.py", ["--save-predictions"]),
        ("analytics/data_analysis/compare_conditions.py", None),
    ]


def test_run_archive_dry_run_on_request(monkeypatch):
    scripts = []

    monkeypatch.setattr(run_pipeline, "_run_script", lambda script, args=None: scripts.append((script, args)))
    monkeypatch.setattr("builtins.input", lambda _: "n")

    run_pipeline.run_archive()

    assert scripts == [("analytics/data_analysis/archive_outputs.py", [])]
