import subprocess
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parent
ANALYSIS_DIR = "analytics/data_analysis"


def _run_script(script: str, extra_args: list[str] | None = None) -> None:
    cmd = [sys.executable, str(ROOT / script), *(extra_args or [])]
    print(f"\n>> {Path(script).name} {' '.join(extra_args or [])}".rstrip())
    subprocess.run(cmd, check=True)


def _confirm(question: str) -> bool:
    return input(f"{question} (y/n) [n]: ").strip().lower() in ("y", "yes")


def run_simulation() -> None:
    _run_script("main.py")
    print("\nImbalanced two-class dataset written to outputs/simulator.")


def run_comparison() -> None:
    cv_args = ["--save-predictions"] if _confirm("Keep per-row assessment predictions for both conditions?") else []

    _run_script(f"{ANALYSIS_DIR}/cross_validate_subsampling.py", cv_args)
    _run_script(f"{ANALYSIS_DIR}/compare_conditions.py")
    print("\nSampled vs. normal comparison written to analytics/data_analysis/artifacts.")


def run_archive() -> None:
    archive_args = ["--dry-run"] if _confirm("Only list what would be archived?") else []
    _run_script(f"{ANALYSIS_DIR}/archive_outputs.py", archive_args)
    print("\nSimulation and comparison outputs archived.")


def main() -> None:
    steps = {
        "1": ("Simulate the imbalanced dataset", run_simulation),
        "2": ("Cross-validate QDA with and without down-sampling, then compare", run_comparison),
        "3": ("Archive simulation and comparison outputs", run_archive),
    }
    while True:
        print("\nSub-sampling study:")
        for key, (label, _) in steps.items():
            print(f"{key}) {label}")
        print("q) Quit")
        choice = input("Select a step: ").strip().lower()

        if choice in ("q", "4"):
            print("Leaving the study menu.")
            break
        if choice not in steps:
            print(f"Unknown choice '{choice}'. Pick 1, 2, 3 or q.")
            continue
        steps[choice][1]()


if __name__ == "__main__":
    main()
