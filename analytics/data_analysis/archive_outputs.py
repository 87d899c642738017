import argparse
import json
import shutil
from datetime import datetime
from pathlib import Path

SIMULATOR_DIR = Path("outputs") / "simulator"
ARTIFACTS_DIR = Path("analytics") / "data_analysis" / "artifacts"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Move simulated data, fold results and comparison outputs into a timestamped archive folder."
    )
    parser.add_argument(
        "--archive-root",
        type=Path,
        default=Path("archive"),
        help="Root folder where timestamped archive folders are created.",
    )
    parser.add_argument(
        "--keep-dataset",
        action="store_true",
        help="Archive resampling/comparison artifacts only and leave the simulated dataset in place.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List what would be archived without moving anything.",
    )
    return parser.parse_args()


def _archive_candidates(keep_dataset: bool) -> list[Path]:
    candidates = [ARTIFACTS_DIR]
    if not keep_dataset:
        candidates.insert(0, SIMULATOR_DIR)
    return [p for p in candidates if p.exists()]


def _file_count(path: Path) -> int:
    if path.is_file():
        return 1
    return sum(1 for p in path.rglob("*") if p.is_file())


def _archive_path(src: Path, archive_dir: Path, dry_run: bool) -> dict:
    dest = archive_dir / src
    if dest.exists():
        dest = dest.with_name(f"{dest.name}_{datetime.now().strftime('%H%M%S')}")

    files = _file_count(src)
    if not dry_run:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(dest))
    return {"from": str(src), "to": str(dest), "files": files}


def main() -> None:
    args = parse_args()

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    archive_dir = args.archive_root / f"cleanup_{timestamp}"
    archive_dir.mkdir(parents=True, exist_ok=True)

    items = [_archive_path(src, archive_dir, args.dry_run) for src in _archive_candidates(args.keep_dataset)]

    manifest = {
        "timestamp": timestamp,
        "dry_run": args.dry_run,
        "keep_dataset": args.keep_dataset,
        "archive_dir": str(archive_dir),
        "items": items,
    }
    manifest_path = archive_dir / "archive_manifest.json"
    manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")

    print(f"Archive folder: {archive_dir}")
    print(f"Items {'planned' if args.dry_run else 'moved'}: {len(items)} ({sum(i['files'] for i in items)} files)")
    print(f"Manifest: {manifest_path}")


if __name__ == "__main__":
    main()
