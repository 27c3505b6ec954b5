from __future__ import annotations
import argparse
from pathlib import Path
import urllib.request
import zipfile

DATASETS = {
    # training sources (movies/ratings/tags/links CSV)
    "ml-latest-small": ("https://files.grouplens.org/datasets/movielens/ml-latest-small.zip", Path("data/raw")),
    # '::' holdout (movies.dat / ratings.dat)
    "ml-10M100K": ("https://files.grouplens.org/datasets/movielens/ml-10m.zip", Path("data/final_holdout_test")),
}


def fetch(name: str, url: str, out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    zip_path = out_dir / Path(url).name
    if not zip_path.exists():
        print(f"[download] {url} -> {zip_path}")
        urllib.request.urlretrieve(url, zip_path)
    else:
        print(f"[download] exists: {zip_path}")

    extract_dir = out_dir / name
    if not extract_dir.exists():
        print(f"[extract] -> {extract_dir}")
        with zipfile.ZipFile(zip_path, "r") as zf:
            zf.extractall(out_dir)
    else:
        print(f"[extract] exists: {extract_dir}")


def main(only: list[str] | None = None) -> None:
    for name, (url, out_dir) in DATASETS.items():
        if only and name not in only:
            continue
        fetch(name, url, out_dir)


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--only", nargs="*", choices=sorted(DATASETS), default=None)
    args = ap.parse_args()
    main(args.only)
