# src/mrp/pipelines/preprocess.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from mrp.common.io import write_csv, write_json
from mrp.common.utils import log
from mrp.data.loading import MovieLensFiles, load_movielens
from mrp.data.quality import filter_table


@dataclass(frozen=True)
class PreprocessConfig:
    raw: MovieLensFiles = MovieLensFiles()
    out_dir: Path = Path("data/preprocessed")
    report_path: Path = Path("reports/data_quality.json")


def run(cfg: PreprocessConfig) -> Dict[str, Path]:
    log("=== Stage 1: preprocess raw MovieLens tables ===")
    tables = load_movielens(cfg.raw)

    written: Dict[str, Path] = {}
    reports = {}
    for name, df in tables.items():
        cleaned, report = filter_table(df, name=name)
        reports[name] = report.to_dict()
        written[name] = write_csv(cfg.out_dir / f"{name}_cleaned.csv", cleaned)
        log(f"✅ Wrote: {written[name]} ({len(cleaned):,} rows)")

    write_json(cfg.report_path, reports)
    log(f"✅ Report: {cfg.report_path}")
    return written


def main() -> None:
    run(PreprocessConfig())


if __name__ == "__main__":
    main()
