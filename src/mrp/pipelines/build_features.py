# src/mrp/pipelines/build_features.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from mrp.common.io import write_json, write_parquet
from mrp.common.time import current_year
from mrp.common.utils import log, set_seed
from mrp.data.loading import load_cleaned_movies, load_cleaned_ratings
from mrp.data.schemas import FEATURES
from mrp.data.splits import SplitConfig, random_split, write_splits
from mrp.data.validation import validate_feature_tables, validate_ratings_df
from mrp.features.aggregates import AggregateStore, build_training_aggregates
from mrp.features.build_features import build_feature_table


@dataclass(frozen=True)
class BuildFeaturesConfig:
    movies_path: Path = Path("data/preprocessed/movies_cleaned.csv")
    ratings_path: Path = Path("data/preprocessed/ratings_cleaned.csv")

    splits_dir: Path = Path("data/processed/splits")
    features_dir: Path = Path("data/processed/features")

    split: SplitConfig = SplitConfig(train_frac=0.80, seed=123, stratify=True)
    # None -> the UTC year at run time; recorded in the meta so scoring reuses it
    current_year: Optional[int] = None

    @property
    def train_features_path(self) -> Path:
        return self.features_dir / "train_features.parquet"

    @property
    def test_features_path(self) -> Path:
        return self.features_dir / "test_features.parquet"

    @property
    def meta_path(self) -> Path:
        return self.features_dir / "features_meta.json"


def run(cfg: BuildFeaturesConfig) -> Dict[str, Path]:
    log("=== Stage 2: leakage-safe feature tables ===")
    set_seed(cfg.split.seed)
    year = int(cfg.current_year) if cfg.current_year is not None else current_year()

    log("[1/5] Loading cleaned ratings + movies")
    ratings = load_cleaned_ratings(cfg.ratings_path)
    movies = load_cleaned_movies(cfg.movies_path)
    validate_ratings_df(ratings)

    log(f"[2/5] Splitting ratings (train_frac={cfg.split.train_frac}, seed={cfg.split.seed})")
    train, test, split_meta = random_split(ratings, cfg.split)
    log(f"      train={split_meta['n_train']:,} test={split_meta['n_test']:,}")

    log("[3/5] Freezing aggregates from the TRAIN partition")
    store = AggregateStore()
    aggregates = build_training_aggregates(train, store)

    log("[4/5] Building train/test feature tables")
    train_feat, train_meta = build_feature_table(train, movies, aggregates, current_year=year)
    test_feat, test_meta = build_feature_table(test, movies, aggregates, current_year=year)

    # gate before anything is persisted
    validate_feature_tables(train_feat, test_feat, FEATURES.required_columns)

    log("[5/5] Writing splits + features")
    write_splits(train, test, cfg.splits_dir, metadata=split_meta)
    write_parquet(cfg.train_features_path, train_feat)
    write_parquet(cfg.test_features_path, test_feat)

    meta = {
        "strategy": "train_only_aggregates",
        "leakage_safe": True,
        "current_year": year,
        "required_columns": list(FEATURES.required_columns),
        "aggregate_sources": aggregates.source_fingerprints,
        "split": split_meta,
        "train": train_meta,
        "test": test_meta,
    }
    write_json(cfg.meta_path, meta)

    log(f"✅ Wrote: {cfg.train_features_path}")
    log(f"✅ Wrote: {cfg.test_features_path}")
    log(f"✅ Meta : {cfg.meta_path}")
    return {
        "train_features": cfg.train_features_path,
        "test_features": cfg.test_features_path,
        "meta": cfg.meta_path,
    }


def main() -> None:
    run(BuildFeaturesConfig())


if __name__ == "__main__":
    main()
