# src/mrp/pipelines/score_holdout.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from mrp.common.io import read_json, read_parquet, write_json, write_parquet
from mrp.common.utils import log
from mrp.data.loading import HoldoutFiles, load_holdout_movies, load_holdout_ratings
from mrp.data.quality import filter_table
from mrp.data.schemas import FEATURES
from mrp.data.validation import validate_feature_tables, validate_ratings_df
from mrp.evaluation.metrics import evaluate_predictions
from mrp.features.aggregates import AggregateFrozenError, build_training_aggregates
from mrp.features.build_features import build_feature_table
from mrp.models.rating_model import load_model


@dataclass(frozen=True)
class ScoreHoldoutConfig:
    holdout: HoldoutFiles = HoldoutFiles()

    # the TRAIN partition persisted by the feature stage; aggregates are re-derived from it
    train_split_path: Path = Path("data/processed/splits/train.parquet")
    train_features_path: Path = Path("data/processed/features/train_features.parquet")
    features_meta_path: Path = Path("data/processed/features/features_meta.json")
    model_path: Path = Path("model/random_forest_model.joblib")

    out_features_path: Path = Path("data/processed/features/holdout_features.parquet")
    predictions_path: Path = Path("outputs/holdout_predictions.parquet")
    metrics_path: Path = Path("reports/holdout_metrics.json")


def _check_same_partition(rebuilt: Dict[str, str], recorded: Optional[Dict[str, str]]) -> None:
    if recorded is None:
        return
    if rebuilt != recorded:
        raise AggregateFrozenError(
            "Aggregates re-derived for scoring do not match the ones the model was trained with; "
            f"recorded={recorded} rebuilt={rebuilt}"
        )


def run(cfg: ScoreHoldoutConfig) -> Dict[str, Any]:
    log("=== Stage 4: score final holdout ('::' format) ===")

    log("[1/6] Loading training artefacts")
    meta = read_json(cfg.features_meta_path)
    train_split = read_parquet(cfg.train_split_path)
    train_feat = read_parquet(cfg.train_features_path)
    model = load_model(cfg.model_path)

    log("[2/6] Loading + filtering holdout tables")
    movies, _ = filter_table(load_holdout_movies(cfg.holdout), name="holdout_movies")
    ratings, _ = filter_table(load_holdout_ratings(cfg.holdout), name="holdout_ratings")
    validate_ratings_df(ratings)

    log("[3/6] Re-deriving TRAIN-only aggregates")
    aggregates = build_training_aggregates(train_split)
    _check_same_partition(aggregates.source_fingerprints, meta.get("aggregate_sources"))

    log("[4/6] Building holdout feature table")
    holdout_feat, holdout_meta = build_feature_table(
        ratings, movies, aggregates, current_year=int(meta["current_year"])
    )

    log("[5/6] Validating feature contract against TRAIN")
    _, holdout_x = validate_feature_tables(train_feat, holdout_feat, FEATURES.required_columns)

    log("[6/6] Predicting + evaluating")
    pred = model.predict(holdout_x)
    metrics = evaluate_predictions(holdout_x[FEATURES.target], pred)
    log(f"      MSE={metrics['mse']:.4f} RMSE={metrics['rmse']:.4f}")

    write_parquet(cfg.out_features_path, holdout_feat)
    preds = holdout_feat.loc[:, list(FEATURES.id_columns) + [FEATURES.target]].copy()
    preds["Predicted"] = pd.Series(pred, dtype="float64").to_numpy()
    write_parquet(cfg.predictions_path, preds)

    report: Dict[str, Any] = {
        "model": type(model).__name__,
        "n_holdout": int(len(holdout_x)),
        "features": holdout_meta,
        "metrics": metrics,
    }
    write_json(cfg.metrics_path, report)

    log(f"✅ Wrote : {cfg.out_features_path}")
    log(f"✅ Report: {cfg.metrics_path}")
    return report


def main() -> None:
    run(ScoreHoldoutConfig())


if __name__ == "__main__":
    main()
