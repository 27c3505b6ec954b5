# src/mrp/pipelines/train_model.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from mrp.common.io import read_parquet, write_json, write_parquet
from mrp.common.utils import log, set_seed
from mrp.data.schemas import FEATURES
from mrp.data.validation import validate_feature_tables
from mrp.evaluation.metrics import evaluate_predictions
from mrp.models.rating_model import (
    RandomForestConfig,
    RandomForestRatingModel,
    RatingModel,
    save_model,
)


@dataclass(frozen=True)
class TrainModelConfig:
    features_dir: Path = Path("data/processed/features")

    model_path: Path = Path("model/random_forest_model.joblib")
    metrics_path: Path = Path("reports/test_metrics.json")
    predictions_path: Path = Path("outputs/test_predictions.parquet")

    forest: RandomForestConfig = RandomForestConfig(n_estimators=100, random_state=123)
    seed: int = 123

    @property
    def train_features_path(self) -> Path:
        return self.features_dir / "train_features.parquet"

    @property
    def test_features_path(self) -> Path:
        return self.features_dir / "test_features.parquet"


def run(cfg: TrainModelConfig, model: Optional[RatingModel] = None) -> Dict[str, Any]:
    log("=== Stage 3: fit rating model ===")
    set_seed(cfg.seed)

    log("[1/4] Loading feature tables")
    train_feat = read_parquet(cfg.train_features_path)
    test_feat = read_parquet(cfg.test_features_path)

    log("[2/4] Validating feature contract")
    train_x, test_x = validate_feature_tables(train_feat, test_feat, FEATURES.required_columns)
    log(f"      columns: {list(train_x.columns)}")

    model = model or RandomForestRatingModel(cfg.forest)
    log(f"[3/4] Fitting {type(model).__name__} on {len(train_x):,} rows")
    model.fit(train_x, FEATURES.target)

    log("[4/4] Scoring TEST partition")
    pred = model.predict(test_x)
    metrics = evaluate_predictions(test_x[FEATURES.target], pred)
    log(f"      MSE={metrics['mse']:.4f} RMSE={metrics['rmse']:.4f}")

    report: Dict[str, Any] = {
        "model": type(model).__name__,
        "n_train": int(len(train_x)),
        "n_test": int(len(test_x)),
        "feature_columns": list(FEATURES.feature_columns),
        "metrics": metrics,
    }
    if isinstance(model, RandomForestRatingModel):
        report["feature_importances"] = {k: float(v) for k, v in model.feature_importances.items()}

    save_model(model, cfg.model_path)
    write_json(cfg.metrics_path, report)

    preds = test_feat.loc[:, list(FEATURES.id_columns) + [FEATURES.target]].copy()
    preds["Predicted"] = pd.Series(pred, dtype="float64").to_numpy()
    write_parquet(cfg.predictions_path, preds)

    log(f"✅ Model  : {cfg.model_path}")
    log(f"✅ Report : {cfg.metrics_path}")
    return report


def main() -> None:
    run(TrainModelConfig())


if __name__ == "__main__":
    main()
