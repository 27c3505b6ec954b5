# src/mrp/models/rating_model.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, runtime_checkable

import joblib
import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestRegressor

from mrp.data.validation import SchemaMismatchError, validate_required_columns


@runtime_checkable
class RatingModel(Protocol):
    """fit(table, target) -> self; predict(table) -> vector aligned to table rows."""

    def fit(self, table: pd.DataFrame, target_column: str) -> "RatingModel": ...

    def predict(self, table: pd.DataFrame) -> np.ndarray: ...


def _feature_columns(table: pd.DataFrame, target_column: str) -> List[str]:
    return [c for c in table.columns if c != target_column]


def _check_fitted_columns(table: pd.DataFrame, expected: List[str]) -> None:
    missing = [c for c in expected if c not in table.columns]
    if missing:
        raise SchemaMismatchError(
            f"Scoring table lacks fitted feature columns: {missing}",
            missing_in_score=missing,
        )


@dataclass(frozen=True)
class RandomForestConfig:
    n_estimators: int = 100
    random_state: int = 123
    n_jobs: Optional[int] = None
    min_samples_leaf: int = 1


class RandomForestRatingModel:
    def __init__(self, cfg: Optional[RandomForestConfig] = None) -> None:
        self.cfg = cfg or RandomForestConfig()
        self.feature_columns_: List[str] = []
        self.target_column_: Optional[str] = None
        self._est = RandomForestRegressor(
            n_estimators=self.cfg.n_estimators,
            random_state=self.cfg.random_state,
            n_jobs=self.cfg.n_jobs,
            min_samples_leaf=self.cfg.min_samples_leaf,
        )

    def fit(self, table: pd.DataFrame, target_column: str) -> "RandomForestRatingModel":
        validate_required_columns(table, [target_column])
        self.feature_columns_ = _feature_columns(table, target_column)
        self.target_column_ = target_column
        X = table[self.feature_columns_].to_numpy(dtype="float64")
        y = table[target_column].to_numpy(dtype="float64")
        self._est.fit(X, y)
        return self

    def predict(self, table: pd.DataFrame) -> np.ndarray:
        if not self.feature_columns_:
            raise RuntimeError("Model is not fitted")
        _check_fitted_columns(table, self.feature_columns_)
        # select by name so column order in the scoring table cannot matter
        X = table[self.feature_columns_].to_numpy(dtype="float64")
        return self._est.predict(X)

    @property
    def feature_importances(self) -> pd.Series:
        return pd.Series(self._est.feature_importances_, index=self.feature_columns_).sort_values(ascending=False)


class MeanRatingModel:
    """Deterministic baseline: predicts the training mean of the target."""

    def __init__(self) -> None:
        self.mean_: Optional[float] = None
        self.feature_columns_: List[str] = []

    def fit(self, table: pd.DataFrame, target_column: str) -> "MeanRatingModel":
        validate_required_columns(table, [target_column])
        self.feature_columns_ = _feature_columns(table, target_column)
        self.mean_ = float(table[target_column].mean())
        return self

    def predict(self, table: pd.DataFrame) -> np.ndarray:
        if self.mean_ is None:
            raise RuntimeError("Model is not fitted")
        _check_fitted_columns(table, self.feature_columns_)
        return np.full(len(table), self.mean_, dtype="float64")


def save_model(model: RatingModel, path: str | Path) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(model, p)
    return p


def load_model(path: str | Path) -> RatingModel:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Model not found: {p}")
    return joblib.load(p)
