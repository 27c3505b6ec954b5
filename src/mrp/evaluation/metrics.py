# src/mrp/evaluation/metrics.py
from __future__ import annotations

import math
from typing import Dict, Sequence, Tuple

import numpy as np
import pandas as pd


class EmptyInputError(ValueError):
    pass


def _as_float(values: Sequence[float]) -> np.ndarray:
    s = pd.Series(values).reset_index(drop=True)
    return pd.to_numeric(s, errors="coerce").to_numpy(dtype="float64", na_value=np.nan)


def _valid_pairs(actual: Sequence[float], predicted: Sequence[float]) -> Tuple[np.ndarray, np.ndarray, int]:
    a = _as_float(actual)
    p = _as_float(predicted)
    if a.shape[0] != p.shape[0]:
        raise ValueError(f"actual and predicted differ in length: {a.shape[0]} != {p.shape[0]}")

    ok = ~(np.isnan(a) | np.isnan(p))
    n_ignored = int((~ok).sum())
    if not ok.any():
        raise EmptyInputError("No (actual, predicted) pair without a missing value")
    return a[ok], p[ok], n_ignored


def mse(actual: Sequence[float], predicted: Sequence[float]) -> float:
    """Mean squared error over index-aligned pairs; pairs with a missing side are skipped."""
    a, p, _ = _valid_pairs(actual, predicted)
    return float(np.mean((a - p) ** 2))


def rmse(actual: Sequence[float], predicted: Sequence[float]) -> float:
    return math.sqrt(mse(actual, predicted))


def evaluate_predictions(actual: Sequence[float], predicted: Sequence[float]) -> Dict[str, float]:
    a, p, n_ignored = _valid_pairs(actual, predicted)
    err = float(np.mean((a - p) ** 2))
    return {
        "mse": err,
        "rmse": math.sqrt(err),
        "n_pairs": float(a.shape[0]),
        "n_ignored": float(n_ignored),
    }
