# src/mrp/features/impute.py
from __future__ import annotations

import pandas as pd

from mrp.common.utils import log
from mrp.data.validation import validate_required_columns
from mrp.features.join import is_unresolved


class ImputationImpossibleError(ValueError):
    pass


def impute_cold_start(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """
    Replace UNRESOLVED cells of `column` with the mean of its resolved cells
    in this same table (not the training mean).
    """
    validate_required_columns(df, [column])
    mask = is_unresolved(df[column])
    n_unresolved = int(mask.sum())
    if n_unresolved == 0:
        return df.copy()

    resolved = df.loc[~mask, column]
    if resolved.empty:
        raise ImputationImpossibleError(
            f"All {n_unresolved} values of '{column}' are unresolved; mean is undefined"
        )

    fill = float(resolved.mean())
    out = df.copy()
    out.loc[mask, column] = fill
    log(f"[impute] {column}: {n_unresolved:,} cold-start rows -> {fill:.4f}")
    return out


def fill_unresolved(df: pd.DataFrame, column: str, value: float) -> pd.DataFrame:
    """Constant fill, for features whose unseen-entity value is known (e.g. a count of 0)."""
    validate_required_columns(df, [column])
    out = df.copy()
    out[column] = out[column].where(~is_unresolved(out[column]), float(value))
    return out
