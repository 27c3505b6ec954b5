# src/mrp/data/validation.py
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import pandas as pd

from mrp.data.schemas import RATING_MAX, RATING_MIN, SCHEMA


class DataValidationError(ValueError):
    pass


class SchemaMismatchError(DataValidationError):
    def __init__(
        self,
        message: str,
        *,
        missing_in_train: Sequence[str] = (),
        missing_in_score: Sequence[str] = (),
        extra_in_train: Sequence[str] = (),
        extra_in_score: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.missing_in_train = list(missing_in_train)
        self.missing_in_score = list(missing_in_score)
        self.extra_in_train = list(extra_in_train)
        self.extra_in_score = list(extra_in_score)


class MissingValuePresentError(DataValidationError):
    def __init__(self, column: str, n_rows: int, table: str) -> None:
        super().__init__(f"Missing values in {table} column '{column}': {n_rows} rows")
        self.column = column
        self.n_rows = n_rows
        self.table = table


# ============================================================
# Raw entity tables
# ============================================================
def validate_required_columns(df: pd.DataFrame, required: Iterable[str]) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise DataValidationError(f"Missing required columns: {missing}")


def validate_ratings_df(df: pd.DataFrame) -> None:
    validate_required_columns(df, SCHEMA.ratings_columns)

    if not pd.api.types.is_integer_dtype(df[SCHEMA.USER_ID]):
        raise DataValidationError(f"{SCHEMA.USER_ID} must be integer-like")
    if not pd.api.types.is_integer_dtype(df[SCHEMA.MOVIE_ID]):
        raise DataValidationError(f"{SCHEMA.MOVIE_ID} must be integer-like")
    if not pd.api.types.is_numeric_dtype(df[SCHEMA.RATING]):
        raise DataValidationError(f"{SCHEMA.RATING} must be numeric")
    if not pd.api.types.is_integer_dtype(df[SCHEMA.TIMESTAMP]):
        raise DataValidationError(f"{SCHEMA.TIMESTAMP} must be integer epoch seconds")

    null_counts = df[list(SCHEMA.ratings_columns)].isna().sum()
    bad = null_counts[null_counts > 0]
    if len(bad) > 0:
        raise DataValidationError(f"Nulls found in required columns: {bad.to_dict()}")

    out_of_range = ((df[SCHEMA.RATING] < RATING_MIN) | (df[SCHEMA.RATING] > RATING_MAX)).sum()
    if out_of_range:
        raise DataValidationError(
            f"{int(out_of_range)} ratings outside [{RATING_MIN}, {RATING_MAX}]"
        )


# ============================================================
# Train / score feature contract
# ============================================================
def _diff(required: Sequence[str], df: pd.DataFrame) -> List[str]:
    return [c for c in required if c not in df.columns]


def _extra(required: Sequence[str], df: pd.DataFrame) -> List[str]:
    req = set(required)
    return [str(c) for c in df.columns if c not in req]


def _domain_kind(s: pd.Series) -> str:
    return "numeric" if pd.api.types.is_numeric_dtype(s) else "non_numeric"


def validate_feature_tables(
    train: pd.DataFrame,
    score: pd.DataFrame,
    required_columns: Sequence[str],
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Gate in front of the model: both tables must expose the same ordered,
    fully populated feature columns.

    Returns fresh projections of both tables onto `required_columns`.
    Raises SchemaMismatchError / MissingValuePresentError otherwise.
    The check is symmetric: swapping train/score swaps the reported sides.
    """
    required = list(required_columns)
    if len(set(required)) != len(required):
        raise SchemaMismatchError(f"Duplicate names in required columns: {required}")

    missing_train = _diff(required, train)
    missing_score = _diff(required, score)
    if missing_train or missing_score:
        extra_train = _extra(required, train)
        extra_score = _extra(required, score)
        raise SchemaMismatchError(
            "Feature schema mismatch: "
            f"missing in train={missing_train}, missing in score={missing_score}, "
            f"extra in train={extra_train}, extra in score={extra_score}",
            missing_in_train=missing_train,
            missing_in_score=missing_score,
            extra_in_train=extra_train,
            extra_in_score=extra_score,
        )

    tr = train.loc[:, required].copy()
    sc = score.loc[:, required].copy()

    if list(tr.columns) != list(sc.columns):
        raise SchemaMismatchError(
            f"Column order differs: train={list(tr.columns)} score={list(sc.columns)}"
        )

    kind_mismatch = {
        c: (_domain_kind(tr[c]), _domain_kind(sc[c]))
        for c in required
        if _domain_kind(tr[c]) != _domain_kind(sc[c])
    }
    if kind_mismatch:
        raise SchemaMismatchError(f"Column value domains differ (train, score): {kind_mismatch}")

    for name, df in (("train", tr), ("score", sc)):
        for c in required:
            n_missing = int(df[c].isna().sum())
            if n_missing:
                raise MissingValuePresentError(c, n_missing, name)

    return tr, sc
