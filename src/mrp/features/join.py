# src/mrp/features/join.py
from __future__ import annotations

from typing import Final, Sequence

import numpy as np
import pandas as pd

from mrp.data.schemas import SCHEMA
from mrp.data.validation import DataValidationError, validate_required_columns
from mrp.features.aggregates import AggregateIndex

# marker for "key not present in the aggregate index"; never 0, never a dropped row
UNRESOLVED: Final[float] = np.nan


def is_unresolved(s: pd.Series) -> pd.Series:
    return s.isna()


def join_aggregate(
    base: pd.DataFrame,
    index: AggregateIndex,
    key_column: str,
    output_column: str,
) -> pd.DataFrame:
    """
    Left join of one aggregate onto `base`.

    - every row of `base` is kept, in order, with its index
    - keys missing from `index` get UNRESOLVED
    - an existing `output_column` is overwritten (no _x/_y suffixes)
    """
    validate_required_columns(base, [key_column])
    if output_column == key_column:
        raise DataValidationError(f"Refusing to overwrite key column {key_column!r}")

    out = base.copy()
    # unmapped keys come back as NaN == UNRESOLVED
    out[output_column] = out[key_column].map(dict(index.values)).astype("float64")
    return out


def merge_movies(
    ratings: pd.DataFrame,
    movies: pd.DataFrame,
    columns: Sequence[str] = (SCHEMA.TITLE, SCHEMA.YEAR, SCHEMA.GENRES),
) -> pd.DataFrame:
    """
    Attach movie attributes to each rating (many-to-one on MovieID).
    Ratings for movies absent from `movies` drop out.
    """
    cols = [c for c in columns if c in movies.columns]
    validate_required_columns(movies, [SCHEMA.MOVIE_ID])

    left = ratings.drop(columns=[c for c in cols if c in ratings.columns])
    right = movies[[SCHEMA.MOVIE_ID] + cols]
    return left.merge(right, on=SCHEMA.MOVIE_ID, how="inner", sort=False, validate="many_to_one")
