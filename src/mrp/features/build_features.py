# src/mrp/features/build_features.py
from __future__ import annotations

from typing import Any, Dict, Tuple

import pandas as pd

from mrp.common.utils import log
from mrp.data.schemas import FEATURES, SCHEMA
from mrp.data.validation import validate_required_columns
from mrp.features.aggregates import TrainingAggregates
from mrp.features.impute import fill_unresolved, impute_cold_start
from mrp.features.join import is_unresolved, join_aggregate, merge_movies
from mrp.features.temporal import add_rating_calendar_features, add_years_since_release


def build_feature_table(
    ratings: pd.DataFrame,
    movies: pd.DataFrame,
    aggregates: TrainingAggregates,
    *,
    current_year: int,
    impute: bool = True,
) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    The single feature builder behind the train, test and holdout paths.

    Aggregates are injected, never computed here: the caller decides which
    partition they come from (always TRAIN).

    Output columns: UserID, MovieID, <FEATURES.feature_columns>, Rating.
    With impute=False the aggregate columns may still hold UNRESOLVED.
    """
    validate_required_columns(ratings, SCHEMA.ratings_columns)

    df = merge_movies(ratings, movies, columns=(SCHEMA.YEAR,))
    n_dropped = len(ratings) - len(df)
    if n_dropped:
        log(f"[features] {n_dropped:,} ratings without a known movie dropped out of the join")

    df = add_rating_calendar_features(df)
    df = add_years_since_release(df, current_year)

    df = join_aggregate(df, aggregates.movie_avg_rating, SCHEMA.MOVIE_ID, FEATURES.MOVIE_AVG_RATING)
    df = join_aggregate(df, aggregates.user_avg_rating, SCHEMA.USER_ID, FEATURES.USER_AVG_RATING)
    df = join_aggregate(df, aggregates.user_rating_count, SCHEMA.USER_ID, FEATURES.USER_RATING_COUNT)

    unresolved = {
        c: int(is_unresolved(df[c]).sum())
        for c in (FEATURES.MOVIE_AVG_RATING, FEATURES.USER_AVG_RATING, FEATURES.USER_RATING_COUNT)
    }
    log(f"[features] cold-start rows per aggregate: {unresolved}")

    if impute:
        df = impute_cold_start(df, FEATURES.MOVIE_AVG_RATING)
        df = impute_cold_start(df, FEATURES.USER_AVG_RATING)
        # an unseen user truly has zero training ratings
        df = fill_unresolved(df, FEATURES.USER_RATING_COUNT, 0.0)

    out = df.loc[:, list(FEATURES.id_columns) + list(FEATURES.required_columns)].copy()
    for c in FEATURES.feature_columns:
        out[c] = out[c].astype("float64")
    out = out.reset_index(drop=True)

    meta: Dict[str, Any] = {
        "n_rows_in": int(len(ratings)),
        "n_rows": int(len(out)),
        "n_rows_without_movie": int(n_dropped),
        "unresolved_before_impute": unresolved,
        "imputed": bool(impute),
        "current_year": int(current_year),
        "feature_columns": list(FEATURES.feature_columns),
        "target": FEATURES.target,
        "aggregate_sources": aggregates.source_fingerprints,
    }
    return out, meta
