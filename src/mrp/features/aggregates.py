# src/mrp/features/aggregates.py
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, Literal, Mapping, Optional, Tuple

import duckdb
import pandas as pd

from mrp.common.utils import log
from mrp.data.schemas import SCHEMA
from mrp.data.validation import DataValidationError, validate_required_columns

Stat = Literal["mean", "count"]

GROUP_KEYS = (SCHEMA.MOVIE_ID, SCHEMA.USER_ID)

_SQL_STAT: Dict[str, str] = {
    "mean": f'AVG(CAST("{SCHEMA.RATING}" AS DOUBLE))',
    "count": "CAST(COUNT(*) AS DOUBLE)",
}


class AggregateFrozenError(RuntimeError):
    pass


@dataclass(frozen=True, eq=False)
class AggregateIndex:
    """
    Read-only key -> statistic mapping built from one ratings partition.

    `source_fingerprint` identifies the exact rows it was folded from, so a
    consumer can tell two indexes built from different partitions apart.
    """
    key_column: str
    stat: str
    values: Mapping[Any, float]
    source_fingerprint: str
    n_source_rows: int

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def get(self, key: Any, default: Optional[float] = None) -> Optional[float]:
        return self.values.get(key, default)

    def to_frame(self, value_column: str = "value") -> pd.DataFrame:
        return pd.DataFrame(
            {self.key_column: list(self.values.keys()), value_column: list(self.values.values())}
        )


def source_fingerprint(ratings: pd.DataFrame, group_key: str) -> str:
    cols = [group_key, SCHEMA.RATING]
    hashed = pd.util.hash_pandas_object(ratings[cols], index=False).to_numpy()
    return hashlib.sha256(hashed.tobytes()).hexdigest()


def compute_aggregates(
    ratings: pd.DataFrame,
    group_key: str,
    stat: Stat = "mean",
) -> AggregateIndex:
    """
    Group `Rating` by `group_key` and fold each group to one scalar.

    Only ever call this on the TRAIN ratings partition: the result is attached
    as a model feature and must not carry any test/holdout rating.
    """
    if group_key not in GROUP_KEYS:
        raise ValueError(f"group_key must be one of {GROUP_KEYS}, got {group_key!r}")
    if stat not in _SQL_STAT:
        raise ValueError(f"stat must be one of {sorted(_SQL_STAT)}, got {stat!r}")

    validate_required_columns(ratings, [group_key, SCHEMA.RATING])
    src = ratings[[group_key, SCHEMA.RATING]]
    n_null = int(src.isna().sum().sum())
    if n_null:
        raise DataValidationError(f"Aggregate source has {n_null} missing cells; filter it first")

    con = duckdb.connect(database=":memory:")
    try:
        con.register("ratings_src", src)
        grouped = con.execute(
            f"""
            SELECT
                "{group_key}" AS key,
                {_SQL_STAT[stat]} AS value
            FROM ratings_src
            GROUP BY "{group_key}"
            ORDER BY "{group_key}";
            """
        ).df()
    finally:
        con.close()

    values = dict(zip(grouped["key"].tolist(), grouped["value"].astype("float64").tolist()))
    return AggregateIndex(
        key_column=group_key,
        stat=stat,
        values=MappingProxyType(values),
        source_fingerprint=source_fingerprint(ratings, group_key),
        n_source_rows=int(len(ratings)),
    )


class AggregateStore:
    """
    First computed index per (key, stat) is frozen for the rest of the run.

    Asking again with the same partition returns the frozen index; asking with
    any other ratings table raises AggregateFrozenError instead of silently
    recomputing from (say) train+test.
    """

    def __init__(self) -> None:
        self._frozen: Dict[Tuple[str, str], AggregateIndex] = {}

    def get_or_compute(self, ratings: pd.DataFrame, group_key: str, stat: Stat = "mean") -> AggregateIndex:
        existing = self._frozen.get((group_key, stat))
        if existing is not None:
            if existing.source_fingerprint != source_fingerprint(ratings, group_key):
                raise AggregateFrozenError(
                    f"{stat}({SCHEMA.RATING}) by {group_key} is already frozen from a "
                    f"{existing.n_source_rows}-row partition; refusing to recompute from a different table"
                )
            return existing

        index = compute_aggregates(ratings, group_key, stat)
        self._frozen[(group_key, stat)] = index
        return index

    def get(self, group_key: str, stat: Stat = "mean") -> AggregateIndex:
        try:
            return self._frozen[(group_key, stat)]
        except KeyError:
            raise KeyError(f"No frozen aggregate for {stat} by {group_key}") from None

    def __contains__(self, item: object) -> bool:
        return item in self._frozen


@dataclass(frozen=True, eq=False)
class TrainingAggregates:
    movie_avg_rating: AggregateIndex
    user_avg_rating: AggregateIndex
    user_rating_count: AggregateIndex

    @property
    def source_fingerprints(self) -> Dict[str, str]:
        return {
            "movie_avg_rating": self.movie_avg_rating.source_fingerprint,
            "user_avg_rating": self.user_avg_rating.source_fingerprint,
            "user_rating_count": self.user_rating_count.source_fingerprint,
        }


def build_training_aggregates(
    train_ratings: pd.DataFrame,
    store: Optional[AggregateStore] = None,
) -> TrainingAggregates:
    store = store or AggregateStore()
    aggs = TrainingAggregates(
        movie_avg_rating=store.get_or_compute(train_ratings, SCHEMA.MOVIE_ID, "mean"),
        user_avg_rating=store.get_or_compute(train_ratings, SCHEMA.USER_ID, "mean"),
        user_rating_count=store.get_or_compute(train_ratings, SCHEMA.USER_ID, "count"),
    )
    log(
        f"[aggregates] train-only: {len(aggs.movie_avg_rating):,} movies, "
        f"{len(aggs.user_avg_rating):,} users from {len(train_ratings):,} ratings"
    )
    return aggs
