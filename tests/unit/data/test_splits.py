from __future__ import annotations

import pandas as pd
import pytest

from mrp.data.schemas import SCHEMA
from mrp.data.splits import SplitConfig, random_split, write_splits


def toy_ratings(n: int = 100) -> pd.DataFrame:
    return pd.DataFrame(
        {
            SCHEMA.USER_ID: [i % 7 for i in range(n)],
            SCHEMA.MOVIE_ID: [i % 11 for i in range(n)],
            SCHEMA.RATING: [float(i % 5 + 1) for i in range(n)],
            SCHEMA.TIMESTAMP: [1_000_000 + i for i in range(n)],
        }
    )


def _keys(df: pd.DataFrame) -> set:
    return set(df[SCHEMA.TIMESTAMP])


def test_split_is_deterministic_for_fixed_seed():
    df = toy_ratings()
    a = random_split(df, SplitConfig(seed=7))
    b = random_split(df, SplitConfig(seed=7))
    pd.testing.assert_frame_equal(a[0], b[0])
    pd.testing.assert_frame_equal(a[1], b[1])


def test_different_seed_changes_partition():
    df = toy_ratings()
    a, _, _ = random_split(df, SplitConfig(seed=1))
    b, _, _ = random_split(df, SplitConfig(seed=2))
    assert _keys(a) != _keys(b)


@pytest.mark.parametrize("stratify", [True, False])
def test_partition_is_disjoint_and_exhaustive(stratify):
    df = toy_ratings()
    train, test, meta = random_split(df, SplitConfig(train_frac=0.8, stratify=stratify))

    assert _keys(train).isdisjoint(_keys(test))
    assert _keys(train) | _keys(test) == _keys(df)
    assert meta["n_train"] + meta["n_test"] == meta["n_total"] == len(df)


def test_stratified_fraction_per_rating_level():
    df = toy_ratings(100)  # 20 rows per rating level
    train, test, _ = random_split(df, SplitConfig(train_frac=0.8, stratify=True))

    assert len(train) == 80 and len(test) == 20
    per_level = train[SCHEMA.RATING].value_counts()
    assert (per_level == 16).all()


def test_parts_keep_input_order():
    df = toy_ratings()
    train, test, _ = random_split(df, SplitConfig())
    assert train[SCHEMA.TIMESTAMP].is_monotonic_increasing
    assert test[SCHEMA.TIMESTAMP].is_monotonic_increasing


def test_full_train_fraction_leaves_empty_test():
    df = toy_ratings(10)
    train, test, meta = random_split(df, SplitConfig(train_frac=1.0))
    assert len(train) == 10
    assert len(test) == 0
    assert list(test.columns) == list(df.columns)


@pytest.mark.parametrize("frac", [0.0, -0.1, 1.5])
def test_invalid_train_frac_raises(frac):
    with pytest.raises(ValueError):
        random_split(toy_ratings(), SplitConfig(train_frac=frac))


def test_empty_input_returns_empty_parts():
    df = toy_ratings().iloc[0:0]
    train, test, meta = random_split(df, SplitConfig())
    assert len(train) == 0 and len(test) == 0
    assert meta["n_total"] == 0


def test_write_splits(tmp_path):
    df = toy_ratings(10)
    train, test, meta = random_split(df, SplitConfig())
    write_splits(train, test, tmp_path / "splits", metadata=meta)

    assert (tmp_path / "splits/train.parquet").exists()
    assert (tmp_path / "splits/test.parquet").exists()
    assert (tmp_path / "splits/metadata.json").exists()
