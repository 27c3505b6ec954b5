from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from mrp.data.loading import (
    HoldoutFiles,
    MovieLensFiles,
    TableNotFoundError,
    load_dat,
    load_holdout_movies,
    load_holdout_ratings,
    load_movielens,
    load_table,
    preprocess_movies,
)
from mrp.data.schemas import SCHEMA


def test_load_table_missing_file_raises(tmp_path: Path):
    with pytest.raises(TableNotFoundError):
        load_table(tmp_path / "missing.csv")
    # still a FileNotFoundError for callers that only know the builtin
    with pytest.raises(FileNotFoundError):
        load_table(tmp_path / "missing.csv")


def test_load_table_only_configured_tokens_are_missing(tmp_path: Path):
    p = tmp_path / "t.csv"
    p.write_text("a,b\n1,NA\n2,\n3,null\n", encoding="utf-8")

    df = load_table(p, dtype={"b": str})
    assert df["b"].isna().tolist() == [True, True, False]
    assert df.loc[2, "b"] == "null"


def test_load_dat_splits_on_double_colon(tmp_path: Path):
    p = tmp_path / "ratings.dat"
    p.write_text("1::10::4.5::838985046\n2::20::3::838983525\n", encoding="utf-8")

    df = load_dat(p, ["userId", "movieId", "rating", "timestamp"])
    assert list(df.columns) == ["userId", "movieId", "rating", "timestamp"]
    assert df.shape == (2, 4)
    assert df.loc[0, "rating"] == "4.5"


def test_load_dat_missing_file_raises(tmp_path: Path):
    with pytest.raises(TableNotFoundError):
        load_dat(tmp_path / "movies.dat", ["movieId", "title", "genres"])


def test_primary_and_holdout_loaders_agree_on_schema(write_raw_movielens: Path, write_holdout_dat: Path):
    primary = load_movielens(MovieLensFiles(root_dir=write_raw_movielens))
    h_movies = load_holdout_movies(HoldoutFiles(root_dir=write_holdout_dat))
    h_ratings = load_holdout_ratings(HoldoutFiles(root_dir=write_holdout_dat))

    assert list(h_movies.columns) == list(primary["movies"].columns) == list(SCHEMA.movies_columns)
    assert list(h_ratings.columns) == list(primary["ratings"].columns) == list(SCHEMA.ratings_columns)
    for c in SCHEMA.ratings_columns:
        assert h_ratings[c].dtype == primary["ratings"][c].dtype, c
    for c in SCHEMA.movies_columns:
        assert h_movies[c].dtype == primary["movies"][c].dtype, c


def test_same_title_gives_same_year_on_both_paths():
    titles = ["Toy Story (1995)", "Blade Runner 2049 (2017)", "2001: A Space Odyssey (1968)"]
    csv_raw = pd.DataFrame({"movieId": [1, 2, 3], "title": titles, "genres": ["a", "b", "c"]})
    dat_raw = pd.DataFrame({"movieId": ["1", "2", "3"], "title": titles, "genres": ["a", "b", "c"]})

    a = preprocess_movies(csv_raw)
    b = preprocess_movies(dat_raw)
    assert a[SCHEMA.YEAR].tolist() == b[SCHEMA.YEAR].tolist() == [1995, 2017, 1968]


def test_preprocess_movies_drops_one_char_titles():
    raw = pd.DataFrame({"movieId": [1, 2], "title": ["X", "Heat (1995)"], "genres": ["Drama", "Crime"]})
    out = preprocess_movies(raw)
    assert out[SCHEMA.MOVIE_ID].tolist() == [2]


def test_links_keep_external_ids_as_text(write_raw_movielens: Path):
    links = load_movielens(MovieLensFiles(root_dir=write_raw_movielens))["links"]
    assert links.loc[links[SCHEMA.MOVIE_ID] == 1, SCHEMA.IMDB_ID].iloc[0] == "0114709"
