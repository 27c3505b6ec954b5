# src/mrp/data/loading.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

import pandas as pd

from mrp.common.utils import log
from mrp.data.schemas import SCHEMA
from mrp.data.titles import extract_years
from mrp.data.validation import validate_required_columns

DEFAULT_NA_VALUES: Tuple[str, ...] = ("", "NA")


@dataclass(frozen=True)
class MovieLensFiles:
    """Raw MovieLens CSV layout (ml-latest-small)."""
    root_dir: Path = Path("data/raw/ml-latest-small")
    movies_file: str = "movies.csv"
    ratings_file: str = "ratings.csv"
    tags_file: str = "tags.csv"
    links_file: str = "links.csv"

    @property
    def movies_path(self) -> Path:
        return self.root_dir / self.movies_file

    @property
    def ratings_path(self) -> Path:
        return self.root_dir / self.ratings_file

    @property
    def tags_path(self) -> Path:
        return self.root_dir / self.tags_file

    @property
    def links_path(self) -> Path:
        return self.root_dir / self.links_file


@dataclass(frozen=True)
class HoldoutFiles:
    """'::'-delimited holdout layout (ml-10M100K)."""
    root_dir: Path = Path("data/final_holdout_test/ml-10M100K")
    movies_file: str = "movies.dat"
    ratings_file: str = "ratings.dat"

    @property
    def movies_path(self) -> Path:
        return self.root_dir / self.movies_file

    @property
    def ratings_path(self) -> Path:
        return self.root_dir / self.ratings_file


class TableNotFoundError(FileNotFoundError):
    pass


def _ensure_exists(path: Path) -> None:
    if not path.exists():
        raise TableNotFoundError(f"Required table not found: {path}")


# ============================================================
# Raw readers
# ============================================================
def load_table(
    path: str | Path,
    *,
    na_values: Sequence[str] = DEFAULT_NA_VALUES,
    dtype: Optional[dict] = None,
) -> pd.DataFrame:
    """
    Read a headered CSV. Only the tokens in `na_values` mark a missing cell;
    pandas' default NA vocabulary is switched off so e.g. a tag "null" survives.
    """
    p = Path(path)
    _ensure_exists(p)
    df = pd.read_csv(p, na_values=list(na_values), keep_default_na=False, dtype=dtype)
    log(f"[load] {p} -> {len(df):,} rows x {df.shape[1]} cols")
    return df


def load_dat(
    path: str | Path,
    columns: Sequence[str],
    *,
    na_values: Sequence[str] = DEFAULT_NA_VALUES,
    encoding: str = "utf-8",
) -> pd.DataFrame:
    """
    Read a headerless '::'-delimited file (MovieLens 1M/10M layout).
    Every field is read as text; typing happens in the shared preprocessors.
    """
    p = Path(path)
    _ensure_exists(p)
    df = pd.read_csv(
        p,
        sep="::",
        engine="python",
        header=None,
        names=list(columns),
        dtype=str,
        na_values=list(na_values),
        keep_default_na=False,
        encoding=encoding,
        encoding_errors="replace",
    )
    log(f"[load] {p} -> {len(df):,} rows x {df.shape[1]} cols")
    return df


# ============================================================
# Preprocessors: raw camelCase -> canonical schema
# ============================================================
def _to_int(s: pd.Series) -> pd.Series:
    return pd.to_numeric(s, errors="coerce").astype("Int64")


def preprocess_movies(raw: pd.DataFrame) -> pd.DataFrame:
    """movieId,title,genres -> MovieID, Title, Year, Genres."""
    title = raw["title"].astype("string").str.strip()
    out = pd.DataFrame(
        {
            SCHEMA.MOVIE_ID: _to_int(raw["movieId"]),
            SCHEMA.TITLE: title,
            SCHEMA.YEAR: extract_years(title),
            SCHEMA.GENRES: raw["genres"].astype("string").str.strip(),
        }
    )
    # one-character titles are parse debris
    out = out[out[SCHEMA.TITLE].isna() | (out[SCHEMA.TITLE].str.len() > 1)]
    return out.reset_index(drop=True)


def preprocess_ratings(raw: pd.DataFrame) -> pd.DataFrame:
    """userId,movieId,rating,timestamp -> UserID, MovieID, Rating, Timestamp (epoch seconds)."""
    return pd.DataFrame(
        {
            SCHEMA.USER_ID: _to_int(raw["userId"]),
            SCHEMA.MOVIE_ID: _to_int(raw["movieId"]),
            SCHEMA.RATING: pd.to_numeric(raw["rating"], errors="coerce").astype("float64"),
            SCHEMA.TIMESTAMP: _to_int(raw["timestamp"]),
        }
    )


def preprocess_tags(raw: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame(
        {
            SCHEMA.USER_ID: _to_int(raw["userId"]),
            SCHEMA.MOVIE_ID: _to_int(raw["movieId"]),
            SCHEMA.TAG: raw["tag"].astype("string"),
            SCHEMA.TIMESTAMP: _to_int(raw["timestamp"]),
        }
    )


def preprocess_links(raw: pd.DataFrame) -> pd.DataFrame:
    # external ids stay opaque text (leading zeros in imdbId matter)
    return pd.DataFrame(
        {
            SCHEMA.MOVIE_ID: _to_int(raw["movieId"]),
            SCHEMA.IMDB_ID: raw["imdbId"].astype("string"),
            SCHEMA.TMDB_ID: raw["tmdbId"].astype("string"),
        }
    )


# ============================================================
# Entry points
# ============================================================
def load_movielens(files: MovieLensFiles) -> dict[str, pd.DataFrame]:
    """All four primary sources, preprocessed but not yet filtered."""
    text_ids = {"imdbId": str, "tmdbId": str}
    return {
        "movies": preprocess_movies(load_table(files.movies_path)),
        "ratings": preprocess_ratings(load_table(files.ratings_path)),
        "tags": preprocess_tags(load_table(files.tags_path, dtype={"tag": str})),
        "links": preprocess_links(load_table(files.links_path, dtype=text_ids)),
    }


def load_holdout_movies(files: HoldoutFiles) -> pd.DataFrame:
    raw = load_dat(files.movies_path, ["movieId", "title", "genres"])
    return preprocess_movies(raw)


def load_holdout_ratings(files: HoldoutFiles) -> pd.DataFrame:
    raw = load_dat(files.ratings_path, ["userId", "movieId", "rating", "timestamp"])
    return preprocess_ratings(raw)


def load_cleaned_movies(path: str | Path) -> pd.DataFrame:
    df = load_table(path, dtype={SCHEMA.TITLE: str, SCHEMA.GENRES: str})
    validate_required_columns(df, SCHEMA.movies_columns)
    return df[list(SCHEMA.movies_columns)]


def load_cleaned_ratings(path: str | Path) -> pd.DataFrame:
    df = load_table(path)
    validate_required_columns(df, SCHEMA.ratings_columns)
    return df[list(SCHEMA.ratings_columns)]
