# tests/conftest.py
from __future__ import annotations

from pathlib import Path
import os

import pandas as pd
import pytest

from mrp.data.schemas import SCHEMA


@pytest.fixture()
def sandbox(tmp_path: Path) -> Path:
    """Per-test filesystem sandbox."""
    return tmp_path


@pytest.fixture()
def project_root() -> Path:
    """Repo root (where pyproject.toml lives)."""
    # tests/ -> repo root
    return Path(__file__).resolve().parents[1]


@pytest.fixture()
def chdir_sandbox(monkeypatch, sandbox: Path):
    """
    Run code as-if repo root is sandbox so all relative paths
    like data/... model/... reports/... resolve inside sandbox.
    """
    monkeypatch.chdir(sandbox)
    return sandbox


@pytest.fixture()
def small_movies_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            SCHEMA.MOVIE_ID: [1, 2, 9],
            SCHEMA.TITLE: ["Toy Story (1995)", "Heat (1995)", "Cold Start (2001)"],
            SCHEMA.YEAR: [1995, 1995, 2001],
            SCHEMA.GENRES: ["Animation|Comedy", "Action|Crime", "Drama"],
        }
    )


@pytest.fixture()
def small_ratings_df() -> pd.DataFrame:
    """
    U1 rates M1=5, M2=3; U2 rates M1=4.
    MovieAvgRating -> {1: 4.5, 2: 3.0}
    """
    return pd.DataFrame(
        {
            SCHEMA.USER_ID: [1, 1, 2],
            SCHEMA.MOVIE_ID: [1, 2, 1],
            SCHEMA.RATING: [5.0, 3.0, 4.0],
            SCHEMA.TIMESTAMP: [1230768000, 1230854400, 946684800],
        }
    )


def _raw_ratings_rows() -> list[str]:
    rows = []
    for u in range(1, 7):
        for m in range(1, 6):
            rating = float((u + m) % 5 + 1)
            ts = 1230768000 + 86400 * (u * 10 + m)
            rows.append(f"{u},{m},{rating},{ts}")
    return rows


@pytest.fixture()
def write_raw_movielens(sandbox: Path) -> Path:
    """ml-latest-small style CSVs under <sandbox>/data/raw/ml-latest-small."""
    root = sandbox / "data/raw/ml-latest-small"
    root.mkdir(parents=True, exist_ok=True)

    (root / "movies.csv").write_text(
        "movieId,title,genres\n"
        '1,Toy Story (1995),Adventure|Animation|Children\n'
        '2,Jumanji (1995),Adventure|Children|Fantasy\n'
        '3,"2001: A Space Odyssey (1968)",Adventure|Drama|Sci-Fi\n'
        "4,Heat (1995),Action|Crime|Thriller\n"
        "5,Blade Runner 2049 (2017),Sci-Fi\n"
        "6,Untitled,Drama\n",
        encoding="utf-8",
    )

    ratings = _raw_ratings_rows()
    ratings.append(ratings[0])  # exact duplicate
    ratings.append("6,4,NA,1230768000")  # missing rating
    ratings.append("1,6,4.0,1230768000")  # movie without a year
    (root / "ratings.csv").write_text(
        "userId,movieId,rating,timestamp\n" + "\n".join(ratings) + "\n", encoding="utf-8"
    )

    (root / "tags.csv").write_text(
        "userId,movieId,tag,timestamp\n"
        "1,1,pixar,1230768000\n"
        "1,1,pixar,1230768000\n"
        "2,4,null,1230768000\n"
        "3,5,,1230768000\n",
        encoding="utf-8",
    )
    (root / "links.csv").write_text(
        "movieId,imdbId,tmdbId\n"
        "1,0114709,862\n"
        "2,0113497,8844\n"
        "3,0062622,62\n"
        "4,0113277,949\n"
        "5,1856101,335984\n"
        "6,0000001,\n",
        encoding="utf-8",
    )
    return root


@pytest.fixture()
def write_holdout_dat(sandbox: Path) -> Path:
    """ml-10M100K style '::' files under <sandbox>/data/final_holdout_test/ml-10M100K."""
    root = sandbox / "data/final_holdout_test/ml-10M100K"
    root.mkdir(parents=True, exist_ok=True)
    (root / "movies.dat").write_text(
        "1::Toy Story (1995)::Adventure|Animation|Children|Comedy|Fantasy\n"
        "4::Heat (1995)::Action|Crime|Thriller\n"
        "99::Cold Start Film (2001)::Drama\n",
        encoding="utf-8",
    )
    (root / "ratings.dat").write_text(
        "1::1::5::838985046\n"
        "2::4::3.5::838983525\n"
        "3::99::4::838983392\n"
        "77::1::2.5::868245777\n",
        encoding="utf-8",
    )
    return root


@pytest.fixture()
def has_movielens_data() -> bool:
    """
    Integration smoke tests may check real MovieLens presence.
    Keep this false by default for unit suite.
    """
    return os.getenv("HAS_MOVIELENS", "0") == "1"
