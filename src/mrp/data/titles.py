# src/mrp/data/titles.py
from __future__ import annotations

import re
from typing import Optional

import pandas as pd

# 4-digit year in parentheses, e.g. "Heat (1995)" or "Blade Runner 2049 (2017)"
_YEAR_RE = re.compile(r"\((\d{4})\)")


def extract_year(title: Optional[str]) -> Optional[int]:
    """
    Release year from a MovieLens title.

    Uses the LAST parenthesized 4-digit group so titles that contain a year in
    the name itself ("2001: A Space Odyssey (1968)") resolve to the release year.
    Returns None when no such group exists.
    """
    if title is None or not isinstance(title, str):
        return None
    found = _YEAR_RE.findall(title)
    if not found:
        return None
    return int(found[-1])


def extract_years(titles: pd.Series) -> pd.Series:
    """Vectorized `extract_year`; nullable Int64, aligned to the input index."""
    years = [extract_year(t) for t in titles.tolist()]
    return pd.Series(years, index=titles.index, dtype="Int64")


def split_genres(genres: Optional[str]) -> frozenset:
    if genres is None or not isinstance(genres, str) or genres == "":
        return frozenset()
    return frozenset(g.strip() for g in genres.split("|") if g.strip())
