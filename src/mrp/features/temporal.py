# src/mrp/features/temporal.py
from __future__ import annotations

import pandas as pd

from mrp.data.schemas import FEATURES, SCHEMA
from mrp.data.validation import validate_required_columns


def add_rating_calendar_features(df: pd.DataFrame, timestamp_column: str = SCHEMA.TIMESTAMP) -> pd.DataFrame:
    """
    RatingYear / RatingMonth (1-12) / RatingDayOfWeek (ISO, Monday=1)
    from Unix epoch seconds, always in UTC.
    """
    validate_required_columns(df, [timestamp_column])
    out = df.copy()
    ts = pd.to_datetime(out[timestamp_column], unit="s", utc=True)
    out[FEATURES.RATING_YEAR] = ts.dt.year.astype("int64")
    out[FEATURES.RATING_MONTH] = ts.dt.month.astype("int64")
    out[FEATURES.RATING_DAY_OF_WEEK] = (ts.dt.dayofweek + 1).astype("int64")
    return out


def add_years_since_release(df: pd.DataFrame, current_year: int) -> pd.DataFrame:
    validate_required_columns(df, [SCHEMA.YEAR])
    out = df.copy()
    out[FEATURES.YEARS_SINCE_RELEASE] = (int(current_year) - out[SCHEMA.YEAR]).astype("float64")
    return out
