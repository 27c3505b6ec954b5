# src/mrp/data/schemas.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Tuple


@dataclass(frozen=True)
class ColumnSchema:
    """
    Canonical column names shared by every entity table.
    Both the CSV and the '::' loaders must land on these names.
    """
    MOVIE_ID: Final[str] = "MovieID"
    USER_ID: Final[str] = "UserID"
    RATING: Final[str] = "Rating"
    TIMESTAMP: Final[str] = "Timestamp"
    TITLE: Final[str] = "Title"
    YEAR: Final[str] = "Year"
    GENRES: Final[str] = "Genres"
    TAG: Final[str] = "Tag"
    IMDB_ID: Final[str] = "IMDbID"
    TMDB_ID: Final[str] = "TMDBID"

    @property
    def movies_columns(self) -> Tuple[str, ...]:
        return (self.MOVIE_ID, self.TITLE, self.YEAR, self.GENRES)

    @property
    def ratings_columns(self) -> Tuple[str, ...]:
        return (self.USER_ID, self.MOVIE_ID, self.RATING, self.TIMESTAMP)

    @property
    def tags_columns(self) -> Tuple[str, ...]:
        return (self.USER_ID, self.MOVIE_ID, self.TAG, self.TIMESTAMP)

    @property
    def links_columns(self) -> Tuple[str, ...]:
        return (self.MOVIE_ID, self.IMDB_ID, self.TMDB_ID)


@dataclass(frozen=True)
class FeatureSchema:
    """
    Model-facing feature contract. Train, test and holdout feature tables
    are all projected to `required_columns` in this exact order.
    """
    RATING_YEAR: Final[str] = "RatingYear"
    RATING_MONTH: Final[str] = "RatingMonth"
    RATING_DAY_OF_WEEK: Final[str] = "RatingDayOfWeek"
    YEARS_SINCE_RELEASE: Final[str] = "YearsSinceRelease"
    MOVIE_AVG_RATING: Final[str] = "MovieAvgRating"
    USER_AVG_RATING: Final[str] = "UserAvgRating"
    USER_RATING_COUNT: Final[str] = "UserRatingCount"

    @property
    def target(self) -> str:
        return SCHEMA.RATING

    @property
    def feature_columns(self) -> Tuple[str, ...]:
        return (
            SCHEMA.YEAR,
            self.RATING_YEAR,
            self.RATING_MONTH,
            self.RATING_DAY_OF_WEEK,
            self.YEARS_SINCE_RELEASE,
            self.MOVIE_AVG_RATING,
            self.USER_AVG_RATING,
            self.USER_RATING_COUNT,
        )

    @property
    def required_columns(self) -> Tuple[str, ...]:
        return self.feature_columns + (self.target,)

    @property
    def id_columns(self) -> Tuple[str, ...]:
        return (SCHEMA.USER_ID, SCHEMA.MOVIE_ID)


SCHEMA = ColumnSchema()
FEATURES = FeatureSchema()

RATING_MIN: Final[float] = 0.5
RATING_MAX: Final[float] = 5.0
