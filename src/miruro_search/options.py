"""
Closed vocabularies for every search filter dimension.

Values mirror the AniList enums accepted by the advanced-search endpoint.
An Option with an empty value is the "Any" sentinel: the dimension is
unconstrained.
"""
from datetime import date
from enum import Enum
from typing import Dict, List, Tuple

from .schemas import Option

ANY_OPTION = Option(value="", label="Any")


class Dimension(str, Enum):
    GENRES = "genres"
    YEAR = "year"
    SEASON = "season"
    FORMAT = "format"
    STATUS = "status"
    SORT_FIELD = "sortField"
    SORT_DIRECTION = "sortDirection"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class InvalidOptionError(ValueError):
    """Raised when a value is not part of a dimension's vocabulary."""

    def __init__(self, dimension: Dimension, value: str):
        self.dimension = dimension
        self.value = value
        super().__init__(f"{value!r} is not a valid {dimension.value} option")


GENRES: Tuple[str, ...] = (
    "Action", "Adventure", "Comedy", "Drama", "Ecchi", "Fantasy",
    "Horror", "Mahou Shoujo", "Mecha", "Music", "Mystery", "Psychological",
    "Romance", "Sci-Fi", "Slice of Life", "Sports", "Supernatural", "Thriller",
)

SEASONS: Dict[str, str] = {
    "WINTER": "Winter",
    "SPRING": "Spring",
    "SUMMER": "Summer",
    "FALL": "Fall",
}

FORMATS: Dict[str, str] = {
    "TV": "TV",
    "TV_SHORT": "TV Short",
    "MOVIE": "Movie",
    "SPECIAL": "Special",
    "OVA": "OVA",
    "ONA": "ONA",
    "MUSIC": "Music",
}

STATUSES: Dict[str, str] = {
    "RELEASING": "Releasing",
    "FINISHED": "Finished",
    "NOT_YET_RELEASED": "Not Yet Released",
    "CANCELLED": "Cancelled",
    "HIATUS": "Hiatus",
}

SORT_DIRECTIONS: Dict[str, str] = {
    "ASC": "Ascending",
    "DESC": "Descending",
}

SORT_FIELDS: Dict[str, str] = {
    "POPULARITY": "Popularity",
    "TRENDING": "Trending",
    "UPDATED_AT": "Updated",
    "START_DATE": "Start Date",
    "END_DATE": "End Date",
    "FAVOURITES": "Favourites",
    "SCORE": "Score",
    "TITLE_ROMAJI": "Title (Romaji)",
    "TITLE_ENGLISH": "Title (English)",
    "EPISODES": "Episodes",
}

FIRST_YEAR = 1940

DEFAULT_SORT = Option(value="POPULARITY", label=SORT_FIELDS["POPULARITY"])
DEFAULT_DIRECTION = SortDirection.DESC


def years() -> List[str]:
    # Newest first, including next year's announced titles
    return [str(y) for y in range(date.today().year + 1, FIRST_YEAR - 1, -1)]


def _labels(dimension: Dimension) -> Dict[str, str]:
    if dimension is Dimension.GENRES:
        return {g: g for g in GENRES}
    if dimension is Dimension.YEAR:
        return {y: y for y in years()}
    if dimension is Dimension.SEASON:
        return SEASONS
    if dimension is Dimension.FORMAT:
        return FORMATS
    if dimension is Dimension.STATUS:
        return STATUSES
    if dimension is Dimension.SORT_DIRECTION:
        return SORT_DIRECTIONS
    return SORT_FIELDS


def accepts_any(dimension: Dimension) -> bool:
    """Genres use an empty list and sort always has a field and direction, so none take "Any"."""
    return dimension not in (Dimension.GENRES, Dimension.SORT_FIELD, Dimension.SORT_DIRECTION)


def is_valid(dimension: Dimension, value: str) -> bool:
    if value == "":
        return accepts_any(dimension)
    return value in _labels(dimension)


def validate(dimension: Dimension, option: Option) -> Option:
    if not is_valid(dimension, option.value):
        raise InvalidOptionError(dimension, option.value)
    return option


def choices(dimension: Dimension) -> List[Option]:
    """Selectable options for a filter widget, "Any" first where allowed."""
    options = [Option(value=v, label=l) for v, l in _labels(dimension).items()]
    if accepts_any(dimension):
        options.insert(0, ANY_OPTION)
    return options


def from_token(dimension: Dimension, token: str) -> Option:
    """
    Turns a raw query-string token into an Option whose label is the token.
    Anything outside the vocabulary decodes to "Any".
    """
    token = token.strip()
    if not token or not is_valid(dimension, token):
        return ANY_OPTION
    return Option(value=token, label=token)
