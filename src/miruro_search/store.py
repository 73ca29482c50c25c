from typing import Callable, List, Set

from loguru import logger

from . import options
from .options import Dimension, InvalidOptionError, SortDirection
from .schemas import FilterSelection, Option

ChangeListener = Callable[[Set[str]], None]

_DIMENSIONS = {
    "year": Dimension.YEAR,
    "season": Dimension.SEASON,
    "format": Dimension.FORMAT,
    "status": Dimension.STATUS,
    "sort_field": Dimension.SORT_FIELD,
}


class FilterSelectionStore:
    """
    Holds the current value of every filter dimension and the free-text query.

    Pure state: listeners are told which fields changed and decide what to do
    (rewrite the URL, reset pagination, schedule a fetch).
    """

    def __init__(self, selection: FilterSelection = None):
        self._selection = selection or FilterSelection()
        self._listeners: List[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    @property
    def selection(self) -> FilterSelection:
        """A copy, so callers can't mutate state behind the store's back."""
        return self._selection.model_copy(deep=True)

    # --- Getters / setters ---

    @property
    def query(self) -> str:
        return self._selection.query

    @query.setter
    def query(self, value: str):
        self.update(query=value)

    @property
    def genres(self) -> List[Option]:
        return list(self._selection.genres)

    @genres.setter
    def genres(self, value: List[Option]):
        self.update(genres=value)

    @property
    def year(self) -> Option:
        return self._selection.year

    @year.setter
    def year(self, value: Option):
        self.update(year=value)

    @property
    def season(self) -> Option:
        return self._selection.season

    @season.setter
    def season(self, value: Option):
        self.update(season=value)

    @property
    def format(self) -> Option:
        return self._selection.format

    @format.setter
    def format(self, value: Option):
        self.update(format=value)

    @property
    def status(self) -> Option:
        return self._selection.status

    @status.setter
    def status(self, value: Option):
        self.update(status=value)

    @property
    def sort_field(self) -> Option:
        return self._selection.sort_field

    @sort_field.setter
    def sort_field(self, value: Option):
        self.update(sort_field=value)

    @property
    def sort_direction(self) -> str:
        return self._selection.sort_direction

    @sort_direction.setter
    def sort_direction(self, value: str):
        self.update(sort_direction=value)

    # --- Bulk operations ---

    def update(self, **fields) -> Set[str]:
        """
        Applies several dimensions as one change and notifies listeners once.
        Returns the names of the fields that actually changed.
        """
        validated = {name: self._validate(name, value) for name, value in fields.items()}

        candidate = self._selection.model_copy(update=validated)
        # Re-run model validation (genre de-duplication)
        candidate = FilterSelection.model_validate(candidate.model_dump())

        changed = {
            name for name in validated
            if getattr(candidate, name) != getattr(self._selection, name)
        }
        if not changed:
            return changed

        self._selection = candidate
        logger.debug(f"Filter change: {sorted(changed)}")
        for listener in list(self._listeners):
            listener(changed)
        return changed

    def reset(self) -> Set[str]:
        """Restores every dimension except the query to its default."""
        return self.update(
            genres=[],
            year=options.ANY_OPTION,
            season=options.ANY_OPTION,
            format=options.ANY_OPTION,
            status=options.ANY_OPTION,
            sort_field=options.DEFAULT_SORT,
            sort_direction=options.DEFAULT_DIRECTION.value,
        )

    @staticmethod
    def _validate(name: str, value):
        if name == "query":
            return value or ""
        if name == "genres":
            return [options.validate(Dimension.GENRES, g) for g in value]
        if name == "sort_direction":
            if not options.is_valid(Dimension.SORT_DIRECTION, value):
                raise InvalidOptionError(Dimension.SORT_DIRECTION, str(value))
            return SortDirection(value).value
        if name in _DIMENSIONS:
            return options.validate(_DIMENSIONS[name], value)
        raise AttributeError(f"Unknown filter dimension: {name}")
