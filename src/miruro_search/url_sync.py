from typing import Callable, Dict, List, Mapping, Optional, Protocol

from loguru import logger

from . import options
from .options import Dimension
from .schemas import FilterSelection, Option
from .store import FilterSelectionStore

SINGLE_VALUE_PARAMS = {
    "year": Dimension.YEAR,
    "season": Dimension.SEASON,
    "format": Dimension.FORMAT,
    "status": Dimension.STATUS,
}


class AddressBar(Protocol):
    """Read/write access to the page's query string."""

    def get_params(self) -> Mapping[str, str]:
        ...

    def replace_params(self, params: Mapping[str, str]) -> None:
        """Swap the current entry's params without adding a history entry."""
        ...


class MemoryAddressBar:
    """
    In-process address bar with a history stack.
    navigate() and back() simulate user navigation and notify listeners,
    replace_params() does neither.
    """

    def __init__(self, params: Mapping[str, str] = None):
        self.history: List[Dict[str, str]] = [dict(params or {})]
        self.replace_count = 0
        self._listeners: List[Callable[[Mapping[str, str]], None]] = []

    def get_params(self) -> Mapping[str, str]:
        return dict(self.history[-1])

    def replace_params(self, params: Mapping[str, str]) -> None:
        self.history[-1] = dict(params)
        self.replace_count += 1

    def navigate(self, params: Mapping[str, str]) -> None:
        self.history.append(dict(params))
        self._emit()

    def back(self) -> None:
        if len(self.history) > 1:
            self.history.pop()
            self._emit()

    def subscribe(self, listener: Callable[[Mapping[str, str]], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _emit(self):
        params = self.get_params()
        for listener in list(self._listeners):
            listener(params)


# --- Codec ---

def decode(params: Mapping[str, str]) -> FilterSelection:
    """
    Builds a FilterSelection from query-string params.
    Unknown or malformed values are treated as absent.
    """
    genres: List[Option] = []
    for token in (params.get("genres") or "").split(","):
        token = token.strip()
        if token and options.is_valid(Dimension.GENRES, token):
            genres.append(Option(value=token, label=token))
        elif token:
            logger.debug(f"Dropping unknown genre from URL: {token!r}")

    single = {
        name: options.from_token(dimension, params.get(name) or "")
        for name, dimension in SINGLE_VALUE_PARAMS.items()
    }
    return FilterSelection(query=params.get("query") or "", genres=genres, **single)


def encode(selection: FilterSelection) -> Dict[str, str]:
    """
    query is always written, even when empty. Everything else only when constrained.
    """
    params = {"query": selection.query}
    if selection.genres:
        params["genres"] = ",".join(g.value for g in selection.genres)
    for name in SINGLE_VALUE_PARAMS:
        value = getattr(selection, name).value
        if value:
            params[name] = value
    return params


class UrlSynchronizer:
    """
    Keeps the address bar and the FilterSelection store in step.

    Store changes are written with replace semantics. External navigation only
    feeds the query back in; the guard flag stops that write-back from
    re-entering itself.
    """

    def __init__(self, store: FilterSelectionStore, address_bar: AddressBar):
        self.store = store
        self.address_bar = address_bar
        self._applying_external = False
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self):
        self._unsubscribe = self.store.subscribe(lambda changed: self.write())
        self.write()

    def detach(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def write(self) -> bool:
        """Encodes the store into the address bar. Returns False if nothing changed."""
        params = encode(self.store.selection)
        if params == dict(self.address_bar.get_params()):
            return False
        self.address_bar.replace_params(params)
        return True

    def on_location_change(self, params: Mapping[str, str] = None) -> bool:
        """
        Adopts the URL's query when it differs from the in-memory one
        (back/forward, pasted links). Returns True if the store was updated.
        """
        if self._applying_external:
            return False
        if params is None:
            params = self.address_bar.get_params()

        new_query = params.get("query") or ""
        if new_query == self.store.query:
            return False

        logger.info(f"🔗 Query changed externally: {self.store.query!r} -> {new_query!r}")
        self._applying_external = True
        try:
            self.store.query = new_query
        finally:
            self._applying_external = False
        return True
