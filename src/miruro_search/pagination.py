from dataclasses import dataclass, field
from typing import Callable, List, Optional

from loguru import logger

from .schemas import AnimeSummary, SearchResponse


@dataclass
class ResultSet:
    """Accumulated results for the current filter set, as the rendering layer sees them."""
    items: List[AnimeSummary] = field(default_factory=list)
    has_next_page: bool = False
    loading: bool = False
    error: Optional[str] = None


class PaginationController:
    """
    Owns the page number and decides replace-vs-append.

    `on_page_change` is called whenever request_more() advances the page, and
    `fetch_pending` tells us whether a request is scheduled or in flight.
    """

    def __init__(
        self,
        results: ResultSet,
        max_page: int = 10,
        on_page_change: Callable[[], None] = None,
        fetch_pending: Callable[[], bool] = None,
    ):
        self.results = results
        self.max_page = max_page
        self._page = 1
        self._on_page_change = on_page_change or (lambda: None)
        self._fetch_pending = fetch_pending or (lambda: False)

    @property
    def page(self) -> int:
        return self._page

    @property
    def capped(self) -> bool:
        return self._page >= self.max_page

    @property
    def can_load_more(self) -> bool:
        return self.results.has_next_page and not self.capped

    def request_more(self) -> bool:
        """
        Advances to the next page. No-op once capped or while a fetch is
        scheduled or in flight (a page-1 reload included).
        """
        if self.capped:
            logger.debug(f"Page cap reached ({self.max_page}), ignoring load more")
            return False
        if self._fetch_pending():
            return False
        self._page += 1
        self._on_page_change()
        return True

    def on_query_or_filter_change(self):
        self._page = 1
        self.results.items = []
        self.results.has_next_page = False

    def on_fetch_failed(self, page: int):
        """Steps back from a failed load-more so the next request_more() retries that page."""
        if page > 1 and page == self._page:
            self._page -= 1
            logger.debug(f"Page {page} failed, back to page {self._page}")

    def merge_response(self, page: int, response: SearchResponse):
        if page == 1:
            self.results.items = list(response.results)
        else:
            self.results.items = self.results.items + list(response.results)
        self.results.has_next_page = response.hasNextPage
        logger.debug(f"Merged page {page}: {len(response.results)} new, {len(self.results.items)} total")
