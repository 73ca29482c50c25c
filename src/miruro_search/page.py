"""
The search page: one FilterSelection store, URL synchronizer, fetch
orchestrator and pagination controller, wired together for a single page
instance.

    page = SearchPage(address_bar)
    page.mount()             # inside a running event loop
    page.store.year = Option(value="2024", label="2024")
    await page.settle()
    page.results.items
"""
from typing import Mapping, Optional, Set

from loguru import logger

from .api_client import CatalogClient
from .config import Settings, get_settings
from .orchestrator import Fetcher, FetchOrchestrator
from .pagination import PaginationController, ResultSet
from .schemas import SearchRequest, SearchResponse
from .store import FilterSelectionStore
from .url_sync import AddressBar, UrlSynchronizer, decode


class SearchPage:
    def __init__(self, address_bar: AddressBar, fetcher: Fetcher = None, settings: Settings = None):
        self.settings = settings or get_settings()
        self.address_bar = address_bar

        # Seeded from the URL before anyone is listening
        self.store = FilterSelectionStore(decode(address_bar.get_params()))
        self.url_sync = UrlSynchronizer(self.store, address_bar)

        if fetcher is None:
            fetcher = CatalogClient(
                base_url=self.settings.API_BASE_URL,
                timeout=self.settings.REQUEST_TIMEOUT,
            ).fetch_advanced_search

        self.results = ResultSet()
        self.orchestrator = FetchOrchestrator(
            fetcher,
            build_request=self._build_request,
            results=self.results,
            on_success=self._on_response,
            debounce=self.settings.DEBOUNCE_SECONDS,
            on_failure=self._on_fetch_failed,
        )
        self.pagination = PaginationController(
            self.results,
            max_page=self.settings.MAX_PAGE,
            on_page_change=self.orchestrator.schedule,
            fetch_pending=lambda: self.orchestrator.busy,
        )

        self.mounted = False
        self._unsubscribers = []

    # --- Lifecycle ---

    def mount(self):
        """Attaches listeners and schedules the first fetch. Needs a running event loop."""
        if self.mounted:
            return
        self.url_sync.attach()
        self._unsubscribers.append(self.store.subscribe(self._on_filters_changed))

        subscribe = getattr(self.address_bar, "subscribe", None)
        if subscribe is not None:
            self._unsubscribers.append(subscribe(self.on_location_change))

        self.mounted = True
        logger.info(f"Search page mounted with {self.store.selection.model_dump(exclude_defaults=True)}")
        self.orchestrator.schedule()

    def unmount(self):
        if not self.mounted:
            return
        self.orchestrator.close()
        self.url_sync.detach()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.mounted = False

    async def settle(self):
        await self.orchestrator.wait_idle()

    # --- Surface for the rendering layer ---

    @property
    def page(self) -> int:
        return self.pagination.page

    @property
    def title(self) -> str:
        return self.title_for(self.store.query)

    def title_for(self, query: str) -> str:
        return f"{query} - {self.settings.SITE_NAME}" if query else self.settings.SITE_NAME

    def reset_filters(self) -> Set[str]:
        return self.store.reset()

    def request_more(self) -> bool:
        return self.pagination.request_more()

    def on_location_change(self, params: Optional[Mapping[str, str]] = None) -> bool:
        return self.url_sync.on_location_change(params)

    # --- Wiring ---

    def _on_filters_changed(self, changed: Set[str]):
        self.pagination.on_query_or_filter_change()
        self.orchestrator.schedule()

    def _build_request(self) -> SearchRequest:
        return SearchRequest.from_selection(
            self.store.selection,
            page=self.pagination.page,
            page_size=self.settings.PAGE_SIZE,
        )

    def _on_response(self, page: int, response: SearchResponse):
        self.pagination.merge_response(page, response)

    def _on_fetch_failed(self, page: int):
        self.pagination.on_fetch_failed(page)
