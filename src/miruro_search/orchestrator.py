import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional

from loguru import logger

from .pagination import ResultSet
from .schemas import SearchFilters, SearchRequest, SearchResponse

Fetcher = Callable[[str, int, int, SearchFilters], Awaitable[SearchResponse]]


class FetchState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FetchOrchestrator:
    """
    Debounced, single-flight request pipeline for one page instance.

    Every schedule() re-arms the timer and bumps the request token, so only the
    most recently issued request can commit. close() invalidates whatever is in
    flight; its response is dropped, not awaited or aborted.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        build_request: Callable[[], SearchRequest],
        results: ResultSet,
        on_success: Callable[[int, SearchResponse], None],
        debounce: float = 0.0,
        on_failure: Callable[[int], None] = None,
    ):
        self._fetcher = fetcher
        self._build_request = build_request
        self.results = results
        self._on_success = on_success
        self._on_failure = on_failure or (lambda page: None)
        self.debounce = debounce

        self.state = FetchState.IDLE
        self.issued = 0
        self._token = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._deadline = 0.0
        self._task: Optional[asyncio.Task] = None
        self._in_flight: Optional[SearchRequest] = None
        self._closed = False

    @property
    def busy(self) -> bool:
        return self._timer is not None or self._in_flight is not None

    @property
    def in_flight(self) -> Optional[SearchRequest]:
        return self._in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    def schedule(self):
        """Cancels any pending timer and arms a new one. Must run inside an event loop."""
        if self._closed:
            logger.warning("Ignoring fetch schedule on a closed orchestrator")
            return

        loop = asyncio.get_running_loop()
        self._cancel_timer()
        # Anything still in flight belongs to an older state
        self._token += 1
        self._in_flight = None
        self._task = None

        self._deadline = loop.time() + self.debounce
        self._timer = loop.call_later(self.debounce, self._fire)
        self.state = FetchState.SCHEDULED

    def close(self):
        self._cancel_timer()
        self._token += 1
        self._in_flight = None
        self._task = None
        self._closed = True
        self.state = FetchState.IDLE

    async def wait_idle(self):
        """Waits until nothing is scheduled or in flight for the current token."""
        loop = asyncio.get_running_loop()
        while not self._closed:
            if self._timer is not None:
                await asyncio.sleep(max(0.0, self._deadline - loop.time()))
            elif self._task is not None:
                await asyncio.wait({self._task})
            else:
                return

    # --- Internals ---

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self):
        self._timer = None
        self._token += 1
        token = self._token

        request = self._build_request()
        self._in_flight = request
        self.issued += 1
        self.results.loading = True
        self.results.error = None
        self.state = FetchState.IN_FLIGHT

        logger.info(f"🔎 Request #{token}: query={request.query!r} page={request.page}")
        self._task = asyncio.get_running_loop().create_task(self._run(token, request))

    def _is_current(self, token: int) -> bool:
        return token == self._token and not self._closed

    async def _run(self, token: int, request: SearchRequest):
        try:
            response = await self._fetcher(request.query, request.page, request.page_size, request.filters)
        except Exception as e:
            if not self._is_current(token):
                logger.debug(f"Dropping failure of stale request #{token}: {e}")
                return
            logger.error(f"❌ Search request #{token} failed: {e}")
            self._settle(FetchState.FAILED)
            self.results.error = str(e) or type(e).__name__
            self._on_failure(request.page)
            return

        if not self._is_current(token):
            logger.debug(f"Dropping stale response for request #{token}")
            return

        self._settle(FetchState.SUCCEEDED)
        self._on_success(request.page, response)

    def _settle(self, outcome: FetchState):
        self._in_flight = None
        self._task = None
        self.results.loading = False
        self.state = outcome
