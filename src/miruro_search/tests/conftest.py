import asyncio
from typing import List

import pytest

from miruro_search.config import Settings
from miruro_search.schemas import AnimeSummary, SearchResponse


# --- 1. HELPERS ---

def run(coro):
    """Runs an async scenario to completion on a fresh event loop."""
    return asyncio.run(coro)


async def drain(ticks: int = 5):
    """Lets pending callbacks and task wake-ups run."""
    for _ in range(ticks):
        await asyncio.sleep(0)


def make_response(*ids: str, has_next: bool = False) -> SearchResponse:
    return SearchResponse(
        results=[AnimeSummary(id=i, title={"english": f"Anime {i}"}) for i in ids],
        hasNextPage=has_next,
    )


def item_ids(results) -> List[str]:
    return [item.id for item in results.items]


class FakeCatalog:
    """
    Stand-in for fetch_advanced_search.

    Without `auto`, every call parks on a future the test resolves by index,
    so responses can arrive in any order. With `auto`, calls return
    auto(query, page) immediately (raising it if it's an exception).
    """

    def __init__(self, auto=None):
        self.auto = auto
        self.calls = []
        self.pending: List[asyncio.Future] = []

    async def __call__(self, query, page, page_size, filters):
        self.calls.append({"query": query, "page": page, "page_size": page_size, "filters": filters})
        if self.auto is not None:
            result = self.auto(query, page)
            if isinstance(result, Exception):
                raise result
            return result
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future

    async def wait_for_calls(self, count: int):
        for _ in range(100):
            if len(self.calls) >= count:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"expected {count} catalog calls, got {len(self.calls)}")

    def resolve(self, index: int, response: SearchResponse):
        self.pending[index].set_result(response)

    def fail(self, index: int, error: Exception):
        self.pending[index].set_exception(error)


# --- 2. FIXTURES ---

@pytest.fixture
def settings():
    """Zero debounce: only same-tick changes are coalesced."""
    return Settings(DEBOUNCE_SECONDS=0.0, PAGE_SIZE=17, MAX_PAGE=10, SITE_NAME="Miruro")


@pytest.fixture
def catalog():
    return FakeCatalog()
