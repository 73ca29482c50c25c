import json
from typing import Dict, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from .config import get_settings
from .schemas import SearchFilters, SearchResponse


class CatalogError(Exception):
    """Any failure to get a usable page of results from the catalog."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CatalogClient:
    def __init__(self, base_url: str = None, timeout: float = None, transport: httpx.AsyncBaseTransport = None):
        settings = get_settings()
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/") + "/"
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self._transport = transport

    @staticmethod
    def build_params(query: str, page: int, page_size: int, filters: SearchFilters) -> Dict[str, str]:
        """
        Query params for the advanced-search endpoint.
        List filters are JSON arrays, unconstrained filters are left out.
        """
        params = {}
        if query:
            params["query"] = query
        params["page"] = str(page)
        params["perPage"] = str(page_size)
        params["type"] = "ANIME"
        if filters.genres:
            params["genres"] = json.dumps(filters.genres)
        for name in ("year", "season", "format", "status"):
            value = getattr(filters, name)
            if value:
                params[name] = value
        if filters.sort:
            params["sort"] = json.dumps(filters.sort)
        return params

    async def fetch_advanced_search(
        self,
        query: str,
        page: int,
        page_size: int,
        filters: SearchFilters,
    ) -> SearchResponse:
        """
        Fetches one page of catalog results. Raises CatalogError on transport
        failures, non-200 responses and payloads that don't match SearchResponse.
        """
        url = f"{self.base_url}meta/anilist/advanced-search"
        params = self.build_params(query, page, page_size, filters)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise CatalogError("⏱️ Request timed out.") from e
        except httpx.HTTPError as e:
            raise CatalogError(f"❌ Could not connect to catalog: {e}") from e

        if response.status_code != 200:
            logger.warning(f"Catalog returned {response.status_code} for {params}")
            raise CatalogError(
                f"Server Error ({response.status_code}): {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return SearchResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise CatalogError(f"Malformed catalog response: {e}") from e
