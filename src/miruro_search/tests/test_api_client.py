import json

import httpx
import pytest

from conftest import run
from miruro_search.api_client import CatalogClient, CatalogError
from miruro_search.schemas import SearchFilters

CATALOG_PAGE = {
    "currentPage": 1,
    "hasNextPage": True,
    "totalPages": 4,
    "totalResults": 60,
    "results": [
        {
            "id": 20,
            "malId": 20,
            "title": {"romaji": "NARUTO", "english": "Naruto", "native": "ナルト"},
            "image": "https://img.example/naruto.jpg",
            "status": "Completed",
            "rating": 79,
            "genres": ["Action", "Adventure"],
            "totalEpisodes": 220,
            "type": "TV",
            "releaseDate": 2002,
        }
    ],
}


def make_client(handler):
    """CatalogClient wired to an in-process transport; handler gets every request."""
    return CatalogClient(base_url="http://catalog.test/", timeout=1.0, transport=httpx.MockTransport(handler))


def fetch(client, query="naruto", page=1, filters=None):
    return run(client.fetch_advanced_search(query, page, 17, filters or SearchFilters(sort=["POPULARITY_DESC"])))


# --- HAPPY PATH TESTS ---

def test_fetch_parses_catalog_page():
    client = make_client(lambda request: httpx.Response(200, json=CATALOG_PAGE))

    response = fetch(client)

    assert response.hasNextPage is True
    assert response.totalResults == 60
    anime = response.results[0]
    assert anime.id == "20"
    assert anime.display_title == "Naruto"
    assert anime.genres == ["Action", "Adventure"]


def test_request_params():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"results": [], "hasNextPage": False})

    filters = SearchFilters(genres=["Action", "Sci-Fi"], year="2002", format="TV", sort=["SCORE_ASC"])
    fetch(make_client(handler), query="naruto", page=3, filters=filters)

    request = seen[0]
    assert request.url.path == "/meta/anilist/advanced-search"
    params = request.url.params
    assert params["query"] == "naruto"
    assert params["page"] == "3"
    assert params["perPage"] == "17"
    assert params["type"] == "ANIME"
    assert json.loads(params["genres"]) == ["Action", "Sci-Fi"]
    assert json.loads(params["sort"]) == ["SCORE_ASC"]
    assert params["year"] == "2002"
    assert params["format"] == "TV"
    assert "season" not in params
    assert "status" not in params


def test_empty_query_and_filters_are_omitted():
    params = CatalogClient.build_params("", 1, 17, SearchFilters())

    assert params == {"page": "1", "perPage": "17", "type": "ANIME"}


# --- ERROR HANDLING TESTS ---

def test_server_error_raises_catalog_error():
    client = make_client(lambda request: httpx.Response(500, text="upstream exploded"))

    with pytest.raises(CatalogError) as exc_info:
        fetch(client)

    assert exc_info.value.status_code == 500
    assert "upstream exploded" in str(exc_info.value)


def test_malformed_payload_raises_catalog_error():
    client = make_client(lambda request: httpx.Response(200, text="<html>not json</html>"))

    with pytest.raises(CatalogError, match="Malformed"):
        fetch(client)


def test_unexpected_shape_raises_catalog_error():
    client = make_client(lambda request: httpx.Response(200, json={"results": [{"title": "no id"}]}))

    with pytest.raises(CatalogError, match="Malformed"):
        fetch(client)


def test_connection_failure_raises_catalog_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CatalogError, match="Could not connect"):
        fetch(make_client(handler))


def test_timeout_raises_catalog_error():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(CatalogError, match="timed out"):
        fetch(make_client(handler))


def test_null_id_raises_catalog_error():
    payload = {"results": [{"id": None, "title": {"romaji": "Ghost"}}], "hasNextPage": False}
    client = make_client(lambda request: httpx.Response(200, json=payload))

    with pytest.raises(CatalogError, match="Malformed"):
        fetch(client)
