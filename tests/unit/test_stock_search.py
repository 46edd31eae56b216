"""Tests for the Pexels stock photo client."""

import httpx
import pytest

from collageworks.core.errors import SourceResolutionError, StockSearchError
from collageworks.core.stock_search import FETCH_FAILED, KEY_MISSING, QUERY_REQUIRED, PexelsClient

API_URL = "https://pexels.example.com/v1"

SEARCH_PAYLOAD = {
    "photos": [
        {
            "id": 101,
            "alt": "Snowy mountains",
            "photographer": "Ana",
            "photographer_url": "https://pexels.example.com/@ana",
            "src": {"medium": "https://images.example.com/101-medium.jpg", "large": "https://images.example.com/101.jpg"},
        },
        {
            "id": 102,
            "alt": None,
            "photographer": "Ben",
            "src": {"medium": "https://images.example.com/102-medium.jpg"},
        },
    ]
}


def _client(handler, api_key="pexels-key", limit=12):
    return PexelsClient(
        api_key=api_key,
        api_url=API_URL,
        limit=limit,
        transport=httpx.MockTransport(handler),
    )


class TestSearch:
    """Tests for PexelsClient.search."""

    @pytest.mark.asyncio
    async def test_request_shape_and_mapping(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=SEARCH_PAYLOAD)

        client = _client(handler)
        photos = await client.search("  mountains ")
        await client.aclose()

        assert seen["path"] == "/v1/search"
        assert seen["params"] == {"query": "mountains", "per_page": "12", "orientation": "landscape"}
        assert seen["auth"] == "pexels-key"

        assert [photo.id for photo in photos] == [101, 102]
        assert photos[0].url == "https://images.example.com/101-medium.jpg"
        assert photos[0].alt == "Snowy mountains"
        assert photos[0].photographer == "Ana"
        assert photos[1].alt == ""
        assert photos[1].photographer_url == ""

    @pytest.mark.asyncio
    async def test_results_are_capped_at_limit(self):
        client = _client(lambda request: httpx.Response(200, json=SEARCH_PAYLOAD), limit=1)
        photos = await client.search("mountains")
        await client.aclose()
        assert len(photos) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   ", None])
    async def test_blank_query_is_400(self, query):
        client = _client(lambda request: httpx.Response(200, json=SEARCH_PAYLOAD))
        with pytest.raises(StockSearchError) as exc_info:
            await client.search(query)
        await client.aclose()
        assert exc_info.value.status_code == 400
        assert str(exc_info.value) == QUERY_REQUIRED

    @pytest.mark.asyncio
    async def test_missing_key_is_500(self):
        client = _client(lambda request: httpx.Response(200, json=SEARCH_PAYLOAD), api_key=None)
        with pytest.raises(StockSearchError) as exc_info:
            await client.search("mountains")
        await client.aclose()
        assert exc_info.value.status_code == 500
        assert str(exc_info.value) == KEY_MISSING

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(401, json={"error": "bad key"}),
            httpx.Response(200, content=b"not json"),
            httpx.Response(200, json={"results": []}),
            httpx.Response(200, json={"photos": [{"id": 1}]}),
        ],
    )
    async def test_upstream_failures_are_500(self, response):
        client = _client(lambda request: response)
        with pytest.raises(StockSearchError) as exc_info:
            await client.search("mountains")
        await client.aclose()
        assert exc_info.value.status_code == 500
        assert str(exc_info.value) == FETCH_FAILED


class TestFetchImage:
    """Tests for PexelsClient.fetch_image."""

    @pytest.mark.asyncio
    async def test_downloads_bytes(self, png_bytes):
        client = _client(lambda request: httpx.Response(200, content=png_bytes))
        data = await client.fetch_image("https://images.example.com/101-medium.jpg")
        await client.aclose()
        assert data == png_bytes

    @pytest.mark.asyncio
    async def test_download_failure(self):
        client = _client(lambda request: httpx.Response(404))
        with pytest.raises(SourceResolutionError):
            await client.fetch_image("https://images.example.com/gone.jpg")
        await client.aclose()


class TestFromConfig:
    """Tests for building the client from configuration."""

    def test_uses_config_values(self, test_config):
        client = PexelsClient.from_config(test_config)
        assert client.api_key == "pexels-key"
        assert client.limit == test_config.stock_results_limit
        assert client.api_url == test_config.pexels_api_url.rstrip("/")
