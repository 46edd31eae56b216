"""Stock photo search against the Pexels API."""

import logging

import httpx

from .config import CollageworksConfig
from .errors import StockSearchError
from .models import StockPhoto
from .sources import fetch_image_bytes

logger = logging.getLogger(__name__)

QUERY_REQUIRED = "Query parameter is required"
KEY_MISSING = "Pexels API key not configured"
FETCH_FAILED = "Failed to fetch images from Pexels"


def _to_photo(photo: dict) -> StockPhoto:
    return StockPhoto(
        id=photo["id"],
        url=photo["src"]["medium"],
        alt=photo.get("alt") or "",
        photographer=photo.get("photographer") or "",
        photographer_url=photo.get("photographer_url") or "",
    )


class PexelsClient:
    """Search landscape stock photos and download them for the canvas.

    Args:
        api_key: Pexels API key, sent verbatim in the ``Authorization`` header.
        api_url: Base URL of the Pexels API.
        limit: Results per search (at most 12).
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport for tests.
    """

    def __init__(
        self,
        api_key: str | None,
        api_url: str = "https://api.pexels.com/v1",
        limit: int = 12,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.limit = limit
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_config(
        cls,
        cfg: CollageworksConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "PexelsClient":
        return cls(
            api_key=cfg.pexels_api_key,
            api_url=cfg.pexels_api_url,
            limit=cfg.stock_results_limit,
            timeout=cfg.request_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def search(self, query: str | None) -> list[StockPhoto]:
        """Search for photos matching *query*.

        Raises:
            StockSearchError: 400 for a blank query, 500 when the key is
                missing or the upstream call fails.
        """
        query = (query or "").strip()
        if not query:
            raise StockSearchError(QUERY_REQUIRED, status_code=400)
        if not self.api_key:
            raise StockSearchError(KEY_MISSING, status_code=500)

        try:
            response = await self._client.get(
                f"{self.api_url}/search",
                params={"query": query, "per_page": self.limit, "orientation": "landscape"},
                headers={"Authorization": self.api_key},
            )
            response.raise_for_status()
            photos = [_to_photo(photo) for photo in response.json()["photos"]]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Pexels API error for query {query!r}: {e}")
            raise StockSearchError(FETCH_FAILED, status_code=500) from e

        logger.info(f"Pexels search {query!r} returned {len(photos)} photos")
        return photos[: self.limit]

    async def fetch_image(self, url: str) -> bytes:
        """Download a photo so it can be placed on the canvas."""
        return await fetch_image_bytes(url, self._client)
