"""
Health News Tool - Fetches medical and health headlines from GNews.
"""

import logging
from typing import Any, Dict, List

import httpx

from ..core.errors import UpstreamError, UpstreamTimeoutError
from ..models.news import NewsArticle

logger = logging.getLogger(__name__)

HEALTH_NEWS_QUERY = (
    "(medical OR healthcare OR medicine OR health) AND "
    "(research OR study OR treatment OR diagnosis OR prevention)"
)


class HealthNewsClient:
    """
    Thin GNews search client.
    Only health-related queries are issued; no caching, no retries.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://gnews.io/api/v4",
        timeout: float = 10.0,
    ):
        """
        Initialize the news client.

        Args:
            api_key: GNews API key
            base_url: GNews API root
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def search(
        self,
        query: str = HEALTH_NEWS_QUERY,
        max_results: int = 10,
        lang: str = "en",
        country: str = "us",
    ) -> List[NewsArticle]:
        """
        Search GNews.

        Returns:
            List of articles with title, description, url, image, publishedAt, source

        Raises:
            UpstreamTimeoutError: The request timed out
            UpstreamError: Network failure, non-2xx status or unexpected body
        """
        params = {
            "q": query,
            "lang": lang,
            "country": country,
            "max": max_results,
            "apikey": self.api_key,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(f"{self.base_url}/search", params=params)
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"GNews request timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise UpstreamError(f"GNews returned HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(f"GNews request failed: {e}") from e

        articles = data.get("articles") if isinstance(data, dict) else None
        if not isinstance(articles, list):
            raise UpstreamError("GNews response has no article list")

        logger.debug(f"Fetched {len(articles)} news article(s)")
        return [self._to_article(item) for item in articles if isinstance(item, dict)]

    @staticmethod
    def _to_article(item: Dict[str, Any]) -> NewsArticle:
        source = item.get("source")
        return NewsArticle(
            title=item.get("title") or "",
            description=item.get("description"),
            url=item.get("url") or "",
            image=item.get("image"),
            published_at=item.get("publishedAt"),
            source=source.get("name") if isinstance(source, dict) else source,
        )
