"""News source backed by the NewsAPI.org REST API."""
from typing import Any, Dict, List, Optional

import httpx

from newsdesk.core import config
from newsdesk.core.config import NewsConfig
from newsdesk.core.exceptions import NewsSourceError
from newsdesk.core.logging import logger
from newsdesk.models.schemas import Article

# Categories accepted by the top-headlines endpoint
CATEGORIES = ['business', 'entertainment', 'general', 'health', 'science', 'sports', 'technology']


class NewsSource:
    """Async client for NewsAPI.org.

    Every call opens its own ``httpx.AsyncClient`` so the source is stateless
    and several calls may be outstanding at once. Articles without an image
    are dropped before returning.
    """

    def __init__(self, news_config: Optional[NewsConfig] = None):
        self.config = news_config or config.settings.news
        self.base_url = self.config.base_url.rstrip('/')

    async def fetch_top_headlines(self) -> List[Article]:
        """Top headlines across all categories."""
        return await self._get_articles(
            "top-headlines",
            {"country": self.config.country, "pageSize": self.config.page_size},
        )

    async def fetch_by_category(self, category: str) -> List[Article]:
        """Top headlines for one category ("all"/"general" fall back to top headlines)."""
        category = category.lower()
        if category in ('all', 'general'):
            return await self.fetch_top_headlines()
        if category not in CATEGORIES:
            raise NewsSourceError(f"Unknown news category: {category}")

        logger.info(f"[News] Fetching news for category: {category}")
        articles = await self._get_articles(
            "top-headlines",
            {"country": self.config.country, "category": category, "pageSize": self.config.page_size},
        )
        return [article.model_copy(update={"category": category}) for article in articles]

    async def search(self, query: str) -> List[Article]:
        """Free-text search over all articles, most relevant first."""
        logger.info(f"[News] Searching news for: {query[:50]}")
        return await self._get_articles(
            "everything",
            {
                "q": query,
                "language": self.config.language,
                "pageSize": self.config.page_size,
                "sortBy": "relevancy",
            },
        )

    async def _get_articles(self, endpoint: str, params: Dict[str, Any]) -> List[Article]:
        url = f"{self.base_url}/{endpoint}"
        params = {**params, "apiKey": self.config.api_key}

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[News] HTTP error: {e.response.status_code}")
            raise NewsSourceError(
                f"News API returned status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"[News] Request failed: {e}")
            raise NewsSourceError(f"News API request failed: {e}") from e
        except ValueError as e:
            logger.error(f"[News] Invalid JSON payload: {e}")
            raise NewsSourceError("News API returned an invalid payload") from e

        if data.get('status') != 'ok':
            logger.error(f"[News] API error: {data.get('code')} {data.get('message')}")
            raise NewsSourceError(f"News API error: {data.get('message', 'unknown error')}")

        articles = [
            self._parse_article(raw)
            for raw in data.get('articles', [])
            if raw.get('urlToImage')
        ]
        logger.info(f"[News] Fetched {len(articles)} articles from {endpoint}")
        return articles

    @staticmethod
    def _parse_article(raw: Dict[str, Any]) -> Article:
        source = raw.get('source') or {}
        return Article(
            title=raw.get('title') or '',
            url=raw.get('url') or '',
            image_url=raw['urlToImage'],
            published_at=raw.get('publishedAt') or '',
            author=raw.get('author'),
            source_name=source.get('name') or '',
            description=raw.get('description'),
        )
