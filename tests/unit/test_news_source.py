"""
Tests for the NewsAPI client.

httpx.AsyncClient is patched; responses are real httpx.Response objects.
"""

import pytest
import httpx
from unittest.mock import patch, AsyncMock

from newsdesk.core.config import NewsConfig
from newsdesk.core.exceptions import NewsSourceError
from newsdesk.services.news_source import NewsSource

BASE_URL = "https://news.test/v2"


def _response(status_code=200, payload=None, text=None):
    request = httpx.Request("GET", BASE_URL)
    if text is not None:
        return httpx.Response(status_code, text=text, request=request)
    return httpx.Response(status_code, json=payload, request=request)


def _client(response=None, side_effect=None):
    mock_client = AsyncMock()
    mock_client.get = AsyncMock(return_value=response, side_effect=side_effect)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


@pytest.fixture
def source():
    return NewsSource(NewsConfig(api_key="news-key", base_url=BASE_URL, country="us", page_size=20))


@pytest.mark.asyncio
class TestNewsSource:
    """Tests for NewsSource."""

    async def test_top_headlines(self, source, sample_raw_articles):
        response = _response(payload={"status": "ok", "articles": sample_raw_articles})

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = _client(response)
            mock_client_class.return_value = mock_client

            articles = await source.fetch_top_headlines()

        assert len(articles) == 7
        assert all(a.image_url for a in articles)
        assert articles[0].title == "Headline 1"
        assert articles[0].source_name == "Source 1"

        url = mock_client.get.call_args.args[0]
        params = mock_client.get.call_args.kwargs["params"]
        assert url == f"{BASE_URL}/top-headlines"
        assert params == {"country": "us", "pageSize": 20, "apiKey": "news-key"}

    async def test_by_category(self, source, sample_raw_articles):
        response = _response(payload={"status": "ok", "articles": sample_raw_articles[:2]})

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = _client(response)
            mock_client_class.return_value = mock_client

            articles = await source.fetch_by_category("Technology")

        params = mock_client.get.call_args.kwargs["params"]
        assert params["category"] == "technology"
        assert [a.category for a in articles] == ["technology", "technology"]

    async def test_general_category_is_top_headlines(self, source):
        response = _response(payload={"status": "ok", "articles": []})

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = _client(response)
            mock_client_class.return_value = mock_client

            articles = await source.fetch_by_category("general")

        assert articles == []
        assert "category" not in mock_client.get.call_args.kwargs["params"]

    async def test_unknown_category(self, source):
        with pytest.raises(NewsSourceError):
            await source.fetch_by_category("astrology")

    async def test_search(self, source, sample_raw_articles):
        response = _response(payload={"status": "ok", "articles": sample_raw_articles})

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = _client(response)
            mock_client_class.return_value = mock_client

            await source.search("climate change")

        url = mock_client.get.call_args.args[0]
        params = mock_client.get.call_args.kwargs["params"]
        assert url == f"{BASE_URL}/everything"
        assert params["q"] == "climate change"
        assert params["sortBy"] == "relevancy"
        assert params["language"] == "en"

    async def test_http_error(self, source):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = _client(_response(401, text="unauthorized"))

            with pytest.raises(NewsSourceError) as exc_info:
                await source.fetch_top_headlines()

        assert exc_info.value.status_code == 401

    async def test_transport_error(self, source):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = _client(side_effect=httpx.ConnectError("refused"))

            with pytest.raises(NewsSourceError):
                await source.fetch_top_headlines()

    async def test_error_status_in_payload(self, source):
        response = _response(payload={"status": "error", "code": "rateLimited", "message": "Too many"})

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = _client(response)

            with pytest.raises(NewsSourceError):
                await source.fetch_top_headlines()

    async def test_invalid_json(self, source):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = _client(_response(200, text="<html>"))

            with pytest.raises(NewsSourceError):
                await source.fetch_top_headlines()
