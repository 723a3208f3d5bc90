"""News intent handler."""
from typing import List, Optional

from newsdesk.core import config
from newsdesk.core.logging import logger
from newsdesk.models.schemas import Article
from newsdesk.services.chat.handlers.base import IntentHandler, RouteContext
from newsdesk.services.chat.messages import (
    NEWS_ATTRIBUTION,
    NEWS_ERROR_ACTIONS,
    NEWS_MENU_RESULT_ACTIONS,
    NEWS_RESULT_ACTIONS,
    Reply,
    attached,
)
from newsdesk.services.intent.classifier import IntentKind, NewsCategory
from newsdesk.services.news_source import NewsSource

EMPTY_RESULT_TEXT = "I couldn't find any news articles at the moment. Please try again later."
ERROR_TEXT = "I'm having trouble retrieving news right now. Please try again later."


class NewsHandler(IntentHandler):
    """Handle NEWS_QUERY - fetch headlines or search results from the news source."""

    kinds = [IntentKind.NEWS_QUERY]

    def __init__(self, news_source: Optional[NewsSource] = None, max_results: Optional[int] = None):
        self.news_source = news_source or NewsSource()
        self.max_results = max_results if max_results is not None else config.settings.max_results

    async def handle(self, context: RouteContext) -> None:
        category = context.intent.category or NewsCategory.GENERAL
        search_term = context.intent.search_term

        if self._post(context, Reply(text=self._interim_text(context), intent_tag="news_query")) is None:
            return

        try:
            articles = await self._fetch(category, search_term)
        except Exception as e:
            logger.error(f"[NewsHandler] News fetch failed: {e}", exc_info=True)
            self._finish(context, Reply(
                text=ERROR_TEXT,
                intent_tag="error",
                quick_actions=NEWS_ERROR_ACTIONS,
            ))
            return

        if context.is_stale:
            self._log_stale(context)
            return

        if not articles:
            logger.info(f"[NewsHandler] No articles for {search_term or category.value}")
            self._finish(context, Reply(
                text=EMPTY_RESULT_TEXT,
                intent_tag="news_empty",
                quick_actions=self._result_actions(context),
            ))
            return

        self._finish(context, Reply(
            text=self._results_text(context, category, search_term),
            intent_tag="news_results",
            quick_actions=self._result_actions(context),
            attached_results=attached(articles, limit=self.max_results),
            attribution=NEWS_ATTRIBUTION,
        ))

    async def _fetch(self, category: NewsCategory, search_term: Optional[str]) -> List[Article]:
        if search_term:
            return await self.news_source.search(search_term)
        if category is NewsCategory.GENERAL:
            return await self.news_source.fetch_top_headlines()
        return await self.news_source.fetch_by_category(category.value)

    @staticmethod
    def _interim_text(context: RouteContext) -> str:
        if context.from_action:
            label = f"{context.action_label} " if context.action_label else ""
            return f"Fetching the latest {label}news..."
        return "Let me fetch the latest news for you..."

    @staticmethod
    def _results_text(context: RouteContext, category: NewsCategory, search_term: Optional[str]) -> str:
        if search_term:
            return f'Here are the news stories I found about "{search_term}":'
        label = "" if category is NewsCategory.GENERAL else f"{category.value} "
        if context.from_action:
            return f"Here are the latest {label}headlines:"
        return f"Here are the latest {label}news headlines I found:"

    @staticmethod
    def _result_actions(context: RouteContext):
        return NEWS_MENU_RESULT_ACTIONS if context.from_action else NEWS_RESULT_ACTIONS
