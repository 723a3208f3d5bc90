"""Unit tests for SourceRouter, the handler registry and the intent handlers."""
import pytest
from unittest.mock import AsyncMock, MagicMock

import httpx

from newsdesk.core.exceptions import (
    KnowledgeConfigurationError,
    NewsSourceError,
    SourceResponseError,
    SourceUnavailableError,
)
from newsdesk.services.chat.handlers.app_help import AppHelpHandler, HELP_REPLIES
from newsdesk.services.chat.handlers.base import IntentHandler, RouteContext
from newsdesk.services.chat.handlers.knowledge import (
    FAILURE_TEXT,
    UNAVAILABLE_TEXT,
    FailureKind,
    classify_failure,
)
from newsdesk.services.chat.handlers.news import EMPTY_RESULT_TEXT, ERROR_TEXT
from newsdesk.services.chat.messages import (
    KNOWLEDGE_ANSWER_ACTIONS,
    KNOWLEDGE_ERROR_ACTIONS,
    KNOWLEDGE_UNAVAILABLE_ACTIONS,
    NEWS_ERROR_ACTIONS,
    NEWS_MENU_RESULT_ACTIONS,
    NEWS_RESULT_ACTIONS,
)
from newsdesk.services.chat.router import FALLBACK_TEXT, HandlerRegistry, SourceRouter
from newsdesk.services.chat.session import DialogSession
from newsdesk.services.intent.classifier import AppHelpTopic, Intent, IntentKind, NewsCategory


@pytest.fixture
def session():
    return DialogSession.open()


def _texts(session):
    return [m.text for m in session.messages[1:]]


class TestHandlerRegistry:
    """Tests for the HandlerRegistry class."""

    def test_default_handlers_registered(self, router):
        handlers = router.registry.list_handlers()

        assert handlers == {
            "news_query": "NewsHandler",
            "open_question": "KnowledgeHandler",
            "app_help": "AppHelpHandler",
        }

    def test_register_and_get(self):
        registry = HandlerRegistry()
        handler = AppHelpHandler()

        registry.register(handler)

        assert registry.get_handler(IntentKind.APP_HELP) is handler
        assert registry.get_handler(IntentKind.NEWS_QUERY) is None
        assert handler.can_handle(IntentKind.APP_HELP)

    def test_clear_handlers(self):
        registry = HandlerRegistry()
        registry.register(AppHelpHandler())
        assert len(registry.list_handlers()) > 0

        registry.clear()
        assert len(registry.list_handlers()) == 0


class TestRouteContext:
    """Tests for RouteContext properties."""

    def test_staleness_follows_session(self, session):
        rid = session.issue_request()
        context = RouteContext(session=session, intent=Intent.news(), raw_text="news", request_id=rid)

        assert context.kind == IntentKind.NEWS_QUERY
        assert context.from_action is False
        assert context.is_stale is False

        session.issue_request()
        assert context.is_stale is True


@pytest.mark.asyncio
class TestNewsRouting:
    """News queries go through the news source."""

    async def test_text_news_query(self, router, session, mock_news_source):
        rid = session.issue_request()

        await router.handle(session, Intent.news(NewsCategory.TECHNOLOGY), "latest tech news", rid)

        interim, results = session.messages[1:]
        assert interim.text == "Let me fetch the latest news for you..."
        assert results.text == "Here are the latest technology news headlines I found:"
        assert results.intent_tag == "news_results"
        assert results.attribution == "NewsAPI"
        assert len(results.attached_results) == 5
        assert results.quick_actions == NEWS_RESULT_ACTIONS
        mock_news_source.fetch_by_category.assert_awaited_once_with("technology")
        assert session.busy is False

    async def test_general_uses_top_headlines(self, router, session, mock_news_source):
        rid = session.issue_request()

        await router.handle(session, Intent.news(), "news", rid)

        mock_news_source.fetch_top_headlines.assert_awaited_once()
        mock_news_source.fetch_by_category.assert_not_awaited()
        assert _texts(session)[-1] == "Here are the latest news headlines I found:"

    async def test_search_term_uses_search(self, router, session, mock_news_source):
        rid = session.issue_request()

        await router.handle(session, Intent.news(search_term="climate"), "news about climate", rid)

        mock_news_source.search.assert_awaited_once_with("climate")
        assert _texts(session)[-1] == 'Here are the news stories I found about "climate":'

    async def test_action_dispatch_texts(self, router, session):
        rid = session.issue_request()

        await router.handle(
            session, Intent.news(NewsCategory.BUSINESS), "", rid,
            action_key="business_news", action_label="business",
        )

        interim, results = session.messages[1:]
        assert interim.text == "Fetching the latest business news..."
        assert results.text == "Here are the latest business headlines:"
        assert results.quick_actions == NEWS_MENU_RESULT_ACTIONS

    async def test_empty_result(self, router, session, mock_news_source):
        mock_news_source.fetch_top_headlines.return_value = []
        rid = session.issue_request()

        await router.handle(session, Intent.news(), "news", rid)

        final = session.last_message
        assert final.text == EMPTY_RESULT_TEXT
        assert final.attached_results == ()
        assert session.busy is False

    async def test_source_error(self, router, session, mock_news_source):
        mock_news_source.fetch_top_headlines.side_effect = NewsSourceError("status 500", status_code=500)
        rid = session.issue_request()

        await router.handle(session, Intent.news(), "news", rid)

        final = session.last_message
        assert final.text == ERROR_TEXT
        assert final.intent_tag == "error"
        assert final.quick_actions == NEWS_ERROR_ACTIONS
        assert "500" not in final.text
        assert mock_news_source.fetch_top_headlines.await_count == 1
        assert session.busy is False

    async def test_stale_result_dropped(self, router, session, mock_news_source, sample_articles):
        async def superseded_fetch():
            session.issue_request()
            return sample_articles

        mock_news_source.fetch_top_headlines.side_effect = superseded_fetch
        rid = session.issue_request()

        await router.handle(session, Intent.news(), "news", rid)

        assert _texts(session) == ["Let me fetch the latest news for you..."]


@pytest.mark.asyncio
class TestKnowledgeRouting:
    """Open questions go through the knowledge source."""

    async def test_answer_with_citations(self, router, session, mock_knowledge_source):
        rid = session.issue_request()

        await router.handle(session, Intent.open_question(), "what is quantum computing", rid)

        interim, answer = session.messages[1:]
        assert interim.text == "Let me find an answer to that question..."
        assert answer.text == "Quantum computers use qubits."
        assert answer.attribution == "knowledge source"
        assert answer.attached_results[0].url == "https://example.com/qubits"
        assert answer.quick_actions == KNOWLEDGE_ANSWER_ACTIONS
        mock_knowledge_source.ask.assert_awaited_once_with("what is quantum computing")
        assert session.busy is False

    async def test_unconfigured_skips_call(self, router, session, mock_knowledge_source):
        mock_knowledge_source.is_configured = False
        rid = session.issue_request()

        await router.handle(session, Intent.open_question(), "what is quantum computing", rid)

        assert _texts(session) == [UNAVAILABLE_TEXT]
        assert session.last_message.quick_actions == KNOWLEDGE_UNAVAILABLE_ACTIONS
        mock_knowledge_source.ask.assert_not_awaited()
        assert session.busy is False

    @pytest.mark.parametrize("error,kind", [
        (SourceUnavailableError("dns"), FailureKind.NETWORK),
        (KnowledgeConfigurationError("bad key", status_code=400), FailureKind.MISCONFIGURATION),
        (SourceResponseError("status 500", status_code=500), FailureKind.OTHER),
        (ValueError("weird"), FailureKind.OTHER),
    ])
    async def test_failures_classified(self, router, session, mock_knowledge_source, error, kind):
        mock_knowledge_source.ask.side_effect = error
        rid = session.issue_request()

        await router.handle(session, Intent.open_question(), "question", rid)

        final = session.last_message
        assert final.text == FAILURE_TEXT[kind]
        assert final.quick_actions == KNOWLEDGE_ERROR_ACTIONS
        assert session.busy is False


class TestClassifyFailure:
    """Tests for classify_failure."""

    def test_transport_error_is_network(self):
        assert classify_failure(httpx.ConnectError("refused")) == FailureKind.NETWORK

    def test_unknown_is_other(self):
        assert classify_failure(RuntimeError("x")) == FailureKind.OTHER


@pytest.mark.asyncio
class TestAppHelpRouting:
    """App help answers locally."""

    async def test_gratitude(self, router, session, mock_news_source, mock_knowledge_source):
        presence_changes = []
        session.presence.subscribe(presence_changes.append)
        rid = session.issue_request()

        await router.handle(session, Intent.app_help(AppHelpTopic.GRATITUDE), "thanks", rid)

        assert _texts(session) == [HELP_REPLIES[AppHelpTopic.GRATITUDE].text]
        assert presence_changes == [True, False]
        mock_news_source.fetch_top_headlines.assert_not_awaited()
        mock_knowledge_source.ask.assert_not_awaited()

    async def test_no_delay_for_app_help(self, mock_news_source, mock_knowledge_source, session):
        sleep = AsyncMock()
        router = SourceRouter(
            news_source=mock_news_source,
            knowledge_source=mock_knowledge_source,
            delay_range=(1.0, 2.5),
            sleep=sleep,
        )
        rid = session.issue_request()

        await router.handle(session, Intent.app_help(), "app", rid)

        sleep.assert_not_awaited()


@pytest.mark.asyncio
class TestProcessingDelay:
    """External intents wait a bounded random delay first."""

    async def test_delay_within_bounds(self, mock_news_source, mock_knowledge_source, session):
        sleep = AsyncMock()
        router = SourceRouter(
            news_source=mock_news_source,
            knowledge_source=mock_knowledge_source,
            delay_range=(1.0, 2.5),
            sleep=sleep,
        )
        rid = session.issue_request()

        await router.handle(session, Intent.news(), "news", rid)

        sleep.assert_awaited_once()
        delay = sleep.await_args.args[0]
        assert 1.0 <= delay <= 2.5

    async def test_superseded_during_delay_makes_no_call(self, mock_news_source, mock_knowledge_source, session):
        async def superseding_sleep(_delay):
            session.issue_request()

        router = SourceRouter(
            news_source=mock_news_source,
            knowledge_source=mock_knowledge_source,
            delay_range=(1.0, 2.5),
            sleep=superseding_sleep,
        )
        rid = session.issue_request()

        await router.handle(session, Intent.news(), "news", rid)

        mock_news_source.fetch_top_headlines.assert_not_awaited()
        assert len(session) == 1


@pytest.mark.asyncio
class TestRouterBoundary:
    """No exception escapes the router."""

    async def test_handler_crash_becomes_message(self, router, session):
        class BrokenHandler(IntentHandler):
            kinds = [IntentKind.APP_HELP]

            async def handle(self, context):
                raise RuntimeError("secret internal detail")

        router.registry.register(BrokenHandler())
        rid = session.issue_request()

        await router.handle(session, Intent.app_help(), "app", rid)

        assert session.last_message.text == FALLBACK_TEXT
        assert "secret" not in session.last_message.text
        assert session.busy is False
