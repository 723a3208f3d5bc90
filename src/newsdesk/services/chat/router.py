"""Source Router - dispatches a classified intent to its handler.

For every round trip it:
1. Turns the busy indicator on for the request
2. Waits a short, random "thinking" delay (external sources only)
3. Dispatches to the registered IntentHandler
4. Makes sure the indicator is released and no exception escapes

Results of superseded requests are dropped by the handlers' staleness
checks; the router only guarantees the boundary.
"""
import asyncio
import random
from typing import Awaitable, Callable, Dict, Optional, Tuple

from newsdesk.core import config
from newsdesk.core.logging import logger
from newsdesk.services.chat.handlers.base import IntentHandler, RouteContext
from newsdesk.services.chat.messages import Reply, quick_actions
from newsdesk.services.chat.session import DialogSession
from newsdesk.services.intent.classifier import Intent, IntentKind
from newsdesk.services.knowledge_source import KnowledgeSource
from newsdesk.services.news_source import NewsSource

FALLBACK_TEXT = "Something went wrong while I was working on that. Please try again."


class HandlerRegistry:
    """Registry for intent handlers.

    Handlers declare the intent kinds they handle; the router looks them up
    by kind.
    """

    def __init__(self):
        self._handlers: Dict[IntentKind, IntentHandler] = {}

    def register(self, handler: IntentHandler) -> None:
        """Register a handler instance for its declared kinds."""
        for kind in handler.kinds:
            if kind in self._handlers:
                logger.warning(
                    f"Intent '{kind.value}' already registered to {self._handlers[kind].__class__.__name__}, "
                    f"overwriting with {handler.__class__.__name__}"
                )
            self._handlers[kind] = handler
            logger.debug(f"Registered handler {handler.__class__.__name__} for intent '{kind.value}'")

    def get_handler(self, kind: IntentKind) -> Optional[IntentHandler]:
        """Get the handler for a given intent kind."""
        return self._handlers.get(kind)

    def list_handlers(self) -> Dict[str, str]:
        """List all registered handlers and their intent kinds."""
        return {kind.value: handler.__class__.__name__ for kind, handler in self._handlers.items()}

    def clear(self) -> None:
        """Clear all registered handlers."""
        self._handlers.clear()


class SourceRouter:
    """Routes intents to handlers and owns the processing delay."""

    def __init__(
        self,
        news_source: Optional[NewsSource] = None,
        knowledge_source: Optional[KnowledgeSource] = None,
        delay_range: Optional[Tuple[float, float]] = None,
        max_results: Optional[int] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.registry = HandlerRegistry()
        self.delay_range = delay_range if delay_range is not None else config.settings.delay_range
        self._sleep = sleep
        self._register_handlers(news_source, knowledge_source, max_results)

    def _register_handlers(
        self,
        news_source: Optional[NewsSource],
        knowledge_source: Optional[KnowledgeSource],
        max_results: Optional[int],
    ) -> None:
        """Register all available intent handlers."""
        # Imported here to avoid circular imports
        from newsdesk.services.chat.handlers.app_help import AppHelpHandler
        from newsdesk.services.chat.handlers.knowledge import KnowledgeHandler
        from newsdesk.services.chat.handlers.news import NewsHandler

        self.registry.register(NewsHandler(news_source, max_results=max_results))
        self.registry.register(KnowledgeHandler(knowledge_source))
        self.registry.register(AppHelpHandler())

        logger.debug(f"Registered {len(self.registry.list_handlers())} handlers")

    async def handle(
        self,
        session: DialogSession,
        intent: Intent,
        raw_text: str,
        request_id: int,
        action_key: Optional[str] = None,
        action_label: Optional[str] = None,
    ) -> None:
        """
        Answer one round trip by appending messages to ``session``.

        Args:
            session: The dialog session to append to
            intent: Classified (or synthesized) intent
            raw_text: The user's text ("" for quick actions)
            request_id: Id issued by ``session.issue_request()``
            action_key: Quick action that started the round trip, if any
            action_label: Display label for that action
        """
        context = RouteContext(
            session=session,
            intent=intent,
            raw_text=raw_text,
            request_id=request_id,
            action_key=action_key,
            action_label=action_label,
        )
        handler = self.registry.get_handler(intent.kind)
        if handler is None:
            logger.error(f"[Router] No handler for intent '{intent.kind.value}'")
            return

        logger.info(f"[Router] Request {request_id}: {intent.kind.value} -> {handler.__class__.__name__}")
        session.presence.acquire(request_id)

        try:
            if intent.is_async:
                await self._processing_delay()
                if context.is_stale:
                    logger.debug(f"[Router] Request {request_id} superseded during delay")
                    return
            await handler.handle(context)
        except Exception as e:
            logger.error(f"[Router] Handler error for request {request_id}: {e}", exc_info=True)
            if not context.is_stale:
                session.append_reply(Reply(
                    text=FALLBACK_TEXT,
                    intent_tag="error",
                    quick_actions=quick_actions(("App Features", "features")),
                ))
        finally:
            if not context.is_stale:
                session.presence.release(request_id)

    async def _processing_delay(self) -> None:
        low, high = self.delay_range
        if high <= 0:
            return
        await self._sleep(random.uniform(low, high))
