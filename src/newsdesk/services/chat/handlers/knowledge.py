"""Open-question handler backed by the knowledge source."""
from enum import Enum
from typing import Optional

import httpx

from newsdesk.core.exceptions import KnowledgeConfigurationError, SourceUnavailableError
from newsdesk.core.logging import logger
from newsdesk.services.chat.handlers.base import IntentHandler, RouteContext
from newsdesk.services.chat.messages import (
    KNOWLEDGE_ANSWER_ACTIONS,
    KNOWLEDGE_ATTRIBUTION,
    KNOWLEDGE_ERROR_ACTIONS,
    KNOWLEDGE_UNAVAILABLE_ACTIONS,
    Reply,
    attached,
)
from newsdesk.services.intent.classifier import IntentKind
from newsdesk.services.knowledge_source import KnowledgeSource


class FailureKind(Enum):
    """How a knowledge-source failure is reported to the user."""
    NETWORK = "network"
    MISCONFIGURATION = "misconfiguration"
    OTHER = "other"


UNAVAILABLE_TEXT = "I can't answer general questions right now."

FAILURE_TEXT = {
    FailureKind.NETWORK: (
        "I'm having trouble connecting to my knowledge base. "
        "Please check your internet connection and try again."
    ),
    FailureKind.MISCONFIGURATION: (
        "I can't connect to my knowledge source right now. "
        "The API key needs to be set up correctly."
    ),
    FailureKind.OTHER: (
        "I'm having trouble processing your question right now. "
        "Please try again later or ask about app features instead."
    ),
}


def classify_failure(error: BaseException) -> FailureKind:
    """Map an exception from the knowledge source to a failure kind."""
    if isinstance(error, KnowledgeConfigurationError):
        return FailureKind.MISCONFIGURATION
    if isinstance(error, (SourceUnavailableError, httpx.TransportError)):
        return FailureKind.NETWORK
    return FailureKind.OTHER


class KnowledgeHandler(IntentHandler):
    """Handle OPEN_QUESTION - ask the knowledge source and show its answer."""

    kinds = [IntentKind.OPEN_QUESTION]

    def __init__(self, knowledge_source: Optional[KnowledgeSource] = None):
        self.knowledge_source = knowledge_source or KnowledgeSource()

    async def handle(self, context: RouteContext) -> None:
        # Checked before anything is sent so a missing key costs no round trip
        if not self.knowledge_source.is_configured:
            logger.warning("[KnowledgeHandler] Knowledge source not configured")
            self._finish(context, Reply(
                text=UNAVAILABLE_TEXT,
                intent_tag="error",
                quick_actions=KNOWLEDGE_UNAVAILABLE_ACTIONS,
            ))
            return

        interim = Reply(text="Let me find an answer to that question...", intent_tag="knowledge_query")
        if self._post(context, interim) is None:
            return

        try:
            answer = await self.knowledge_source.ask(context.raw_text)
        except Exception as e:
            failure = classify_failure(e)
            logger.error(f"[KnowledgeHandler] Knowledge request failed ({failure.value}): {e}", exc_info=True)
            self._finish(context, Reply(
                text=FAILURE_TEXT[failure],
                intent_tag="error",
                quick_actions=KNOWLEDGE_ERROR_ACTIONS,
            ))
            return

        if context.is_stale:
            self._log_stale(context)
            return

        self._finish(context, Reply(
            text=answer.answer_text,
            intent_tag="knowledge_answer",
            quick_actions=KNOWLEDGE_ANSWER_ACTIONS,
            attached_results=attached(answer.citations),
            attribution=KNOWLEDGE_ATTRIBUTION,
        ))
