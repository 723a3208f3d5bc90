"""Base classes for intent handlers."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from newsdesk.core.logging import logger
from newsdesk.services.chat.messages import Message, Reply
from newsdesk.services.chat.session import DialogSession
from newsdesk.services.intent.classifier import Intent, IntentKind


@dataclass
class RouteContext:
    """Context passed to intent handlers for one round trip."""
    session: DialogSession
    intent: Intent
    raw_text: str
    request_id: int

    # Set when the round trip was started from a quick action
    action_key: Optional[str] = None
    action_label: Optional[str] = None

    @property
    def kind(self) -> IntentKind:
        return self.intent.kind

    @property
    def from_action(self) -> bool:
        return self.action_key is not None

    @property
    def is_stale(self) -> bool:
        """True once a newer round trip has superseded this one."""
        return not self.session.is_current(self.request_id)


class IntentHandler(ABC):
    """Abstract base class for intent handlers.

    A handler appends the interim and final messages for one intent kind.
    It must check ``context.is_stale`` after every await and append nothing
    once superseded.
    """

    # Intent kinds this handler can process
    kinds: List[IntentKind] = []

    @abstractmethod
    async def handle(self, context: RouteContext) -> None:
        """
        Answer the intent by appending messages to ``context.session``.

        Args:
            context: RouteContext with session, intent and request id
        """
        pass

    def can_handle(self, kind: IntentKind) -> bool:
        """Check if this handler can process the given intent kind."""
        return kind in self.kinds

    def _post(self, context: RouteContext, reply: Reply) -> Optional[Message]:
        """Append an interim message unless the round trip is stale."""
        if context.is_stale:
            self._log_stale(context)
            return None
        return context.session.append_reply(reply)

    def _finish(self, context: RouteContext, reply: Reply) -> Optional[Message]:
        """Append the final message and release the busy indicator."""
        message = self._post(context, reply)
        if message is not None:
            context.session.presence.release(context.request_id)
        return message

    def _log_stale(self, context: RouteContext) -> None:
        logger.debug(
            f"[{self.__class__.__name__}] Dropping result of request {context.request_id} "
            f"(current {context.session.pending_request_id})"
        )
