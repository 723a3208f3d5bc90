"""Dialog Session - the single owner of the conversation state.

A session lives only while the assistant surface is open. It holds the
append-only message log, the busy indicator, the id of the latest round
trip and the one-shot "ask anything" override. Other components never
touch the log directly; they go through ``append_user`` / ``append_reply``.
"""
import itertools
from typing import Callable, List, Optional, Tuple

from newsdesk.core.logging import logger
from newsdesk.services.chat.messages import Message, Origin, Reply, greeting_reply
from newsdesk.services.chat.presence import PresenceSignal

MessageListener = Callable[[Message], None]


class DialogSession:
    """Ephemeral conversation state for one open assistant surface."""

    def __init__(self):
        self._messages: List[Message] = []
        self._message_ids = itertools.count(1)
        self._request_ids = itertools.count(1)
        self._listeners: List[MessageListener] = []
        self.presence = PresenceSignal()
        self.pending_request_id: Optional[int] = None
        self.open_question_override = False
        self.closed = False

    @classmethod
    def open(cls, *listeners: MessageListener) -> "DialogSession":
        """Create a session seeded with the greeting message.

        Listeners are subscribed before seeding so they see the greeting too.
        """
        session = cls()
        for listener in listeners:
            session.subscribe(listener)
        session.append_reply(greeting_reply())
        return session

    # =========================================================================
    # Message log
    # =========================================================================

    @property
    def messages(self) -> Tuple[Message, ...]:
        """Snapshot of the log in conversation order."""
        return tuple(self._messages)

    @property
    def last_message(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def subscribe(self, listener: MessageListener) -> None:
        """Register a callback invoked with every appended message."""
        self._listeners.append(listener)

    def append_user(self, text: str) -> Message:
        """Append a user-origin message."""
        return self._append(Message(id=next(self._message_ids), text=text, origin=Origin.USER))

    def append_reply(self, reply: Reply) -> Message:
        """Append an assistant-origin message built from ``reply``."""
        return self._append(Message(
            id=next(self._message_ids),
            text=reply.text,
            origin=Origin.ASSISTANT,
            intent_tag=reply.intent_tag,
            quick_actions=tuple(reply.quick_actions),
            attached_results=tuple(reply.attached_results),
            attribution=reply.attribution,
        ))

    def _append(self, message: Message) -> Message:
        if self.closed:
            logger.debug(f"[Session] Dropping message {message.id}: session closed")
            return message
        self._messages.append(message)
        for listener in self._listeners:
            try:
                listener(message)
            except Exception as e:
                logger.error(f"[Session] Message listener failed: {e}")
        return message

    # =========================================================================
    # Round trips
    # =========================================================================

    @property
    def busy(self) -> bool:
        return self.presence.busy

    def issue_request(self) -> int:
        """Start a new round trip; it supersedes any outstanding one."""
        request_id = next(self._request_ids)
        if self.pending_request_id is not None and self.presence.owner == self.pending_request_id:
            logger.debug(f"[Session] Request {request_id} supersedes {self.pending_request_id}")
        self.pending_request_id = request_id
        return request_id

    def is_current(self, request_id: int) -> bool:
        """False once a newer round trip has been issued or the session closed."""
        return not self.closed and request_id == self.pending_request_id

    # =========================================================================
    # Ask-anything override
    # =========================================================================

    def arm_open_question_override(self) -> None:
        """Treat the next text submission as an open question."""
        self.open_question_override = True

    def consume_open_question_override(self) -> bool:
        """Return the override flag and clear it (it applies to one submission)."""
        armed = self.open_question_override
        self.open_question_override = False
        return armed

    def close(self) -> None:
        """Discard the session; late results are dropped."""
        self.closed = True
        self.pending_request_id = None
        self.presence.reset()
