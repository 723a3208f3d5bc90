"""Assistant Engine - the entry point used by presentation surfaces.

The surface renders ``engine.session.messages`` and ``engine.session.busy``
and sends exactly two kinds of events: ``submit_text`` and ``select_action``.
Both may be started as overlapping tasks; the session's request ids keep
the log consistent.
"""
from typing import Optional

from newsdesk.core import config
from newsdesk.core.logging import logger
from newsdesk.services.chat.actions import ActionMenu, NewsDispatch, action_menu
from newsdesk.services.chat.messages import Message
from newsdesk.services.chat.router import SourceRouter
from newsdesk.services.chat.session import DialogSession
from newsdesk.services.intent.classifier import Intent, IntentClassifier, intent_classifier
from newsdesk.services.voice import CommandVoice, VoiceOutput


class AssistantEngine:
    """Owns the current dialog session and wires classifier, router and action menu."""

    def __init__(
        self,
        router: Optional[SourceRouter] = None,
        classifier: Optional[IntentClassifier] = None,
        actions: Optional[ActionMenu] = None,
        voice: Optional[VoiceOutput] = None,
        voice_enabled: Optional[bool] = None,
    ):
        self.router = router or SourceRouter()
        self.classifier = classifier or intent_classifier
        self.actions = actions or action_menu
        self.voice = voice or CommandVoice()
        self.voice_enabled = (
            voice_enabled if voice_enabled is not None else config.settings.assistant.voice_enabled
        )
        self.session: Optional[DialogSession] = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def is_open(self) -> bool:
        return self.session is not None and not self.session.closed

    def open(self) -> DialogSession:
        """Open the assistant surface with a fresh, seeded session."""
        if self.session is not None:
            self.session.close()
        self.session = DialogSession.open(self._speak)
        logger.info("[Engine] Session opened")
        return self.session

    def close(self) -> None:
        """Close the surface and discard the conversation."""
        if self.session is not None:
            self.session.close()
            logger.info(f"[Engine] Session closed after {len(self.session)} messages")
        self.session = None

    def _require_session(self) -> DialogSession:
        if not self.is_open:
            raise RuntimeError("Assistant session is not open")
        return self.session

    # =========================================================================
    # Inbound events
    # =========================================================================

    async def submit_text(self, text: str) -> Optional[int]:
        """
        Handle free text typed by the user.

        Returns:
            The request id of the round trip, or None for blank input
        """
        session = self._require_session()
        text = (text or "").strip()
        if not text:
            return None

        session.append_user(text)
        request_id = session.issue_request()

        if session.consume_open_question_override():
            intent = Intent.open_question()
            logger.info(f"[Engine] Request {request_id}: ask-anything override -> open question")
        else:
            intent = self.classifier.classify(text)

        await self.router.handle(session, intent, text, request_id)
        return request_id

    async def select_action(self, action_key: str) -> Optional[int]:
        """
        Handle a quick-action tap.

        Returns:
            The request id when the action re-entered the router, else None
        """
        session = self._require_session()
        resolution = self.actions.resolve(action_key)

        if isinstance(resolution, NewsDispatch):
            request_id = session.issue_request()
            await self.router.handle(
                session,
                resolution.intent,
                "",
                request_id,
                action_key=action_key,
                action_label=resolution.label,
            )
            return request_id

        session.append_reply(resolution.reply)
        if resolution.arms_open_question:
            session.arm_open_question_override()
        return None

    # =========================================================================
    # Voice output
    # =========================================================================

    def toggle_voice(self) -> bool:
        """Flip voice output; returns the new state."""
        self.voice_enabled = not self.voice_enabled
        logger.info(f"[Engine] Voice output {'enabled' if self.voice_enabled else 'disabled'}")
        return self.voice_enabled

    def _speak(self, message: Message) -> None:
        if not self.voice_enabled or message.is_user:
            return
        try:
            self.voice.speak(message.text)
        except Exception as e:
            logger.warning(f"[Engine] Voice output failed: {e}")
