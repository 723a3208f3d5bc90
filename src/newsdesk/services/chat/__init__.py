"""Chat service package.

The AssistantEngine coordinates:
1. Intent classification (via IntentClassifier)
2. Quick-action resolution (via ActionMenu)
3. Handler dispatch (via SourceRouter and its HandlerRegistry)
4. The dialog session and its busy indicator
"""
from newsdesk.services.chat.engine import AssistantEngine
from newsdesk.services.chat.router import SourceRouter, HandlerRegistry
from newsdesk.services.chat.session import DialogSession
from newsdesk.services.chat.messages import Message, Origin, QuickAction, AttachedResult, Reply
from newsdesk.services.chat.handlers.base import IntentHandler, RouteContext

__all__ = [
    'AssistantEngine',
    'SourceRouter',
    'HandlerRegistry',
    'DialogSession',
    'Message',
    'Origin',
    'QuickAction',
    'AttachedResult',
    'Reply',
    'IntentHandler',
    'RouteContext',
]
