"""Chat intent handlers."""
from newsdesk.services.chat.handlers.base import IntentHandler, RouteContext
from newsdesk.services.chat.handlers.app_help import AppHelpHandler
from newsdesk.services.chat.handlers.knowledge import KnowledgeHandler
from newsdesk.services.chat.handlers.news import NewsHandler

__all__ = [
    'IntentHandler',
    'RouteContext',
    'AppHelpHandler',
    'KnowledgeHandler',
    'NewsHandler',
]
