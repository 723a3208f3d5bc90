"""Conversation message model.

Messages are frozen: once appended to a session they never change, and
any update is a new message.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Tuple

from newsdesk.models.schemas import Article, Citation


class Origin(Enum):
    """Who produced a message."""
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class QuickAction:
    """A tappable shortcut rendered under an assistant message."""
    id: str
    label: str
    action_key: str


@dataclass(frozen=True)
class AttachedResult:
    """A retrieved item displayed under a message."""
    title: str
    url: str
    snippet: str = ""
    source_name: str = ""

    @classmethod
    def from_article(cls, article: Article) -> "AttachedResult":
        return cls(
            title=article.title,
            url=article.url,
            snippet=article.description or "",
            source_name=article.source_name,
        )

    @classmethod
    def from_citation(cls, citation: Citation) -> "AttachedResult":
        return cls(title=citation.title, url=citation.url, snippet=citation.snippet)


@dataclass(frozen=True)
class Message:
    """A single turn in the conversation."""
    id: int
    text: str
    origin: Origin
    created_at: datetime = field(default_factory=datetime.now)
    intent_tag: Optional[str] = None
    quick_actions: Tuple[QuickAction, ...] = ()
    attached_results: Tuple[AttachedResult, ...] = ()
    attribution: Optional[str] = None

    @property
    def is_user(self) -> bool:
        return self.origin is Origin.USER

    def format_time(self) -> str:
        """Display timestamp, e.g. ``14:05``."""
        return self.created_at.strftime("%H:%M")


@dataclass(frozen=True)
class Reply:
    """An assistant message before the session assigns it an id."""
    text: str
    intent_tag: Optional[str] = None
    quick_actions: Tuple[QuickAction, ...] = ()
    attached_results: Tuple[AttachedResult, ...] = ()
    attribution: Optional[str] = None


def quick_actions(*pairs: Tuple[str, str]) -> Tuple[QuickAction, ...]:
    """Build a numbered quick-action tuple from (label, action_key) pairs."""
    return tuple(
        QuickAction(id=str(index), label=label, action_key=action_key)
        for index, (label, action_key) in enumerate(pairs, start=1)
    )


def attached(items: Iterable, limit: Optional[int] = None) -> Tuple[AttachedResult, ...]:
    """Convert articles/citations to attached results, keeping order."""
    results = []
    for item in items:
        if isinstance(item, Article):
            results.append(AttachedResult.from_article(item))
        elif isinstance(item, Citation):
            results.append(AttachedResult.from_citation(item))
        else:
            results.append(item)
    if limit is not None:
        results = results[:limit]
    return tuple(results)


# =============================================================================
# Canned quick-action sets
# =============================================================================

GREETING_TEXT = "Hello! I'm your personal AI assistant. How can I help you with the app today?"

DEFAULT_ACTIONS = quick_actions(
    ("Read Recommendations", "recommendations"),
    ("App Features", "features"),
    ("Customize Settings", "settings"),
    ("Latest News", "latest_news"),
)

NEWS_RESULT_ACTIONS = quick_actions(
    ("More Headlines", "more_news"),
    ("Business News", "business_news"),
    ("Tech News", "tech_news"),
    ("Entertainment", "entertainment_news"),
)

NEWS_MENU_RESULT_ACTIONS = quick_actions(
    ("Business", "business_news"),
    ("Technology", "tech_news"),
    ("Entertainment", "entertainment_news"),
    ("Back to App", "features"),
)

NEWS_ERROR_ACTIONS = quick_actions(
    ("Try Again", "latest_news"),
    ("App Features", "features"),
)

KNOWLEDGE_ANSWER_ACTIONS = quick_actions(
    ("Ask Another Question", "ask_anything"),
    ("App Help Instead", "features"),
)

KNOWLEDGE_ERROR_ACTIONS = quick_actions(
    ("Try Again", "ask_anything"),
    ("App Features", "features"),
)

KNOWLEDGE_UNAVAILABLE_ACTIONS = quick_actions(
    ("Ask About App Instead", "features"),
)

NEWS_ATTRIBUTION = "NewsAPI"
KNOWLEDGE_ATTRIBUTION = "knowledge source"


def greeting_reply() -> Reply:
    """The assistant message every new session starts with."""
    return Reply(text=GREETING_TEXT, intent_tag="greeting", quick_actions=DEFAULT_ACTIONS)
