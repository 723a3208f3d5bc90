"""Intent Classifier - deterministic keyword rules that decide how a message is answered.

Rules are evaluated in a fixed order and the first match wins:

1. news keywords        -> NEWS_QUERY (with a category hint or a search term)
2. app keywords / small talk -> APP_HELP (with a help topic)
3. anything else        -> OPEN_QUESTION

News is checked before app help because phrasings such as "latest articles"
contain app keywords too.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from newsdesk.core.logging import logger


class IntentKind(Enum):
    """Top-level intents."""
    NEWS_QUERY = "news_query"
    APP_HELP = "app_help"
    OPEN_QUESTION = "open_question"


class NewsCategory(Enum):
    """News categories, valued by their news API name."""
    GENERAL = "general"
    TECHNOLOGY = "technology"
    BUSINESS = "business"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    SCIENCE = "science"
    SPORTS = "sports"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class AppHelpTopic(Enum):
    """Sub-intents of APP_HELP."""
    GREETING = "greeting"
    RECOMMENDATION = "recommendation"
    FEATURES = "features"
    SETTINGS = "settings"
    THEME = "theme"
    ACCOUNT = "account"
    OFFLINE = "offline"
    GRATITUDE = "gratitude"
    FAREWELL = "farewell"
    GENERAL = "general"


@dataclass(frozen=True)
class Intent:
    """Result of classifying one user message."""
    kind: IntentKind
    category: Optional[NewsCategory] = None
    search_term: Optional[str] = None
    topic: Optional[AppHelpTopic] = None

    @classmethod
    def news(cls, category: NewsCategory = NewsCategory.GENERAL, search_term: Optional[str] = None) -> "Intent":
        return cls(IntentKind.NEWS_QUERY, category=category, search_term=search_term)

    @classmethod
    def app_help(cls, topic: AppHelpTopic = AppHelpTopic.GENERAL) -> "Intent":
        return cls(IntentKind.APP_HELP, topic=topic)

    @classmethod
    def open_question(cls) -> "Intent":
        return cls(IntentKind.OPEN_QUESTION)

    @property
    def is_async(self) -> bool:
        """Whether answering this intent involves an external source."""
        return self.kind is not IntentKind.APP_HELP


def _matches(pattern: str) -> Callable[[str], bool]:
    compiled = re.compile(pattern, re.IGNORECASE)
    return lambda text: compiled.search(text) is not None


class IntentClassifier:
    """
    Deterministic intent classifier.

    No LLM, no scoring - just ordered keyword and pattern rules, so the
    same text always lands on the same intent.
    """

    NEWS_KEYWORDS = ("news", "headlines", "latest", "articles", "stories")
    APP_KEYWORDS = ("app", "feature", "setting", "read", "article", "dark mode", "profile")

    # (keyword fragment, category); first match wins
    CATEGORY_RULES: List[Tuple[str, NewsCategory]] = [
        ("tech", NewsCategory.TECHNOLOGY),
        ("business", NewsCategory.BUSINESS),
        ("entertain", NewsCategory.ENTERTAINMENT),
        ("health", NewsCategory.HEALTH),
        ("science", NewsCategory.SCIENCE),
        ("sports", NewsCategory.SPORTS),
    ]

    # (predicate, topic); first match wins, GENERAL when none match
    TOPIC_RULES: List[Tuple[Callable[[str], bool], AppHelpTopic]] = [
        (_matches(r"\b(hello|hi|hey|greetings)\b"), AppHelpTopic.GREETING),
        (_matches(r"recommend|suggestion|what.*(read|article)"), AppHelpTopic.RECOMMENDATION),
        (_matches(r"feature|can.*do|how.*use"), AppHelpTopic.FEATURES),
        (_matches(r"setting|preference|customize|personalize"), AppHelpTopic.SETTINGS),
        (_matches(r"dark mode|light mode|theme"), AppHelpTopic.THEME),
        (_matches(r"profile|account|user"), AppHelpTopic.ACCOUNT),
        (_matches(r"offline|download"), AppHelpTopic.OFFLINE),
        (_matches(r"thank|thanks"), AppHelpTopic.GRATITUDE),
        (_matches(r"bye|goodbye|exit|close"), AppHelpTopic.FAREWELL),
    ]

    # A bare greeting, thanks or goodbye is app help even without an app keyword
    SMALL_TALK = re.compile(
        r"^\W*(hello|hi|hey|greetings|thanks|thank you|thank|bye|goodbye)\W*$",
        re.IGNORECASE,
    )

    # The preposition must directly follow a news keyword: "news about X", "stories on X"
    SEARCH_TERM = re.compile(
        r"\b(?:news|headlines|articles|stories)\s+(?:about|on|regarding|for)\s+(.+)$",
        re.IGNORECASE,
    )
    IGNORED_SEARCH_TERMS = {"today", "now", "me", "this week", "the day", "tonight", "you"}

    def classify(self, text: str) -> Intent:
        """
        Classify a user message.

        :param text: Raw user text
        :return: Intent (never raises)
        """
        q = (text or "").lower().strip()

        if any(keyword in q for keyword in self.NEWS_KEYWORDS):
            category = self._category_hint(q)
            search_term = None
            if category is NewsCategory.GENERAL:
                search_term = self._search_term(q)
            intent = Intent.news(category, search_term)
        elif any(keyword in q for keyword in self.APP_KEYWORDS) or self.SMALL_TALK.search(q):
            intent = Intent.app_help(self._help_topic(q))
        else:
            intent = Intent.open_question()

        logger.debug(f"[Classifier] {q[:50]!r} -> {intent}")
        return intent

    def _category_hint(self, q: str) -> NewsCategory:
        for fragment, category in self.CATEGORY_RULES:
            if fragment in q:
                return category
        return NewsCategory.GENERAL

    def _help_topic(self, q: str) -> AppHelpTopic:
        for predicate, topic in self.TOPIC_RULES:
            if predicate(q):
                return topic
        return AppHelpTopic.GENERAL

    def _search_term(self, q: str) -> Optional[str]:
        match = self.SEARCH_TERM.search(q)
        if not match:
            return None
        term = match.group(1).strip(" ?!.,'\"")
        if term.startswith("the "):
            term = term[4:]
        if not term or term in self.IGNORED_SEARCH_TERMS:
            return None
        return term


# Singleton instance
intent_classifier = IntentClassifier()
