"""Action-Menu Engine - resolves quick-action taps.

A quick action either answers locally with a canned reply or re-enters the
router as a news query for a fixed category. Unknown keys get a
clarification reply; resolution never raises.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Union

from newsdesk.core.logging import logger
from newsdesk.services.chat.messages import Reply, quick_actions
from newsdesk.services.intent.classifier import Intent, NewsCategory


@dataclass(frozen=True)
class CannedAction:
    """Answer locally with ``reply``."""
    reply: Reply
    # Next text submission is answered as an open question
    arms_open_question: bool = False


@dataclass(frozen=True)
class NewsDispatch:
    """Re-enter the router with a synthesized news intent."""
    category: NewsCategory
    label: str = ""

    @property
    def intent(self) -> Intent:
        return Intent.news(self.category)


ActionResolution = Union[CannedAction, NewsDispatch]


NEWS_ACTIONS: Dict[str, NewsDispatch] = {
    "latest_news": NewsDispatch(NewsCategory.GENERAL),
    "more_news": NewsDispatch(NewsCategory.GENERAL, "more"),
    "news_articles": NewsDispatch(NewsCategory.GENERAL),
    "tech_news": NewsDispatch(NewsCategory.TECHNOLOGY, "tech"),
    "business_news": NewsDispatch(NewsCategory.BUSINESS, "business"),
    "entertainment_news": NewsDispatch(NewsCategory.ENTERTAINMENT, "entertainment"),
    "sports_news": NewsDispatch(NewsCategory.SPORTS, "sports"),
    "science_news": NewsDispatch(NewsCategory.SCIENCE, "science"),
    "health_news": NewsDispatch(NewsCategory.HEALTH, "health"),
}

ASK_ANYTHING = CannedAction(
    reply=Reply(
        text="I can answer questions about a wide range of topics. What would you like to know?",
        intent_tag="ask_prompt",
    ),
    arms_open_question=True,
)

_DESIGN_ARTICLES = CannedAction(Reply(
    text=(
        'For design content, check out: "UI Trends to Watch in 2025", "Accessible Design Principles", '
        'and "The Psychology of Color in Mobile Apps".'
    ),
    intent_tag="article_recommendation",
))

CANNED_ACTIONS: Dict[str, CannedAction] = {
    "ask_anything": ASK_ANYTHING,
    "recommendations": CannedAction(Reply(
        text=(
            "I can recommend articles based on your reading history and preferences. "
            "What type of content are you interested in?"
        ),
        intent_tag="recommendation",
        quick_actions=quick_actions(
            ("Technology", "tech_articles"),
            ("Design", "design_articles"),
            ("News", "latest_news"),
            ("Ask Anything", "ask_anything"),
        ),
    )),
    "features": CannedAction(Reply(
        text=(
            "This app has several features including personalized recommendations, offline reading, "
            "customizable text size, and more. Which feature would you like to explore?"
        ),
        intent_tag="features",
        quick_actions=quick_actions(
            ("Reading Stats", "stats"),
            ("Offline Mode", "offline_reading"),
            ("Dark Mode", "dark_mode"),
        ),
    )),
    "settings": CannedAction(Reply(
        text=(
            "You can customize your experience by adjusting text size, enabling dark mode, setting "
            "notification preferences, and more. What would you like to customize?"
        ),
        intent_tag="settings",
        quick_actions=quick_actions(
            ("Reading Preferences", "reading_prefs"),
            ("Notifications", "notifications"),
            ("Theme Settings", "theme"),
        ),
    )),
    "tech_articles": CannedAction(Reply(
        text=(
            'Based on your interests, I recommend these technology articles: "AI in 2025: Breakthrough '
            'Applications", "The Evolution of Mobile Development", and "Quantum Computing Explained".'
        ),
        intent_tag="article_recommendation",
    )),
    "design_articles": _DESIGN_ARTICLES,
    "design_trends": _DESIGN_ARTICLES,
    "offline_reading": CannedAction(Reply(
        text=(
            "Offline reading lets you access articles without an internet connection. To use it: "
            "1) Enable the feature in App Settings, 2) Save articles you want to read offline, "
            "3) Access them anytime from your Saved list."
        ),
        intent_tag="feature_explanation",
    )),
    "saving": CannedAction(Reply(
        text=(
            "Tap the bookmark icon on any article to save it. Saved articles appear in your Saved "
            "list and are downloaded for offline reading when that setting is on."
        ),
        intent_tag="feature_explanation",
    )),
    "customization": CannedAction(Reply(
        text=(
            "You can customize text size, theme, language, and which news categories appear in your "
            "feed from the Content Preferences section of your profile."
        ),
        intent_tag="feature_explanation",
    )),
    "stats": CannedAction(Reply(
        text=(
            "Your profile header shows how many articles you've read, saved, and how many sources "
            "you follow. The numbers update as you read."
        ),
        intent_tag="feature_explanation",
    )),
    "goto_settings": CannedAction(Reply(
        text=(
            "To access settings, close this chat and go to the App Settings section in your profile. "
            "There you can toggle dark mode, adjust text size, and manage other preferences."
        ),
        intent_tag="navigation",
    )),
    "stay": CannedAction(Reply(
        text="Sure, I'm right here. What else would you like to know?",
        intent_tag="navigation",
    )),
    "text_size": CannedAction(Reply(
        text=(
            "You can change text size in Content Preferences. Options include Small, Medium, and "
            "Large. This affects readability throughout the app."
        ),
        intent_tag="settings_help",
    )),
    "dark_mode": CannedAction(Reply(
        text=(
            "Dark mode reduces eye strain in low-light environments and can save battery life on OLED "
            "screens. Toggle it in App Settings or use the sun/moon icon in the profile header."
        ),
        intent_tag="settings_help",
    )),
    "theme": CannedAction(Reply(
        text=(
            "The app supports light and dark themes. Switch between them with the Dark Mode toggle "
            "in App Settings."
        ),
        intent_tag="settings_help",
    )),
    "categories": CannedAction(Reply(
        text=(
            "In Content Preferences, you can select which news categories appear in your feed. "
            "Options include Technology, Design, Business, Science, Health, and more."
        ),
        intent_tag="settings_help",
    )),
    "reading_prefs": CannedAction(Reply(
        text=(
            "Reading preferences live in Content Preferences: text size, language, and whether "
            "reading time is shown in minutes or as time to read."
        ),
        intent_tag="settings_help",
    )),
    "notifications": CannedAction(Reply(
        text="Turn push notifications on or off in the App Settings section of your profile.",
        intent_tag="settings_help",
    )),
}

CLARIFICATION = CannedAction(Reply(
    text="I understand you want to know more. Could you provide additional details about what you're looking for?",
    intent_tag="clarification",
))


class ActionMenu:
    """Looks up quick-action keys."""

    def __init__(
        self,
        canned: Optional[Dict[str, CannedAction]] = None,
        news: Optional[Dict[str, NewsDispatch]] = None,
    ):
        self.canned = canned if canned is not None else CANNED_ACTIONS
        self.news = news if news is not None else NEWS_ACTIONS

    def resolve(self, action_key: str) -> ActionResolution:
        """
        Resolve a quick-action key.

        :param action_key: Key from a QuickAction
        :return: CannedAction or NewsDispatch (never raises)
        """
        key = (action_key or "").strip().lower()
        if key in self.news:
            return self.news[key]
        if key in self.canned:
            return self.canned[key]
        logger.info(f"[ActionMenu] Unknown action '{action_key}', asking for clarification")
        return CLARIFICATION

    def known_keys(self):
        return sorted(set(self.news) | set(self.canned))


# Singleton instance
action_menu = ActionMenu()
