"""App help handler - canned answers about the reading app, no external calls."""
from typing import Dict

from newsdesk.services.chat.handlers.base import IntentHandler, RouteContext
from newsdesk.services.chat.messages import Reply, quick_actions
from newsdesk.services.intent.classifier import AppHelpTopic, IntentKind

HELP_REPLIES: Dict[AppHelpTopic, Reply] = {
    AppHelpTopic.GREETING: Reply(
        text="Hello there! How can I assist you with the app today?",
        intent_tag="greeting",
    ),
    AppHelpTopic.RECOMMENDATION: Reply(
        text=(
            'Based on your reading history, I recommend checking out "The Future of Mobile UX" and '
            '"Design Trends 2025". Would you like me to find more articles on specific topics?'
        ),
        intent_tag="recommendation",
        quick_actions=quick_actions(
            ("Tech Articles", "tech_articles"),
            ("Design Trends", "design_trends"),
            ("Latest News", "latest_news"),
            ("Ask Anything", "ask_anything"),
        ),
    ),
    AppHelpTopic.FEATURES: Reply(
        text=(
            "This app offers personalized article recommendations, offline reading, customizable "
            "text size, and dark mode. You can save articles for later and track your reading stats. "
            "What feature would you like to learn more about?"
        ),
        intent_tag="features",
        quick_actions=quick_actions(
            ("Offline Reading", "offline_reading"),
            ("Saving Articles", "saving"),
            ("Customization", "customization"),
        ),
    ),
    AppHelpTopic.SETTINGS: Reply(
        text=(
            "You can adjust your text size, toggle dark mode, manage notifications, select preferred "
            "news categories, and change language settings. Would you like me to guide you to a "
            "specific settings section?"
        ),
        intent_tag="settings",
        quick_actions=quick_actions(
            ("Text Size", "text_size"),
            ("Dark Mode", "dark_mode"),
            ("News Categories", "categories"),
        ),
    ),
    AppHelpTopic.THEME: Reply(
        text=(
            "You can toggle dark mode in the App Settings section of your profile. "
            "Would you like me to guide you there?"
        ),
        intent_tag="settings",
        quick_actions=quick_actions(
            ("Go to Settings", "goto_settings"),
            ("Stay in Chat", "stay"),
        ),
    ),
    AppHelpTopic.ACCOUNT: Reply(
        text=(
            "Your profile shows your reading stats and allows you to customize your experience. "
            "You can edit your details, change your password, and adjust notification preferences. "
            "Would you like to know more about any specific profile feature?"
        ),
        intent_tag="account",
    ),
    AppHelpTopic.OFFLINE: Reply(
        text=(
            "Offline reading allows you to access articles without an internet connection. To enable "
            'it, go to App Settings in your profile and toggle "Offline Reading". Articles will be '
            "automatically downloaded when you save them."
        ),
        intent_tag="feature_explanation",
    ),
    AppHelpTopic.GRATITUDE: Reply(
        text=(
            "You're welcome! I'm here anytime you need assistance with the app. "
            "Is there anything else I can help you with?"
        ),
        intent_tag="gratitude",
    ),
    AppHelpTopic.FAREWELL: Reply(
        text="Goodbye! Feel free to chat with me anytime you need assistance. Have a great day!",
        intent_tag="farewell",
    ),
    AppHelpTopic.GENERAL: Reply(
        text=(
            "I understand you're looking for assistance. Would you like to know about article "
            "recommendations, app features, customizing your settings, or check the latest news?"
        ),
        intent_tag="general",
        quick_actions=quick_actions(
            ("Recommendations", "recommendations"),
            ("App Features", "features"),
            ("Settings", "settings"),
            ("Latest News", "latest_news"),
        ),
    ),
}


class AppHelpHandler(IntentHandler):
    """Handle APP_HELP from the static topic table.

    Never awaits, so the whole round trip completes without yielding to
    the event loop.
    """

    kinds = [IntentKind.APP_HELP]

    async def handle(self, context: RouteContext) -> None:
        topic = context.intent.topic or AppHelpTopic.GENERAL
        self._finish(context, HELP_REPLIES.get(topic, HELP_REPLIES[AppHelpTopic.GENERAL]))
