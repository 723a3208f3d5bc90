"""Newsdesk - conversational assistant for a news-reading app."""

__version__ = "1.0.0"
