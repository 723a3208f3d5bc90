"""Exceptions raised by the external information sources."""


class SourceError(Exception):
    """Base exception for news/knowledge source failures."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class SourceUnavailableError(SourceError):
    """Raised when a source cannot be reached (DNS, connect, timeout)."""
    pass


class SourceResponseError(SourceError):
    """Raised when a source answers with an error status or an unusable payload."""
    pass


class NewsSourceError(SourceError):
    """Raised when the news API call fails for any reason."""
    pass


class KnowledgeConfigurationError(SourceError):
    """Raised when the knowledge source rejects the configured credential."""
    pass
