"""
Newsdesk Test Configuration

Shared fixtures and configuration for pytest.
"""

import sys
import pytest
from pathlib import Path
from typing import List
from unittest.mock import MagicMock, AsyncMock

# Add src to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up common environment variables for testing."""
    monkeypatch.setenv("NEWS_API_KEY", "test-news-key")
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    monkeypatch.setenv("NEWSDESK_MIN_DELAY", "0")
    monkeypatch.setenv("NEWSDESK_MAX_DELAY", "0")


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def sample_raw_articles() -> List[dict]:
    """NewsAPI-shaped article payloads; the last one has no image."""
    return [
        {
            "source": {"id": None, "name": f"Source {i}"},
            "author": f"Author {i}",
            "title": f"Headline {i}",
            "description": f"Description {i}",
            "url": f"https://example.com/story-{i}",
            "urlToImage": f"https://example.com/story-{i}.jpg",
            "publishedAt": "2025-03-01T12:00:00Z",
        }
        for i in range(1, 8)
    ] + [
        {
            "source": {"id": None, "name": "Imageless"},
            "author": None,
            "title": "No picture",
            "description": None,
            "url": "https://example.com/no-picture",
            "urlToImage": None,
            "publishedAt": "2025-03-01T12:00:00Z",
        }
    ]


@pytest.fixture
def sample_articles():
    """Parsed articles, more than the per-message cap."""
    from newsdesk.models.schemas import Article

    return [
        Article(
            title=f"Headline {i}",
            url=f"https://example.com/story-{i}",
            image_url=f"https://example.com/story-{i}.jpg",
            source_name=f"Source {i}",
            description=f"Description {i}",
        )
        for i in range(1, 8)
    ]


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_news_source(sample_articles):
    """Create a mock news source returning the sample articles."""
    mock = MagicMock()
    mock.fetch_top_headlines = AsyncMock(return_value=sample_articles)
    mock.fetch_by_category = AsyncMock(return_value=sample_articles)
    mock.search = AsyncMock(return_value=sample_articles)
    return mock


@pytest.fixture
def mock_knowledge_source():
    """Create a configured mock knowledge source."""
    from newsdesk.models.schemas import Citation, KnowledgeAnswer

    mock = MagicMock()
    mock.is_configured = True
    mock.ask = AsyncMock(return_value=KnowledgeAnswer(
        answer_text="Quantum computers use qubits.",
        citations=[Citation(title="Qubits", url="https://example.com/qubits")],
    ))
    return mock


@pytest.fixture
def router(mock_news_source, mock_knowledge_source):
    """Source router wired to the mock sources with no processing delay."""
    from newsdesk.services.chat.router import SourceRouter

    return SourceRouter(
        news_source=mock_news_source,
        knowledge_source=mock_knowledge_source,
        delay_range=(0.0, 0.0),
        max_results=5,
    )


@pytest.fixture
def mock_voice():
    mock = MagicMock()
    mock.speak = MagicMock()
    return mock


@pytest.fixture
def engine(router, mock_voice):
    """An opened assistant engine using the mock router and voice."""
    from newsdesk.services.chat.engine import AssistantEngine

    engine = AssistantEngine(router=router, voice=mock_voice, voice_enabled=False)
    engine.open()
    yield engine
    engine.close()
