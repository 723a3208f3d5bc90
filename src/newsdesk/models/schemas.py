"""Pydantic schemas for data returned by the news and knowledge sources."""
from typing import List, Optional
from pydantic import BaseModel


class Article(BaseModel):
    """News article as returned by the news source."""
    title: str
    url: str
    image_url: str
    published_at: str = ""
    author: Optional[str] = None
    source_name: str = ""
    description: Optional[str] = None
    category: Optional[str] = None


class Citation(BaseModel):
    """Citation attached to a knowledge answer."""
    title: str = "Related content"
    url: str = "#"
    snippet: str = "Additional information related to your query."


class KnowledgeAnswer(BaseModel):
    """Answer from the knowledge source."""
    answer_text: str
    citations: List[Citation] = []
