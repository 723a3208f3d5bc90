"""
Knowledge source backed by the Gemini generateContent API.

Used for open-domain questions that are neither news requests nor app help.
"""
from typing import Any, Dict, List, Optional

import httpx

from newsdesk.core import config
from newsdesk.core.config import KnowledgeConfig
from newsdesk.core.exceptions import (
    KnowledgeConfigurationError,
    SourceResponseError,
    SourceUnavailableError,
)
from newsdesk.core.logging import logger
from newsdesk.models.schemas import Citation, KnowledgeAnswer

DEFAULT_ANSWER = (
    "I couldn't find specific information about that. "
    "Would you like to try a different question?"
)

# Status codes the API uses when the key is missing, malformed or revoked
_CREDENTIAL_STATUSES = (400, 401, 403)


class KnowledgeSource:
    """Async client for the Gemini text model."""

    def __init__(self, knowledge_config: Optional[KnowledgeConfig] = None):
        self.config = knowledge_config or config.settings.knowledge
        self.base_url = self.config.base_url.rstrip('/')

    @property
    def is_configured(self) -> bool:
        """False when the API key is unset or still a placeholder."""
        key = (self.config.api_key or "").strip()
        if not key:
            return False
        return key.lower() not in {p.lower() for p in self.config.placeholder_keys}

    async def ask(self, text: str) -> KnowledgeAnswer:
        """
        Ask an open-domain question.

        Raises:
            KnowledgeConfigurationError: the credential is missing or rejected
            SourceUnavailableError: the API could not be reached
            SourceResponseError: any other non-success response
        """
        if not self.is_configured:
            raise KnowledgeConfigurationError("Invalid or missing API key")

        url = f"{self.base_url}/models/{self.config.model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "topK": self.config.top_k,
                "topP": self.config.top_p,
                "maxOutputTokens": self.config.max_output_tokens,
            },
        }

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await client.post(
                    url,
                    params={"key": self.config.api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            body = e.response.text
            logger.error(f"[Knowledge] HTTP error: {status}")
            logger.debug(f"[Knowledge] Response: {body}")
            if status in _CREDENTIAL_STATUSES and "api key" in body.lower():
                raise KnowledgeConfigurationError(
                    f"API key rejected with status {status}", status_code=status
                ) from e
            raise SourceResponseError(f"API error with status {status}", status_code=status) from e
        except httpx.TransportError as e:
            logger.error(f"[Knowledge] Transport error: {e}")
            raise SourceUnavailableError(f"Knowledge API unreachable: {e}") from e
        except ValueError as e:
            logger.error(f"[Knowledge] Invalid JSON payload: {e}")
            raise SourceResponseError("Knowledge API returned an invalid payload") from e

        return self._parse_answer(data)

    @staticmethod
    def _parse_answer(data: Dict[str, Any]) -> KnowledgeAnswer:
        """Extract answer text and citations from a generateContent response."""
        candidates = (data or {}).get("candidates") or []
        if not candidates:
            return KnowledgeAnswer(answer_text=DEFAULT_ANSWER)

        candidate = candidates[0] or {}
        parts = (candidate.get("content") or {}).get("parts") or []
        answer_text = DEFAULT_ANSWER
        if parts and parts[0].get("text"):
            answer_text = parts[0]["text"]

        citations: List[Citation] = []
        for raw in (candidate.get("citationMetadata") or {}).get("citations") or []:
            fields = {}
            if raw.get("title"):
                fields["title"] = raw["title"]
            if raw.get("uri"):
                fields["url"] = raw["uri"]
            if raw.get("snippet"):
                fields["snippet"] = raw["snippet"]
            citations.append(Citation(**fields))

        return KnowledgeAnswer(answer_text=answer_text, citations=citations)
