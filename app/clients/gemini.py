"""
Gemini client for the generative ranking service.

Wraps the generateContent REST endpoint. Infrastructure failures (timeouts,
transport errors, non-2xx statuses) raise RankingUnavailableError; the
returned text itself is untrusted and validated by the caller.
"""
import logging
from typing import Any, Optional

import httpx

from app.core.exceptions import RankingUnavailableError

GEMINI_BASE = "https://generativelanguage.googleapis.com/v1beta"

logger = logging.getLogger(__name__)


class GeminiRankingClient:
    """Async client for Gemini's generateContent API."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        base_url: str = GEMINI_BASE,
        timeout: float = 30.0,
        temperature: float = 0.2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def close(self) -> None:
        await self._client.aclose()

    async def generate(self, prompt: str) -> str:
        """Call generateContent and return the concatenated candidate text.

        Args:
            prompt: Complete prompt text

        Returns:
            Response text; empty when the model produced no candidate
        """
        if not self._api_key:
            raise RankingUnavailableError("ranking service API key not configured")

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._temperature,
                "responseMimeType": "application/json",
            },
        }

        try:
            response = await self._client.post(
                f"/models/{self._model}:generateContent",
                params={"key": self._api_key},
                json=payload,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Ranking request timeout for model {self._model}: {e}")
            raise RankingUnavailableError("timeout") from e
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Ranking HTTP error for model {self._model}: "
                f"{e.response.status_code} - {e.response.text[:200]}"
            )
            raise RankingUnavailableError(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Ranking request failed for model {self._model}: {e}")
            raise RankingUnavailableError("network error") from e

        try:
            data = response.json()
        except ValueError as e:
            raise RankingUnavailableError("invalid JSON envelope") from e

        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: Any) -> str:
        """Pull the first candidate's text out of an untrusted envelope.

        Raises:
            RankingUnavailableError: Envelope is not the documented shape
        """
        if not isinstance(data, dict):
            raise RankingUnavailableError("unexpected response envelope")
        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback")
            logger.warning(f"Ranking service returned no candidates: {feedback}")
            return ""

        candidate = candidates[0] if isinstance(candidates, list) else None
        if not isinstance(candidate, dict):
            raise RankingUnavailableError("unexpected response envelope")
        # A candidate stopped by a safety filter carries no content
        content = candidate.get("content") or {}
        parts = (content.get("parts") or []) if isinstance(content, dict) else None
        if not isinstance(parts, list):
            raise RankingUnavailableError("unexpected response envelope")
        return "".join(
            part["text"] for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
