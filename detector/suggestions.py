"""Gemini-backed free-text review suggestions for a whole file."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from detector.errors import ExternalServiceError
from detector.http_retry import request_with_retry
from detector.languages import LanguageTag

logger = logging.getLogger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash"

PROMPT_TEMPLATE = "Review the following {language} code and suggest improvements in 200-250 words:\n\n{content}"


class GeminiSuggestionProvider:
    """
    RemoteSuggestionProvider backed by the Gemini generateContent API.

    suggest() never raises for service trouble: failures are logged and
    reported as "no suggestion" so a flaky API cannot stop the run.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        api_url: str = GEMINI_API_URL,
        timeout: float = 30.0,
        max_retries: int = 2,
        backoff: float = 1.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.model = model
        self.max_retries = max_retries
        self.backoff = backoff
        self.client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers={"Content-Type": "application/json", "x-goog-api-key": api_key},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def suggest(self, content: str, language: LanguageTag) -> Optional[str]:
        body = {
            "contents": [
                {"parts": [{"text": PROMPT_TEMPLATE.format(language=language.display_name, content=content)}]}
            ]
        }
        try:
            response = request_with_retry(
                self.client,
                "POST",
                f"/models/{self.model}:generateContent",
                what=f"Gemini {self.model} request",
                max_retries=self.max_retries,
                backoff=self.backoff,
                json=body,
            )
            data = response.json()
        except (ExternalServiceError, ValueError) as exc:
            logger.error("Gemini request failed: %s", exc)
            return None

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            logger.warning("No usable candidate in Gemini response for %s code", language.display_name)
            return None
        return text.strip() or None
