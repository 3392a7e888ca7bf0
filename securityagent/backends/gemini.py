"""
Hosted Gemini backend over the public generateContent REST endpoint.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from securityagent.backends.base import (
    HTTPBackend, DEFAULT_TIMEOUT, DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY,
)
from securityagent.exceptions import BackendError, ConfigurationError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


class GeminiBackend(HTTPBackend):
    """Google Gemini provider, authenticated with an API key in the query string."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        client: Optional[httpx.Client] = None,
    ):
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY is required for the gemini provider")
        super().__init__(timeout=timeout, max_retries=max_retries, retry_delay=retry_delay, client=client)
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

    @property
    def url(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateContent"

    def submit(self, prompt: str) -> Optional[str]:
        """Send the prompt as the sole content of a generation request."""
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        logger.debug("Calling Gemini %s (%d chars)", self.model, len(prompt))

        data = self._post_json(self.url, payload, params={"key": self.api_key})
        return self._extract_text(data)

    def _extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        """Concatenate candidates[0].content.parts[*].text; None when there are no candidates."""
        candidates = data.get("candidates")
        if not candidates:
            logger.debug("Gemini response had no candidates")
            return None

        try:
            parts = candidates[0].get("content", {}).get("parts", [])
            text = "".join(part.get("text", "") or "" for part in parts)
        except (AttributeError, TypeError, KeyError, IndexError) as e:
            raise BackendError(f"gemini returned a malformed candidate: {e}", provider=self.name) from e

        return text or None
