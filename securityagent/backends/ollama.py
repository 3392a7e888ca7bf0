"""
Local Ollama backend over the /api/generate endpoint.

The default URL is plain http, which is what a stock Ollama server listens
on. Deployments behind a TLS proxy set OLLAMA_URL (or ollama.url in the
config file) to an https URL.
"""

import logging
from typing import Optional

import httpx

from securityagent.backends.base import (
    HTTPBackend, DEFAULT_TIMEOUT, DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY,
)

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://host.docker.internal:11434"
DEFAULT_OLLAMA_MODEL = "llama3"


class OllamaBackend(HTTPBackend):
    """Ollama provider reachable from the CI container."""

    name = "ollama"

    def __init__(
        self,
        model: str = DEFAULT_OLLAMA_MODEL,
        base_url: str = DEFAULT_OLLAMA_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        client: Optional[httpx.Client] = None,
    ):
        super().__init__(timeout=timeout, max_retries=max_retries, retry_delay=retry_delay, client=client)
        self.model = model
        self.base_url = base_url.rstrip("/")

    @property
    def url(self) -> str:
        return f"{self.base_url}/api/generate"

    def submit(self, prompt: str) -> Optional[str]:
        payload = {"model": self.model, "prompt": prompt, "stream": False}
        logger.debug("Calling Ollama %s at %s (%d chars)", self.model, self.base_url, len(prompt))

        data = self._post_json(self.url, payload)
        text = data.get("response")
        if not isinstance(text, str) or not text:
            return None
        return text
