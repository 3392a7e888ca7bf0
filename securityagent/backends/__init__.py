"""
Generative text backends.

Provides the hosted Gemini and local Ollama providers behind a single
submit(prompt) interface.
"""

from securityagent.backends.base import GenerativeBackend, HTTPBackend
from securityagent.backends.gemini import GeminiBackend
from securityagent.backends.ollama import OllamaBackend
from securityagent.exceptions import ConfigurationError

__all__ = [
    "GenerativeBackend",
    "HTTPBackend",
    "GeminiBackend",
    "OllamaBackend",
    "get_backend",
]


def get_backend(config) -> GenerativeBackend:
    """
    Get the backend selected by an AgentConfig.

    The choice is fixed for the whole run; there is no fallback
    between providers.
    """
    provider = config.provider.lower()

    if provider == "gemini":
        return GeminiBackend(
            api_key=config.gemini_api_key or "",
            model=config.gemini_model,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
        )
    if provider in ("ollama", "local"):
        return OllamaBackend(
            model=config.ollama_model,
            base_url=config.ollama_url,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
        )

    raise ConfigurationError(f"Unknown provider: {config.provider}")
